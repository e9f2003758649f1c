"""任务导入/导出格式测试"""

import json

import pytest
from socialhub.client.task_io import export_tasks, import_tasks
from socialhub.core.exceptions import TaskImportError
from socialhub.core.models import Subtask, Task


class TestExport:
    def test_uses_camel_case_style_fields(self):
        text = export_tasks([Task(id="t1", title="Ação", background_color="#fff")])
        data = json.loads(text)
        assert data[0]["backgroundColor"] == "#fff"
        assert data[0]["titleAlignment"] == "left"
        # 缩进 2 且保留非 ASCII 字符
        assert '\n  {' in text
        assert "Ação" in text

    def test_empty_list(self):
        assert json.loads(export_tasks([])) == []


class TestImport:
    def test_round_trip(self):
        tasks = [
            Task(id="t1", title="Um", subtasks=[Subtask(id="s1", title="sub")]),
            Task(id="t2", title="Dois", priority="urgent"),
        ]
        assert import_tasks(export_tasks(tasks)) == tasks

    def test_accepts_bytes(self):
        assert import_tasks(b'[{"id": "t1", "title": "x"}]')[0].id == "t1"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "not json",
            '{"id": "t1", "title": "x"}',
            '[{"id": "t1"}]',
            '[{"id": "t1", "title": "x", "priority": "critical"}]',
        ],
    )
    def test_invalid_files_rejected(self, text):
        with pytest.raises(TaskImportError):
            import_tasks(text)

    def test_too_deep_subtasks_rejected(self):
        deep = {"id": "1", "title": "1"}
        for level in range(2, 6):
            deep = {"id": str(level), "title": str(level), "subtasks": [deep]}
        with pytest.raises(TaskImportError):
            import_tasks(json.dumps([{"id": "t1", "title": "x", "subtasks": [deep]}]))
