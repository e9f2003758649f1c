"""任务导入/导出

导出格式是任务对象的 JSON 数组（缩进 2，字段名与前端一致的 camelCase 样式字段）。
导入只接受 JSON 数组；任何一项无法解析都视为整个文件无效。
"""

import json

from pydantic import TypeAdapter, ValidationError
from socialhub.core.exceptions import SubtaskDepthError, TaskImportError
from socialhub.core.models import Task
from socialhub.core.subtasks import validate_depth

EXPORT_FILENAME = "socialhub_tasks.json"

_TASK_LIST = TypeAdapter(list[Task])


def export_tasks(tasks: list[Task]) -> str:
    """导出任务列表为 JSON 文本"""
    return json.dumps(
        [task.model_dump(mode="json", by_alias=True) for task in tasks],
        ensure_ascii=False,
        indent=2,
    )


def import_tasks(text: str | bytes) -> list[Task]:
    """解析导入文件

    Raises:
        TaskImportError: 不是 JSON、不是数组、条目无效或子任务嵌套过深
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise TaskImportError("O arquivo está corrompido ou em formato inválido.") from e
    if not isinstance(data, list):
        raise TaskImportError("Formato de arquivo inválido.")

    try:
        tasks = _TASK_LIST.validate_python(data)
    except ValidationError as e:
        raise TaskImportError(f"Tarefas inválidas: {e.error_count()} erro(s).") from e

    for task in tasks:
        try:
            validate_depth(task.subtasks)
        except SubtaskDepthError as e:
            raise TaskImportError(str(e)) from e
    return tasks
