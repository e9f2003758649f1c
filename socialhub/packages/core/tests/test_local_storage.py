"""本地持久化存储测试"""

import json
from pathlib import Path

from socialhub.core.ids import new_id
from socialhub.core.storage import JsonFileStorage, MemoryStorage, read_json_list, write_json_list


class TestJsonFileStorage:
    def test_persists_between_instances(self, tmp_path: Path):
        path = tmp_path / "local" / "storage.json"
        storage = JsonFileStorage(path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")

        reopened = JsonFileStorage(path)
        assert reopened.get_item("a") is None
        assert reopened.get_item("b") == "2"
        assert reopened.keys() == ["b"]

    def test_missing_file_is_empty(self, tmp_path: Path):
        storage = JsonFileStorage(tmp_path / "nope.json")
        assert storage.keys() == []

    def test_corrupt_file_treated_as_empty(self, tmp_path: Path):
        path = tmp_path / "storage.json"
        path.write_text("{not json", encoding="utf-8")
        storage = JsonFileStorage(path)
        assert storage.keys() == []
        storage.set_item("k", "v")
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_non_object_file_treated_as_empty(self, tmp_path: Path):
        path = tmp_path / "storage.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert JsonFileStorage(path).keys() == []

    def test_remove_missing_key_does_not_create_file(self, tmp_path: Path):
        path = tmp_path / "storage.json"
        JsonFileStorage(path).remove_item("x")
        assert not path.exists()


class TestJsonList:
    def test_round_trip(self):
        storage = MemoryStorage()
        write_json_list(storage, "local:tasks", [{"id": "t1"}, {"id": "t2"}])
        assert read_json_list(storage, "local:tasks") == [{"id": "t1"}, {"id": "t2"}]

    def test_invalid_values_yield_empty_list(self):
        storage = MemoryStorage({"bad": "{oops", "obj": '{"id": 1}'})
        assert read_json_list(storage, "bad") == []
        assert read_json_list(storage, "obj") == []
        assert read_json_list(storage, "missing") == []

    def test_non_dict_items_skipped(self):
        storage = MemoryStorage({"mixed": '[{"id": "a"}, 3, "x"]'})
        assert read_json_list(storage, "mixed") == [{"id": "a"}]


class TestIds:
    def test_prefix_and_uniqueness(self):
        first, second = new_id("post"), new_id("post")
        assert first.startswith("post-")
        assert first != second
