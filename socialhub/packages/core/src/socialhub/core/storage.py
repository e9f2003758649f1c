"""本地持久化存储 -- 浏览器 localStorage 的等价物

字符串 key -> 字符串 value 的同步存储，用于：
- 登录会话记录
- 按 (实体, emoji, 用户) 组合 key 保存的点赞/反应标记
- 后端不可用时的本地兜底数据（local:desabafos / local:tasks / local:events）

单进程单实例使用，不做跨进程加锁。
"""

import json
from pathlib import Path
from typing import Any, Protocol

import structlog

log = structlog.get_logger()


class LocalStorage(Protocol):
    """本地存储接口"""

    def get_item(self, key: str) -> str | None:
        """读取 key，不存在返回 None"""
        ...

    def set_item(self, key: str, value: str) -> None:
        """写入 key"""
        ...

    def remove_item(self, key: str) -> None:
        """删除 key（不存在时忽略）"""
        ...

    def keys(self) -> list[str]:
        """列出所有 key"""
        ...


class MemoryStorage:
    """纯内存实现，进程退出即丢失"""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage:
    """单个 JSON 文件实现，每次写入整体落盘

    文件损坏或不可读时按空存储处理（记录 warning），不阻塞启动。
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._data: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("local_storage_load_failed", path=str(self._path), error=str(e))
            return {}
        if not isinstance(raw, dict):
            log.warning("local_storage_invalid_format", path=str(self._path))
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps(self._data, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        tmp_path.replace(self._path)

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def keys(self) -> list[str]:
        return list(self._data)


def read_json_list(storage: LocalStorage, key: str) -> list[dict[str, Any]]:
    """读取 JSON 数组形式的本地列表，格式错误时返回空列表"""
    raw = storage.get_item(key)
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except ValueError as e:
        log.warning("read_local_list_failed", key=key, error=str(e))
        return []
    if not isinstance(items, list):
        log.warning("read_local_list_not_array", key=key)
        return []
    return [item for item in items if isinstance(item, dict)]


def write_json_list(storage: LocalStorage, key: str, items: list[dict[str, Any]]) -> None:
    """写入 JSON 数组形式的本地列表"""
    storage.set_item(key, json.dumps(items, ensure_ascii=False, default=str))
