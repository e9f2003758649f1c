"""EntityStore -- 实体的内存视图

按插入顺序保存实体，id 唯一。
变更只应来自 Coordinator（乐观更新/回滚）和加载流程。
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

InsertPosition = Literal["start", "end"]


@dataclass(frozen=True)
class EntitySnapshot(Generic[T]):
    """单个实体的快照

    entity 为 None 表示快照时该实体不存在（回滚时应删除）。
    """

    entity_id: str
    index: int | None
    entity: T | None


class EntityStore(Generic[T]):
    """有序、按 id 唯一的内存集合"""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: list[T] = []
        self.set_all(items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return self._index_of(entity_id) is not None

    def all(self) -> list[T]:
        """当前全部实体（浅拷贝列表）"""
        return list(self._items)

    def ids(self) -> list[str]:
        return [item.id for item in self._items]  # type: ignore[attr-defined]

    def get(self, entity_id: str) -> T | None:
        index = self._index_of(entity_id)
        return None if index is None else self._items[index]

    def set_all(self, items: Iterable[T]) -> None:
        """整体替换（加载流程使用），重复 id 保留第一个"""
        seen: set[str] = set()
        result: list[T] = []
        for item in items:
            item_id = item.id  # type: ignore[attr-defined]
            if item_id in seen:
                continue
            seen.add(item_id)
            result.append(item)
        self._items = result

    def put(self, entity: T, position: InsertPosition = "start") -> None:
        """存在则原位替换，否则按 position 插入"""
        index = self._index_of(entity.id)  # type: ignore[attr-defined]
        if index is not None:
            self._items[index] = entity
        elif position == "start":
            self._items.insert(0, entity)
        else:
            self._items.append(entity)

    def extend(self, entities: Iterable[T]) -> None:
        """按顺序追加到末尾（已存在的 id 原位替换）"""
        for entity in entities:
            self.put(entity, position="end")

    def remove(self, entity_id: str) -> T | None:
        index = self._index_of(entity_id)
        if index is None:
            return None
        return self._items.pop(index)

    def rekey(self, old_id: str, new_id: str) -> None:
        """把客户端占位 id 替换为服务端分配的 id"""
        index = self._index_of(old_id)
        if index is None or old_id == new_id:
            return
        self._items[index] = self._items[index].model_copy(update={"id": new_id})

    # --- 快照 / 回滚 ---

    def snapshot(self, entity_id: str) -> EntitySnapshot[T]:
        index = self._index_of(entity_id)
        entity = None if index is None else self._items[index].model_copy(deep=True)
        return EntitySnapshot(entity_id=entity_id, index=index, entity=entity)

    def restore(self, snap: EntitySnapshot[T]) -> None:
        """把实体恢复到快照时的状态和位置"""
        current = self._index_of(snap.entity_id)
        if current is not None:
            self._items.pop(current)
        if snap.entity is None or snap.index is None:
            return
        self._items.insert(min(snap.index, len(self._items)), snap.entity)

    def snapshot_all(self) -> list[T]:
        return [item.model_copy(deep=True) for item in self._items]

    def restore_all(self, items: list[T]) -> None:
        self._items = list(items)

    def _index_of(self, entity_id: object) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == entity_id:  # type: ignore[attr-defined]
                return index
        return None
