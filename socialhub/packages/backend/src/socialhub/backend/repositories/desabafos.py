"""DesabafoRepository -- desabafos 表访问 + 本地兜底

开启本地兜底时：
- 写入后端失败，改为写入本地列表 local:desabafos（视为成功）
- 读取时本地条目在前，后端条目在后（按 id 去重）
本地条目由 sync_local_to_backend 在后端恢复后迁移。
"""

from collections.abc import Callable
from typing import Any

import structlog
from socialhub.core.config import LOCAL_DESABAFOS_KEY
from socialhub.core.models import Desabafo, DesabafoComment, ReactionMap
from socialhub.core.storage import LocalStorage, read_json_list, write_json_list

from ..client import TableClient
from ..config import DEFAULT_TIMEOUT_S
from ..rows import desabafo_record, parse_desabafo_row, parse_rows
from .base import BaseRepository

log = structlog.get_logger()

# 区分"后端失败"与"后端返回空结果"
_FAILED = object()


class DesabafoRepository(BaseRepository):
    """匿名倾诉读写"""

    def __init__(
        self,
        client: TableClient,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        storage: LocalStorage | None = None,
        enable_local_fallback: bool = True,
    ) -> None:
        super().__init__(client, timeout_s)
        self._storage = storage
        self._fallback = enable_local_fallback and storage is not None

    # --- 本地兜底 ---

    def read_local(self) -> list[Desabafo]:
        """读取本地保存的倾诉"""
        if self._storage is None:
            return []
        items = read_json_list(self._storage, LOCAL_DESABAFOS_KEY)
        return parse_rows(items, parse_desabafo_row, "local:desabafos")

    def write_local(self, desabafos: list[Desabafo]) -> None:
        if self._storage is None:
            return
        write_json_list(
            self._storage,
            LOCAL_DESABAFOS_KEY,
            [d.model_dump(mode="json") for d in desabafos],
        )

    def _update_local(
        self,
        desabafo_id: str,
        change: Callable[[Desabafo], Desabafo],
    ) -> Desabafo | None:
        items = self.read_local()
        for index, item in enumerate(items):
            if item.id == desabafo_id:
                items[index] = change(item)
                self.write_local(items)
                return items[index]
        return None

    # --- 读取 ---

    async def get_desabafos(self) -> list[Desabafo]:
        """读取倾诉（新帖在前）；开启兜底时本地条目排在最前"""

        async def _run() -> list[Desabafo]:
            rows = await self._client.select("desabafos", order_by="created_at", descending=True)
            return parse_rows(rows, parse_desabafo_row, "desabafos")

        remote = await self._call("get_desabafos", _run(), [])
        if not self._fallback:
            return remote
        local = self.read_local()
        local_ids = {d.id for d in local}
        return local + [d for d in remote if d.id not in local_ids]

    async def get_remote_ids(self) -> set[str] | None:
        """后端已有的倾诉 id；后端失败返回 None"""

        async def _run() -> set[str]:
            rows = await self._client.select("desabafos", columns=["id"])
            return {r["id"] for r in rows}

        return await self._call("get_desabafo_ids", _run(), None)

    # --- 写入 ---

    async def create_desabafo(self, desabafo: Desabafo, *, allow_fallback: bool = True) -> Desabafo | None:
        """创建倾诉；后端失败且开启兜底时保存到本地并返回本地条目"""

        async def _run() -> Desabafo:
            row = await self._client.insert("desabafos", desabafo_record(desabafo))
            return parse_desabafo_row(row)

        created = await self._call("create_desabafo", _run(), None)
        if created is not None or not (self._fallback and allow_fallback):
            return created

        items = [d for d in self.read_local() if d.id != desabafo.id]
        self.write_local([desabafo, *items])
        log.info("desabafo_saved_locally", desabafo_id=desabafo.id)
        return desabafo

    async def update_desabafo(self, desabafo_id: str, values: dict[str, Any]) -> bool:
        """部分更新倾诉（内容、配图、标签等）"""

        async def _run() -> bool:
            rows = await self._client.update("desabafos", values, eq={"id": desabafo_id})
            return bool(rows)

        result = await self._call("update_desabafo", _run(), _FAILED)
        if result is not _FAILED and result:
            return True
        if not self._fallback:
            return False
        return self._update_local(desabafo_id, lambda d: d.model_copy(update=values)) is not None

    async def delete_desabafo(self, desabafo_id: str) -> bool:
        """删除倾诉（后端与本地都删除）"""

        async def _run() -> bool:
            return await self._client.delete("desabafos", eq={"id": desabafo_id}) > 0

        deleted = await self._call("delete_desabafo", _run(), False)
        if self._storage is not None:
            items = self.read_local()
            remaining = [d for d in items if d.id != desabafo_id]
            if len(remaining) != len(items):
                self.write_local(remaining)
                deleted = True
        return deleted

    async def update_reactions(self, desabafo_id: str, reactions: ReactionMap) -> bool:
        async def _run() -> bool:
            rows = await self._client.update(
                "desabafos",
                {"reactions": reactions},
                eq={"id": desabafo_id},
            )
            return bool(rows)

        result = await self._call("update_desabafo_reactions", _run(), _FAILED)
        if result is not _FAILED and result:
            return True
        if not self._fallback:
            return False
        updated = self._update_local(
            desabafo_id,
            lambda d: d.model_copy(update={"reactions": dict(reactions)}),
        )
        return updated is not None

    async def add_comment(self, desabafo_id: str, comment: DesabafoComment) -> Desabafo | None:
        """追加评论（读-改-写）"""

        async def _run() -> Desabafo | None:
            rows = await self._client.select("desabafos", eq={"id": desabafo_id}, limit=1)
            if not rows:
                return None
            current = parse_desabafo_row(rows[0])
            comments = [c.model_dump(mode="json") for c in current.comments]
            comments.append(comment.model_dump(mode="json"))
            updated = await self._client.update(
                "desabafos",
                {"comments": comments},
                eq={"id": desabafo_id},
            )
            return parse_desabafo_row(updated[0]) if updated else None

        result = await self._call("add_desabafo_comment", _run(), None)
        if result is not None or not self._fallback:
            return result
        return self._update_local(
            desabafo_id,
            lambda d: d.model_copy(update={"comments": [*d.comments, comment]}),
        )
