"""CommunityRepository / TagRepository -- communities、tags 表访问"""

from typing import Any

from socialhub.core.models import Community, Tag

from ..rows import community_record, parse_community_row, parse_rows, parse_tag_row, tag_record
from .base import BaseRepository


class CommunityRepository(BaseRepository):
    """社区读写（社区聊天只保存在本地）"""

    async def get_communities(self) -> list[Community]:
        async def _run() -> list[Community]:
            rows = await self._client.select("communities", order_by="created_date", descending=True)
            return parse_rows(rows, parse_community_row, "communities")

        return await self._call("get_communities", _run(), [])

    async def create_community(self, community: Community) -> Community | None:
        async def _run() -> Community:
            row = await self._client.insert("communities", community_record(community))
            return parse_community_row(row)

        return await self._call("create_community", _run(), None)


class TagRepository(BaseRepository):
    """任务标签读写"""

    async def get_tags(self) -> list[Tag]:
        async def _run() -> list[Tag]:
            rows = await self._client.select("tags", order_by="name")
            return parse_rows(rows, parse_tag_row, "tags")

        return await self._call("get_tags", _run(), [])

    async def create_tag(self, tag: Tag) -> Tag | None:
        async def _run() -> Tag:
            row = await self._client.insert("tags", tag_record(tag))
            return parse_tag_row(row)

        return await self._call("create_tag", _run(), None)

    async def update_tag(self, tag_id: str, values: dict[str, Any]) -> Tag | None:
        async def _run() -> Tag | None:
            rows = await self._client.update("tags", values, eq={"id": tag_id})
            return parse_tag_row(rows[0]) if rows else None

        return await self._call("update_tag", _run(), None)

    async def delete_tag(self, tag_id: str) -> bool:
        async def _run() -> bool:
            return await self._client.delete("tags", eq={"id": tag_id}) > 0

        return await self._call("delete_tag", _run(), False)
