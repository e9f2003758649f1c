"""UserRepository -- users 表访问"""

from typing import Any

from socialhub.core.models import User

from ..rows import parse_rows, parse_user_row, user_record
from .base import BaseRepository


class UserRepository(BaseRepository):
    """用户资料读写"""

    async def get_users(self) -> list[User]:
        async def _run() -> list[User]:
            rows = await self._client.select("users")
            return parse_rows(rows, parse_user_row, "users")

        return await self._call("get_users", _run(), [])

    async def get_users_by_ids(self, user_ids: list[str]) -> dict[str, User]:
        """按 id 集合批量查询，返回 id -> User"""
        ids = sorted({uid for uid in user_ids if uid})
        if not ids:
            return {}

        async def _run() -> dict[str, User]:
            rows = await self._client.select("users", in_={"id": ids})
            return {u.id: u for u in parse_rows(rows, parse_user_row, "users")}

        return await self._call("get_users_by_ids", _run(), {})

    async def get_user_by_id(self, user_id: str) -> User | None:
        async def _run() -> User | None:
            rows = await self._client.select("users", eq={"id": user_id}, limit=1)
            return parse_user_row(rows[0]) if rows else None

        return await self._call("get_user_by_id", _run(), None)

    async def get_user_by_email(self, email: str) -> User | None:
        async def _run() -> User | None:
            rows = await self._client.select("users", eq={"email": email}, limit=1)
            return parse_user_row(rows[0]) if rows else None

        return await self._call("get_user_by_email", _run(), None)

    async def create_user(self, user: User) -> User | None:
        async def _run() -> User:
            row = await self._client.insert("users", user_record(user))
            return parse_user_row(row)

        return await self._call("create_user", _run(), None)

    async def update_user(self, user_id: str, values: dict[str, Any]) -> User | None:
        """部分更新用户资料，返回更新后的用户；用户不存在返回 None"""

        async def _run() -> User | None:
            rows = await self._client.update("users", values, eq={"id": user_id})
            return parse_user_row(rows[0]) if rows else None

        return await self._call("update_user", _run(), None)
