"""EventRepository -- events 表访问（仅在本地日历同步时写入）"""

from socialhub.core.models import CalendarEvent

from ..rows import event_record, parse_event_row
from .base import BaseRepository


class EventRepository(BaseRepository):
    """日历事件写入"""

    async def get_event_ids(self) -> set[str] | None:
        """后端已有的事件 id；后端失败返回 None"""

        async def _run() -> set[str]:
            rows = await self._client.select("events", columns=["id"])
            return {r["id"] for r in rows}

        return await self._call("get_event_ids", _run(), None)

    async def create_event(self, event: CalendarEvent) -> CalendarEvent | None:
        async def _run() -> CalendarEvent:
            row = await self._client.insert("events", event_record(event))
            return parse_event_row(row)

        return await self._call("create_event", _run(), None)
