"""CalendarService -- 日历事件（仅本地）

事件保存在本地列表 local:events，只在 sync_local_to_backend 时上传。
"""

from datetime import datetime

import structlog
from socialhub.core.config import LOCAL_EVENTS_KEY
from socialhub.core.ids import new_id
from socialhub.core.models import CalendarEvent
from socialhub.core.storage import LocalStorage, read_json_list, write_json_list

log = structlog.get_logger()


class CalendarService:
    """本地日历事件读写"""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def list_events(self, user_id: str | None = None) -> list[CalendarEvent]:
        """按日期正序列出事件；user_id 不为 None 时只返回该用户（及无归属）的事件"""
        events: list[CalendarEvent] = []
        for item in read_json_list(self._storage, LOCAL_EVENTS_KEY):
            try:
                events.append(CalendarEvent.model_validate(item))
            except ValueError as e:
                log.warning("local_event_invalid", event_id=item.get("id"), error=str(e))
        if user_id is not None:
            events = [e for e in events if e.user_id in (None, user_id)]
        return sorted(events, key=lambda e: e.date)

    def events_on(self, day: datetime, user_id: str | None = None) -> list[CalendarEvent]:
        return [e for e in self.list_events(user_id) if e.date.date() == day.date()]

    def add_event(self, title: str, date: datetime, user_id: str | None = None) -> CalendarEvent:
        event = CalendarEvent(id=new_id("event"), title=title, date=date, user_id=user_id)
        self._write([*self.list_events(), event])
        return event

    def delete_event(self, event_id: str) -> bool:
        events = self.list_events()
        remaining = [e for e in events if e.id != event_id]
        if len(remaining) == len(events):
            return False
        self._write(remaining)
        return True

    def _write(self, events: list[CalendarEvent]) -> None:
        write_json_list(self._storage, LOCAL_EVENTS_KEY, [e.model_dump(mode="json") for e in events])
