"""NotificationService -- 站内通知（仅本地）"""

from socialhub.core.models import Notification
from socialhub.core.state import NotificationStore


class NotificationService:
    """通知已读状态管理"""

    def __init__(self, store: NotificationStore) -> None:
        self._store = store

    @property
    def store(self) -> NotificationStore:
        return self._store

    def load(self, notifications: list[Notification]) -> list[Notification]:
        """按时间倒序装载通知"""
        self._store.set_all(sorted(notifications, key=lambda n: n.created_date, reverse=True))
        return self._store.all()

    def mark_read(self, notification_id: str) -> Notification:
        """
        Raises:
            KeyError: 通知不存在
        """
        notification = self._store.get(notification_id)
        if notification is None:
            raise KeyError(notification_id)
        if not notification.read:
            notification = notification.model_copy(update={"read": True})
            self._store.put(notification)
        return notification

    def mark_all_read(self) -> int:
        """全部标记为已读，返回本次变更的数量"""
        changed = 0
        for notification in self._store.all():
            if not notification.read:
                self._store.put(notification.model_copy(update={"read": True}))
                changed += 1
        return changed

    def unread_count(self) -> int:
        return self._store.unread_count()
