"""Notification / CalendarEvent Domain Model

两者都只存在于客户端本地，不写入后端（CalendarEvent 仅在显式同步时上传）。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .enums import NotificationType
from .user import User


class Notification(BaseModel):
    """站内通知"""

    id: str = Field(description="通知 ID")
    actor: User | None = Field(default=None, description="触发者")
    type: NotificationType = Field(description="通知类型")
    post_id: str | None = Field(default=None, description="关联帖子 ID")
    content_preview: str | None = Field(default=None, description="内容预览")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="创建时间",
    )
    read: bool = Field(default=False, description="是否已读")


class CalendarEvent(BaseModel):
    """日历事件（仅本地）"""

    id: str = Field(description="事件 ID")
    title: str = Field(description="标题")
    date: datetime = Field(description="日期时间")
    user_id: str | None = Field(default=None, description="所属用户 ID")
