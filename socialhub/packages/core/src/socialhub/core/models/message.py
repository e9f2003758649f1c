"""Conversation / Message Domain Model

Conversation 冗余保存最后一条消息的预览（last_message_preview/last_message_date）。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .post import ReactionMap
from .user import User


class Message(BaseModel):
    """私信消息"""

    id: str = Field(description="消息 ID")
    conversation_id: str | None = Field(default=None, description="所属会话 ID")
    sender_id: str = Field(description="发送者 ID")
    recipient_id: str = Field(description="接收者 ID")
    content: str = Field(description="消息内容")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="发送时间",
    )
    read: bool = Field(default=False, description="是否已读")
    reactions: ReactionMap = Field(default_factory=dict, description="表情反应计数")


class Conversation(BaseModel):
    """私信会话"""

    id: str = Field(description="会话 ID")
    participant_id: str | None = Field(default=None, description="对方用户 ID")
    participant: User | None = Field(default=None, description="对方用户资料")
    last_message_preview: str = Field(default="", description="最后一条消息预览")
    last_message_date: datetime | None = Field(default=None, description="最后一条消息时间")
    unread_count: int = Field(default=0, ge=0, description="未读数")
