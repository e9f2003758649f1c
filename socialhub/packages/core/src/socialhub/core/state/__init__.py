"""SocialHub Core State -- 实体内存视图

界面读取的当前数据；只通过 Coordinator 变更。
"""

from .base import EntitySnapshot, EntityStore, InsertPosition
from .stores import (
    CommunityMessageStore,
    CommunityStore,
    ConversationStore,
    DesabafoStore,
    MessageStore,
    NotificationStore,
    PostStore,
    TagStore,
    TaskStore,
    UserStore,
)

__all__ = [
    "EntityStore",
    "EntitySnapshot",
    "InsertPosition",
    "PostStore",
    "DesabafoStore",
    "TaskStore",
    "TagStore",
    "UserStore",
    "CommunityStore",
    "ConversationStore",
    "MessageStore",
    "CommunityMessageStore",
    "NotificationStore",
]
