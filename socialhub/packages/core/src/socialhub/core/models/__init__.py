"""SocialHub Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .community import Community, CommunityMessage
from .desabafo import Desabafo, DesabafoComment
from .enums import Alignment, BorderStyle, NotificationType, Priority
from .message import Conversation, Message
from .notification import CalendarEvent, Notification
from .post import Comment, Post, ReactionMap, parse_hashtags
from .session import Session, SessionUser
from .task import Attachment, Subtask, Tag, Task
from .user import User

__all__ = [
    # 枚举
    "Priority",
    "BorderStyle",
    "Alignment",
    "NotificationType",
    # 用户 / 会话
    "User",
    "Session",
    "SessionUser",
    # 动态
    "Post",
    "Comment",
    "ReactionMap",
    "parse_hashtags",
    # 倾诉
    "Desabafo",
    "DesabafoComment",
    # 任务
    "Task",
    "Subtask",
    "Tag",
    "Attachment",
    # 私信
    "Conversation",
    "Message",
    # 社区
    "Community",
    "CommunityMessage",
    # 通知 / 日历
    "Notification",
    "CalendarEvent",
]
