"""各实体类型的内存 Store"""

from ..models import (
    Community,
    CommunityMessage,
    Conversation,
    Desabafo,
    Message,
    Notification,
    Post,
    Tag,
    Task,
    User,
)
from .base import EntityStore


class PostStore(EntityStore[Post]):
    """动态帖子（新帖在前）"""


class DesabafoStore(EntityStore[Desabafo]):
    """匿名倾诉（新帖在前）"""


class TaskStore(EntityStore[Task]):
    """任务列表"""


class TagStore(EntityStore[Tag]):
    """任务标签"""


class UserStore(EntityStore[User]):
    """用户资料"""


class CommunityStore(EntityStore[Community]):
    """社区列表"""


class ConversationStore(EntityStore[Conversation]):
    """私信会话列表"""


class MessageStore(EntityStore[Message]):
    """私信消息（按发送顺序追加）"""

    def for_conversation(self, conversation_id: str) -> list[Message]:
        return [m for m in self.all() if m.conversation_id == conversation_id]


class CommunityMessageStore(EntityStore[CommunityMessage]):
    """社区聊天消息"""

    def for_community(self, community_id: str) -> list[CommunityMessage]:
        return [m for m in self.all() if m.community_id == community_id]


class NotificationStore(EntityStore[Notification]):
    """站内通知"""

    def unread_count(self) -> int:
        return sum(1 for n in self.all() if not n.read)
