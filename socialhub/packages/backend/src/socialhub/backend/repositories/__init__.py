"""按表划分的 Repository"""

from .base import BaseRepository
from .communities import CommunityRepository, TagRepository
from .conversations import ConversationRepository
from .desabafos import DesabafoRepository
from .events import EventRepository
from .posts import PostRepository
from .tasks import TaskRepository
from .users import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PostRepository",
    "DesabafoRepository",
    "TaskRepository",
    "ConversationRepository",
    "CommunityRepository",
    "TagRepository",
    "EventRepository",
]
