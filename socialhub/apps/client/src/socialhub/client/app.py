"""客户端应用组装

创建数据访问组、实体 Store、Coordinator 和各业务服务，并管理生命周期：
启动时初始化日志、打开数据库、恢复会话并尝试把本地兜底数据迁移到后端；
关闭时释放数据库连接。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from pydantic import BaseModel, Field
from socialhub.backend import BackendConfig, DataAccess, SyncSummary, create_data_access, sync_local_to_backend
from socialhub.core.config import get_local_storage_path
from socialhub.core.coordinator import OptimisticCoordinator
from socialhub.core.models import Community, Post, Task, User
from socialhub.core.notifier import ToastCenter
from socialhub.core.state import (
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
from socialhub.core.storage import JsonFileStorage, LocalStorage

from .auth import AuthService, SessionRepository
from .logging_config import setup_logging
from .services.calendar_service import CalendarService
from .services.community_service import CommunityService
from .services.desabafo_service import DesabafoService
from .services.feed_service import FeedService
from .services.message_service import MessageService
from .services.notification_service import NotificationService
from .services.profile_service import ProfileService
from .services.tag_service import TagService
from .services.task_service import TaskService

log = structlog.get_logger()


class FallbackData(BaseModel):
    """后端不可用时展示的内置数据（由调用方提供）"""

    users: list[User] = Field(default_factory=list, description="可登录的内置用户")
    posts: list[Post] = Field(default_factory=list, description="内置帖子")
    tasks: list[Task] = Field(default_factory=list, description="内置任务")
    communities: list[Community] = Field(default_factory=list, description="内置社区")


class ClientApp:
    """客户端应用 -- 持有共享的 Store、Coordinator 和服务"""

    def __init__(
        self,
        data: DataAccess,
        storage: LocalStorage,
        fallback: FallbackData | None = None,
    ) -> None:
        fallback = fallback or FallbackData()
        self.data = data
        self.storage = storage
        self.toasts = ToastCenter()
        self.coordinator = OptimisticCoordinator(self.toasts)

        self.auth = AuthService(
            data.users,
            SessionRepository(storage),
            fallback_users=fallback.users,
        )
        self.feed = FeedService(data.posts, PostStore(), self.coordinator, storage, fallback.posts)
        self.desabafos = DesabafoService(data.desabafos, DesabafoStore(), self.coordinator, storage)
        self.tasks = TaskService(data.tasks, TaskStore(), self.coordinator, self.toasts, fallback.tasks)
        self.messages = MessageService(
            data.conversations,
            ConversationStore(),
            MessageStore(),
            self.coordinator,
        )
        self.communities = CommunityService(
            data.communities,
            CommunityStore(),
            CommunityMessageStore(),
            self.coordinator,
            fallback.communities,
        )
        self.notifications = NotificationService(NotificationStore())
        self.profile = ProfileService(
            data.users,
            UserStore(),
            self.coordinator,
            on_updated=self.auth.update_current_user,
        )
        self.tags = TagService(data.tags, TagStore(), self.coordinator)
        self.calendar = CalendarService(storage)

    async def startup(self) -> User | None:
        """恢复会话，并迁移匿名期间保存在本地的数据"""
        user = await self.auth.restore()
        await self.sync(user.id if user else None)
        return user

    async def login(self, email: str, password: str) -> User:
        """登录成功后把本地数据归到该用户并迁移"""
        user = await self.auth.login(email, password)
        await self.sync(user.id)
        return user

    async def sync(self, user_id: str | None = None) -> SyncSummary:
        summary = await sync_local_to_backend(self.data, self.storage, user_id)
        log.info(
            "local_sync_summary",
            tasks=summary.tasks.migrated,
            desabafos=summary.desabafos.migrated,
            events=summary.events.migrated,
        )
        return summary

    async def close(self) -> None:
        await self.data.close()


async def create_client_app(
    config: BackendConfig | None = None,
    storage: LocalStorage | None = None,
    fallback: FallbackData | None = None,
) -> ClientApp:
    """创建客户端应用

    Args:
        config: 后端配置，None 时从环境变量加载
        storage: 本地存储，None 时使用 SOCIALHUB_LOCAL_STORAGE_PATH 指向的 JSON 文件
        fallback: 内置数据
    """
    storage = storage or JsonFileStorage(get_local_storage_path())
    data = await create_data_access(config, storage)
    return ClientApp(data, storage, fallback)


@asynccontextmanager
async def client_session(
    config: BackendConfig | None = None,
    storage: LocalStorage | None = None,
    fallback: FallbackData | None = None,
) -> AsyncGenerator[ClientApp, None]:
    """应用生命周期管理：启动时初始化日志和数据库并恢复会话，退出时关闭连接"""
    setup_logging()
    app = await create_client_app(config, storage, fallback)
    try:
        await app.startup()
        yield app
    finally:
        await app.close()
