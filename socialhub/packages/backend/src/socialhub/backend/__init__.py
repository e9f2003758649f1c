"""SocialHub Backend -- 数据访问层

提供工厂函数创建共享数据库连接的 Repository 实例组。
所有读写都经过超时竞争，失败时返回空值哨兵而不是抛出异常。
"""

from pathlib import Path

import aiosqlite
from socialhub.core.storage import LocalStorage

from .client import SqliteTableClient, TableClient
from .config import BackendConfig, load_backend_config
from .exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnavailableError,
    ForeignKeyViolationError,
)
from .repositories import (
    CommunityRepository,
    ConversationRepository,
    DesabafoRepository,
    EventRepository,
    PostRepository,
    TagRepository,
    TaskRepository,
    UserRepository,
)
from .sqlite_init import init_db
from .sync import SyncKindResult, SyncSummary, sync_local_to_backend
from .timeout import with_timeout


class DataAccess:
    """Repository 实例组 -- 共享同一个 TableClient"""

    def __init__(
        self,
        client: TableClient,
        config: BackendConfig,
        storage: LocalStorage | None = None,
        conn: aiosqlite.Connection | None = None,
    ) -> None:
        self.conn = conn
        self.client = client
        self.config = config
        timeout_s = config.timeout_s
        self.users = UserRepository(client, timeout_s)
        self.posts = PostRepository(client, timeout_s)
        self.desabafos = DesabafoRepository(
            client,
            timeout_s,
            storage=storage,
            enable_local_fallback=config.enable_local_fallback,
        )
        self.tasks = TaskRepository(client, timeout_s)
        self.conversations = ConversationRepository(client, timeout_s)
        self.communities = CommunityRepository(client, timeout_s)
        self.tags = TagRepository(client, timeout_s)
        self.events = EventRepository(client, timeout_s)

    async def close(self) -> None:
        """关闭数据库连接"""
        if self.conn is not None:
            await self.conn.close()
            self.conn = None


async def create_data_access(
    config: BackendConfig | None = None,
    storage: LocalStorage | None = None,
) -> DataAccess:
    """创建数据访问组

    Args:
        config: 后端配置，None 时从环境变量加载
        storage: 本地存储（倾诉兜底使用）

    Returns:
        DataAccess 实例
    """
    config = config or load_backend_config()

    # 确保数据库目录存在
    if config.db_path != ":memory:":
        Path(config.db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(config.db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return DataAccess(SqliteTableClient(conn), config, storage=storage, conn=conn)


__all__ = [
    "DataAccess",
    "create_data_access",
    "BackendConfig",
    "load_backend_config",
    "TableClient",
    "SqliteTableClient",
    "init_db",
    "with_timeout",
    "sync_local_to_backend",
    "SyncSummary",
    "SyncKindResult",
    "BackendError",
    "BackendTimeoutError",
    "BackendUnavailableError",
    "ForeignKeyViolationError",
    "UserRepository",
    "PostRepository",
    "DesabafoRepository",
    "TaskRepository",
    "ConversationRepository",
    "CommunityRepository",
    "TagRepository",
    "EventRepository",
]
