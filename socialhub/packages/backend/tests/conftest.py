"""packages/backend 测试配置 -- TableClient 与数据访问组 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest_asyncio
from socialhub.backend import BackendConfig, DataAccess, SqliteTableClient, create_data_access
from socialhub.core.storage import MemoryStorage


@pytest_asyncio.fixture
async def table_client(db_conn: aiosqlite.Connection) -> SqliteTableClient:
    """基于临时数据库的 TableClient"""
    return SqliteTableClient(db_conn)


@pytest_asyncio.fixture
async def data_access(tmp_path: Path, storage: MemoryStorage) -> AsyncGenerator[DataAccess, None]:
    """完整的数据访问组（含倾诉本地兜底）"""
    config = BackendConfig(db_path=str(tmp_path / "sqlite" / "backend.db"), timeout_s=2.0)
    data = await create_data_access(config, storage)
    yield data
    await data.close()
