"""全局 pytest 配置 -- 临时 SQLite 数据库 + 本地存储 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from socialhub.core.notifier import ToastCenter
from socialhub.core.storage import MemoryStorage


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from socialhub.backend.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def storage() -> MemoryStorage:
    """提供空的内存本地存储"""
    return MemoryStorage()


@pytest.fixture
def toasts() -> ToastCenter:
    """提供 toast 收集器"""
    return ToastCenter()
