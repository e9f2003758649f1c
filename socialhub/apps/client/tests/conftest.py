"""apps/client 测试配置 -- 数据访问组 + Coordinator fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from socialhub.backend import BackendConfig, DataAccess, create_data_access
from socialhub.core.coordinator import OptimisticCoordinator
from socialhub.core.notifier import ToastCenter
from socialhub.core.storage import MemoryStorage


@pytest_asyncio.fixture
async def data_access(tmp_path: Path, storage: MemoryStorage) -> AsyncGenerator[DataAccess, None]:
    """客户端测试用数据访问组"""
    config = BackendConfig(db_path=str(tmp_path / "client.db"), timeout_s=2.0)
    data = await create_data_access(config, storage)
    yield data
    await data.close()


@pytest.fixture
def coordinator(toasts: ToastCenter) -> OptimisticCoordinator:
    """共享 toast 收集器的 Coordinator"""
    return OptimisticCoordinator(toasts)
