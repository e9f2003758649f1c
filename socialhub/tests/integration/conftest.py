"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from socialhub.backend import BackendConfig
from socialhub.client.app import ClientApp, FallbackData, create_client_app
from socialhub.core.models import Community, Post, User
from socialhub.core.storage import JsonFileStorage


@pytest.fixture
def backend_config(tmp_path: Path) -> BackendConfig:
    return BackendConfig(db_path=str(tmp_path / "sqlite" / "socialhub.db"), timeout_s=2.0)


@pytest.fixture
def local_storage(tmp_path: Path) -> JsonFileStorage:
    return JsonFileStorage(tmp_path / "local_storage.json")


@pytest.fixture
def fallback() -> FallbackData:
    return FallbackData(
        users=[User(id="demo-user", name="Visitante", email="demo@socialhub.app")],
        posts=[Post(id="demo-post", content="Bem-vindo ao SocialHub!")],
        communities=[Community(id="demo-community", name="Boas-vindas")],
    )


@pytest_asyncio.fixture
async def client_app(
    backend_config: BackendConfig,
    local_storage: JsonFileStorage,
    fallback: FallbackData,
) -> AsyncGenerator[ClientApp, None]:
    """集成测试用客户端应用"""
    app = await create_client_app(backend_config, local_storage, fallback)
    yield app
    await app.close()
