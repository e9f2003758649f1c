"""DesabafoService 测试 -- 表情反应的幂等切换"""

from unittest.mock import AsyncMock

import pytest
from socialhub.backend import BackendUnavailableError, DataAccess, DesabafoRepository
from socialhub.client.services.desabafo_service import DesabafoService
from socialhub.core.cancellation import CancellationToken
from socialhub.core.config import LOCAL_DESABAFOS_KEY
from socialhub.core.coordinator import MutationStatus, OptimisticCoordinator
from socialhub.core.models import Desabafo
from socialhub.core.state import DesabafoStore
from socialhub.core.storage import MemoryStorage


@pytest.fixture
def service(data_access: DataAccess, coordinator: OptimisticCoordinator, storage: MemoryStorage) -> DesabafoService:
    return DesabafoService(data_access.desabafos, DesabafoStore(), coordinator, storage)


class TestReact:
    """按 (倾诉, emoji, 用户) 切换反应"""

    async def test_heart_toggle(self, service: DesabafoService, data_access: DataAccess, storage: MemoryStorage):
        """❤️ 计数 2 -> 3（写入标记）-> 2（清除标记）"""
        await data_access.desabafos.create_desabafo(Desabafo(id="D", reactions={"❤️": 2}))
        await service.load()
        key = "desabafo-react:D:❤️:U"

        await service.react("D", "❤️", "U")
        assert service.store.get("D").reactions["❤️"] == 3
        assert storage.get_item(key) is not None

        await service.react("D", "❤️", "U")
        assert service.store.get("D").reactions["❤️"] == 2
        assert storage.get_item(key) is None
        remote = await data_access.desabafos.get_desabafos()
        assert remote[0].reactions["❤️"] == 2

    async def test_switching_emoji_undoes_previous(self, service: DesabafoService, data_access: DataAccess):
        await data_access.desabafos.create_desabafo(Desabafo(id="D", reactions={"❤️": 1, "😢": 0}))
        await service.load()

        await service.react("D", "❤️", "U")
        await service.react("D", "😢", "U")

        assert service.store.get("D").reactions == {"❤️": 1, "😢": 1}
        assert service.user_reaction("D", "U") == "😢"

    async def test_count_never_negative(self, service: DesabafoService, data_access: DataAccess, storage):
        await data_access.desabafos.create_desabafo(Desabafo(id="D"))
        await service.load()
        # 标记存在但计数为 0（例如其他设备已撤销）
        storage.set_item("desabafo-react:D:😂:U", "1")

        await service.react("D", "😂", "U")

        assert service.store.get("D").reactions["😂"] == 0
        assert storage.get_item("desabafo-react:D:😂:U") is None

    async def test_failure_keeps_marker_absent(self, coordinator, storage: MemoryStorage, toasts):
        repo = AsyncMock()
        repo.update_reactions.return_value = False
        original = Desabafo(id="D", reactions={"❤️": 2})
        service = DesabafoService(repo, DesabafoStore([original]), coordinator, storage)

        result = await service.react("D", "❤️", "U")

        assert result.status == MutationStatus.ROLLED_BACK
        assert service.store.get("D") == original
        assert storage.keys() == []
        assert toasts.toasts[0].variant == "destructive"

    async def test_failure_after_view_closed_still_rolls_back(self, coordinator, storage: MemoryStorage, toasts):
        """视图在请求期间关闭：计数仍回滚，只是不再提示"""
        token = CancellationToken()

        async def update_reactions(desabafo_id, reactions):
            token.cancel()
            return False

        repo = AsyncMock()
        repo.update_reactions.side_effect = update_reactions
        original = Desabafo(id="D", reactions={"❤️": 2})
        service = DesabafoService(repo, DesabafoStore([original]), coordinator, storage)

        result = await service.react("D", "❤️", "U", token=token)

        assert result.status == MutationStatus.ROLLED_BACK
        assert service.store.get("D").reactions == {"❤️": 2}
        assert storage.keys() == []
        assert toasts.toasts == []

    async def test_success_after_view_closed_writes_marker(self, coordinator, storage: MemoryStorage):
        token = CancellationToken()

        async def update_reactions(desabafo_id, reactions):
            token.cancel()
            return True

        repo = AsyncMock()
        repo.update_reactions.side_effect = update_reactions
        service = DesabafoService(repo, DesabafoStore([Desabafo(id="D", reactions={"❤️": 2})]), coordinator, storage)

        await service.react("D", "❤️", "U", token=token)
        await service.react("D", "❤️", "U")

        assert service.store.get("D").reactions == {"❤️": 2}
        assert storage.keys() == []


class TestCrud:
    async def test_create_falls_back_to_local(self, coordinator, storage: MemoryStorage):
        """后端写入失败时保存到本地，界面视为成功"""
        failing = AsyncMock()
        failing.insert.side_effect = BackendUnavailableError(ConnectionError("offline"))
        repo = DesabafoRepository(failing, storage=storage)
        service = DesabafoService(repo, DesabafoStore(), coordinator, storage)

        result = await service.create("hoje foi difícil #cansaço", hashtags="#cansaço", user_id="U")

        assert result.ok
        assert service.store.ids() == [result.entity.id]
        assert storage.get_item(LOCAL_DESABAFOS_KEY) is not None

    async def test_update_and_delete(self, service: DesabafoService, data_access: DataAccess):
        await data_access.desabafos.create_desabafo(Desabafo(id="D", content="antes"))
        await service.load()

        await service.update("D", "depois")
        assert service.store.get("D").updated_at is not None
        assert (await data_access.desabafos.get_desabafos())[0].content == "depois"

        await service.delete("D")
        assert service.store.ids() == []
        assert await data_access.desabafos.get_desabafos() == []

    async def test_add_comment(self, service: DesabafoService, data_access: DataAccess):
        await data_access.desabafos.create_desabafo(Desabafo(id="D"))
        await service.load()
        result = await service.add_comment("D", "força!")
        assert result.ok
        assert [c.content for c in service.store.get("D").comments] == ["força!"]
