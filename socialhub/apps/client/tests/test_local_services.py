"""社区、通知、资料、标签、日历服务测试"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from socialhub.backend import DataAccess
from socialhub.client.services.calendar_service import CalendarService
from socialhub.client.services.community_service import CommunityService
from socialhub.client.services.notification_service import NotificationService
from socialhub.client.services.profile_service import ProfileService
from socialhub.client.services.tag_service import TagService
from socialhub.core.coordinator import MutationStatus
from socialhub.core.models import Community, Notification, User
from socialhub.core.state import CommunityMessageStore, CommunityStore, NotificationStore, TagStore, UserStore
from socialhub.core.storage import MemoryStorage


class TestCommunityService:
    async def test_create_community(self, data_access: DataAccess, coordinator):
        service = CommunityService(data_access.communities, CommunityStore(), CommunityMessageStore(), coordinator)

        result = await service.create_community("Leitores", description="Clube do livro", category="Livros")

        assert result.ok
        assert result.entity.members_count == 1
        assert [c.name for c in await data_access.communities.get_communities()] == ["Leitores"]

    async def test_fallback_communities(self, data_access: DataAccess, coordinator):
        service = CommunityService(
            data_access.communities,
            CommunityStore(),
            CommunityMessageStore(),
            coordinator,
            fallback_communities=[Community(id="demo", name="Demo")],
        )
        assert [c.id for c in await service.load()] == ["demo"]

    def test_local_chat(self, coordinator):
        service = CommunityService(
            AsyncMock(), CommunityStore([Community(id="c1", name="Leitores")]), CommunityMessageStore(), coordinator
        )
        author = User(id="u1", name="Ana")

        first = service.send_message("c1", author, "Oi pessoal")
        service.send_message("c1", author, "Alguém lendo algo bom?")
        service.react_to_message(first.id, "❤️")
        service.react_to_message(first.id, "❤️")

        messages = service.message_store.for_community("c1")
        assert [m.content for m in messages] == ["Oi pessoal", "Alguém lendo algo bom?"]
        assert messages[0].reactions == {"❤️": 2}

    def test_chat_unknown_ids(self, coordinator):
        service = CommunityService(AsyncMock(), CommunityStore(), CommunityMessageStore(), coordinator)
        with pytest.raises(KeyError):
            service.send_message("missing", User(id="u1"), "x")
        with pytest.raises(KeyError):
            service.react_to_message("missing", "❤️")


class TestNotificationService:
    def test_read_state(self):
        now = datetime.now(UTC)
        service = NotificationService(NotificationStore())
        service.load(
            [
                Notification(id="n-old", type="like", created_date=now - timedelta(hours=2)),
                Notification(id="n-new", type="comment", created_date=now),
                Notification(id="n-read", type="follow", read=True, created_date=now - timedelta(hours=1)),
            ]
        )

        assert service.store.ids() == ["n-new", "n-read", "n-old"]
        assert service.unread_count() == 2
        assert service.mark_read("n-new").read is True
        assert service.mark_all_read() == 1
        assert service.unread_count() == 0

    def test_mark_unknown(self):
        with pytest.raises(KeyError):
            NotificationService(NotificationStore()).mark_read("missing")


class TestProfileService:
    async def test_update_profile_refreshes_current_user(self, data_access: DataAccess, coordinator):
        ana = await data_access.users.create_user(User(id="u1", name="Ana"))
        on_updated = MagicMock()
        service = ProfileService(data_access.users, UserStore(), coordinator, on_updated=on_updated)

        result = await service.update_profile(ana, bio="Leitora", interests=["livros"])

        assert result.ok
        saved = on_updated.call_args.args[0]
        assert saved.bio == "Leitora"
        assert (await data_access.users.get_user_by_id("u1")).interests == ["livros"]

    async def test_non_editable_field_rejected(self, data_access: DataAccess, coordinator):
        service = ProfileService(data_access.users, UserStore(), coordinator)
        with pytest.raises(ValueError):
            await service.update_profile(User(id="u1"), followers_count=1000)

    async def test_failed_update_rolls_back(self, coordinator, toasts):
        users = AsyncMock()
        users.update_user.return_value = None
        ana = User(id="u1", name="Ana")
        service = ProfileService(users, UserStore(), coordinator)

        result = await service.update_profile(ana, name="Ana Maria")

        assert result.status == MutationStatus.ROLLED_BACK
        assert service.store.get("u1") == ana
        assert toasts.toasts[0].description == "Não foi possível atualizar o perfil."


class TestTagService:
    async def test_tag_lifecycle(self, data_access: DataAccess, coordinator):
        service = TagService(data_access.tags, TagStore(), coordinator)

        created = await service.create("Casa", color="#22c55e")
        await service.create("Trabalho")
        tag_id = created.entity.id
        await service.update(tag_id, name="Lar")
        await service.delete(service.store.ids()[1])

        assert [t.name for t in service.store.all()] == ["Lar"]
        assert [(t.name, t.color) for t in await data_access.tags.get_tags()] == [("Lar", "#22c55e")]

    async def test_unknown_tag(self, data_access: DataAccess, coordinator):
        service = TagService(data_access.tags, TagStore(), coordinator)
        with pytest.raises(KeyError):
            await service.delete("missing")


class TestCalendarService:
    def test_events_sorted_and_filtered(self, storage: MemoryStorage):
        service = CalendarService(storage)
        day = datetime(2024, 7, 1, 9, 0, tzinfo=UTC)
        later = service.add_event("Dentista", day + timedelta(hours=5), user_id="u1")
        service.add_event("Reunião", day, user_id="u1")
        service.add_event("Outro usuário", day, user_id="u2")
        service.add_event("Amanhã", day + timedelta(days=1))

        assert [e.title for e in service.list_events("u1")] == ["Reunião", "Dentista", "Amanhã"]
        assert [e.title for e in service.events_on(day, "u1")] == ["Reunião", "Dentista"]
        assert service.delete_event(later.id) is True
        assert service.delete_event(later.id) is False
        assert [e.title for e in CalendarService(storage).events_on(day)] == ["Reunião", "Outro usuário"]
