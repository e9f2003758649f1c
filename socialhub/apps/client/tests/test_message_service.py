"""MessageService 测试 -- 发送消息、会话预览、已读"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from socialhub.backend import DataAccess
from socialhub.client.services.message_service import MessageService
from socialhub.core.coordinator import MutationStatus, OptimisticCoordinator
from socialhub.core.models import Conversation, Message
from socialhub.core.state import ConversationStore, MessageStore


@pytest.fixture
def service(data_access: DataAccess, coordinator: OptimisticCoordinator) -> MessageService:
    return MessageService(data_access.conversations, ConversationStore(), MessageStore(), coordinator)


class TestSendMessage:
    async def test_first_message_creates_conversation(self, service: MessageService, data_access: DataAccess):
        """与新联系人的第一条消息：会话由数据访问层创建，本地会话列表随之出现"""
        result = await service.send_message("u1", "u2", "Oi, tudo bem?")

        assert result.ok
        conversation_id = result.entity.conversation_id
        assert service.message_store.ids() == [result.entity.id]
        assert service.conversation_store.get(conversation_id).last_message_preview == "Oi, tudo bem?"
        remote = await data_access.conversations.get_conversation(conversation_id)
        assert remote.participant_id == "u2"

    async def test_reuses_existing_conversation(self, service: MessageService, data_access: DataAccess):
        await service.send_message("u1", "u2", "primeira")
        await service.send_message("u1", "u2", "segunda")

        conversation_ids = {m.conversation_id for m in service.message_store.all()}
        assert len(conversation_ids) == 1
        messages = service.message_store.for_conversation(conversation_ids.pop())
        assert [m.content for m in messages] == ["primeira", "segunda"]

    async def test_recent_conversation_moves_to_top(self, service: MessageService):
        service.conversation_store.set_all(
            [Conversation(id="c-a", participant_id="u2"), Conversation(id="c-b", participant_id="u3")]
        )

        await service.send_message("u1", "u3", "olá")

        assert service.conversation_store.ids() == ["c-b", "c-a"]

    async def test_failure_removes_message(self, coordinator, toasts):
        conversations = AsyncMock()
        conversations.create_message.return_value = None
        service = MessageService(conversations, ConversationStore(), MessageStore(), coordinator)

        result = await service.send_message("u1", "u2", "x")

        assert result.status == MutationStatus.ROLLED_BACK
        assert len(service.message_store) == 0
        assert len(service.conversation_store) == 0
        assert toasts.toasts[0].description == "Não foi possível enviar a mensagem."


class TestLoadAndRead:
    async def test_load_and_open(self, service: MessageService, data_access: DataAccess):
        await data_access.conversations.create_message(
            Message(id="m1", conversation_id="c1", sender_id="u2", recipient_id="u1", content="oi")
        )
        await data_access.conversations.create_message(
            Message(id="m2", conversation_id="c1", sender_id="u1", recipient_id="u2", content="olá")
        )

        conversations = await service.load_conversations("u1")
        messages = await service.open_conversation("c1")

        assert [c.id for c in conversations] == ["c1"]
        assert [m.id for m in messages] == ["m1", "m2"]
        assert service.find_conversation_with("u1").id == "c1"

    async def test_mark_read(self, service: MessageService, data_access: DataAccess):
        await data_access.conversations.create_message(
            Message(id="m1", conversation_id="c1", sender_id="u2", recipient_id="u1", content="oi")
        )
        await service.load_conversations("u1")

        result = await service.mark_read("c1", "u1")

        assert result.ok
        assert service.conversation_store.get("c1").unread_count == 0
        assert (await data_access.conversations.get_messages_for_conversation("c1"))[0].read is True

    async def test_mark_read_unknown_conversation(self, service: MessageService):
        with pytest.raises(KeyError):
            await service.mark_read("missing", "u1")


class TestPreviewConcurrency:
    async def test_preview_survives_failed_mark_read(self, coordinator, toasts):
        """标记已读失败回滚时，期间到达的会话预览不会被覆盖"""
        gate = asyncio.Event()

        async def mark_conversation_read(conversation_id, user_id):
            await gate.wait()
            return False

        async def create_message(message):
            return message

        conversations = AsyncMock()
        conversations.mark_conversation_read.side_effect = mark_conversation_read
        conversations.create_message.side_effect = create_message
        store = ConversationStore(
            [
                Conversation(id="c-a", participant_id="u3"),
                Conversation(id="c-b", participant_id="u2", unread_count=1),
            ]
        )
        service = MessageService(conversations, store, MessageStore(), coordinator)

        reading = asyncio.create_task(service.mark_read("c-b", "u1"))
        await asyncio.sleep(0)
        sending = asyncio.create_task(service.send_message("u1", "u2", "oi"))
        for _ in range(5):
            await asyncio.sleep(0)
        gate.set()
        read_result, sent = await asyncio.gather(reading, sending)

        assert read_result.status == MutationStatus.ROLLED_BACK
        assert sent.ok
        assert store.ids() == ["c-b", "c-a"]
        assert store.get("c-b").last_message_preview == "oi"
        assert store.get("c-b").unread_count == 1
