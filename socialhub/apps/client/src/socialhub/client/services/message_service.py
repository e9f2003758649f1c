"""MessageService -- 私信

发送消息：消息先追加到 MessageStore 末尾，后端写入成功后再刷新会话预览。
会话不存在时由数据访问层先建会话再重试（只重试一次）。
"""

import structlog
from socialhub.backend.repositories import ConversationRepository
from socialhub.core.cancellation import CancellationToken, is_cancelled
from socialhub.core.config import MESSAGE_PREVIEW_LENGTH
from socialhub.core.coordinator import MutationResult, OptimisticCoordinator
from socialhub.core.ids import new_id
from socialhub.core.models import Conversation, Message
from socialhub.core.state import ConversationStore, MessageStore

log = structlog.get_logger()


class MessageService:
    """私信业务服务"""

    def __init__(
        self,
        conversations: ConversationRepository,
        conversation_store: ConversationStore,
        message_store: MessageStore,
        coordinator: OptimisticCoordinator,
    ) -> None:
        self._conversations = conversations
        self._conversation_store = conversation_store
        self._message_store = message_store
        self._coordinator = coordinator

    @property
    def conversation_store(self) -> ConversationStore:
        return self._conversation_store

    @property
    def message_store(self) -> MessageStore:
        return self._message_store

    async def load_conversations(
        self,
        user_id: str,
        token: CancellationToken | None = None,
    ) -> list[Conversation]:
        conversations = await self._conversations.get_conversations_for_user(user_id)
        if is_cancelled(token):
            return []
        self._conversation_store.set_all(conversations)
        return self._conversation_store.all()

    async def open_conversation(
        self,
        conversation_id: str,
        token: CancellationToken | None = None,
    ) -> list[Message]:
        """加载会话消息（替换该会话在 Store 中的旧消息）"""
        messages = await self._conversations.get_messages_for_conversation(conversation_id)
        if is_cancelled(token):
            return []
        others = [m for m in self._message_store.all() if m.conversation_id != conversation_id]
        self._message_store.set_all([*others, *messages])
        return self._message_store.for_conversation(conversation_id)

    def find_conversation_with(self, participant_id: str) -> Conversation | None:
        for conversation in self._conversation_store.all():
            if conversation.participant_id == participant_id:
                return conversation
        return None

    async def send_message(
        self,
        sender_id: str,
        recipient_id: str,
        content: str,
        conversation_id: str | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[Message]:
        """发送消息

        conversation_id 为 None 时复用与 recipient 的已有会话，否则新建会话 id。
        """
        if conversation_id is None:
            existing = self.find_conversation_with(recipient_id)
            conversation_id = existing.id if existing else new_id("conv")

        message = Message(
            id=new_id("msg"),
            conversation_id=conversation_id,
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
        )
        result = await self._coordinator.mutate(
            self._message_store,
            message.id,
            lambda _current: message,
            self._conversations.create_message,
            operation="send_message",
            error="Não foi possível enviar a mensagem.",
            position="end",
            server_id=lambda created: created.id,
            token=token,
        )
        if result.ok:
            await self._refresh_preview(result.value)
        return result

    async def mark_read(
        self,
        conversation_id: str,
        user_id: str,
        token: CancellationToken | None = None,
    ) -> MutationResult[Conversation]:
        """打开会话时清零未读数"""
        if conversation_id not in self._conversation_store:
            raise KeyError(conversation_id)
        return await self._coordinator.mutate(
            self._conversation_store,
            conversation_id,
            lambda conv: conv.model_copy(update={"unread_count": 0}),
            lambda _conv: self._conversations.mark_conversation_read(conversation_id, user_id),
            operation="mark_conversation_read",
            error="Não foi possível marcar a conversa como lida.",
            token=token,
        )

    async def _refresh_preview(self, created: Message) -> None:
        """用后端保存的消息刷新会话预览，并把会话移到最前"""
        preview = {
            "last_message_preview": created.content[:MESSAGE_PREVIEW_LENGTH],
            "last_message_date": created.created_date,
        }

        def _apply(conversation: Conversation | None) -> Conversation:
            if conversation is None:
                log.debug("conversation_added_after_send", conversation_id=created.conversation_id)
                return Conversation(id=created.conversation_id, participant_id=created.recipient_id, **preview)
            return conversation.model_copy(update=preview)

        async def _already_saved(_conversation: Conversation | None) -> Message:
            # create_message 已在后端更新会话预览
            return created

        await self._coordinator.mutate(
            self._conversation_store,
            created.conversation_id,
            _apply,
            _already_saved,
            operation="refresh_conversation_preview",
            move_to="start",
        )
