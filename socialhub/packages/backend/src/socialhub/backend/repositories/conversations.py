"""ConversationRepository -- conversations / messages 表访问

发送消息到尚不存在的会话时：先创建会话，再重试插入消息，且只重试一次。
消息写入成功后更新会话的 last_message_preview / last_message_date。
"""

import structlog
from socialhub.core.config import MESSAGE_PREVIEW_LENGTH
from socialhub.core.models import Conversation, Message, User

from ..exceptions import ForeignKeyViolationError
from ..rows import (
    conversation_record,
    message_record,
    parse_conversation_row,
    parse_message_row,
    parse_rows,
    parse_user_row,
)
from .base import BaseRepository

log = structlog.get_logger()


class ConversationRepository(BaseRepository):
    """私信会话与消息读写"""

    async def get_conversations_for_user(self, user_id: str) -> list[Conversation]:
        """读取用户参与的会话（最近消息在前）

        会话表只保存对方 id；当前用户作为发送者或接收者出现在消息中的会话都会返回。
        """

        async def _run() -> list[Conversation]:
            sent = await self._client.select("messages", columns=["conversation_id"], eq={"sender_id": user_id})
            received = await self._client.select(
                "messages",
                columns=["conversation_id"],
                eq={"recipient_id": user_id},
            )
            conv_ids = {r["conversation_id"] for r in sent + received}
            owned = await self._client.select("conversations", eq={"participant_id": user_id})
            rows = await self._client.select("conversations", in_={"id": sorted(conv_ids)})
            seen: set[str] = set()
            merged = []
            for row in rows + owned:
                if row["id"] not in seen:
                    seen.add(row["id"])
                    merged.append(row)

            participant_ids = sorted({r["participant_id"] for r in merged if r.get("participant_id")})
            participants: dict[str, User] = {}
            if participant_ids:
                user_rows = await self._client.select("users", in_={"id": participant_ids})
                participants = {u.id: u for u in parse_rows(user_rows, parse_user_row, "users")}

            conversations = parse_rows(
                merged,
                lambda r: parse_conversation_row(r, participants),
                "conversations",
            )
            return sorted(
                conversations,
                key=lambda c: c.last_message_date.isoformat() if c.last_message_date else "",
                reverse=True,
            )

        return await self._call("get_conversations_for_user", _run(), [])

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        async def _run() -> Conversation | None:
            rows = await self._client.select("conversations", eq={"id": conversation_id}, limit=1)
            return parse_conversation_row(rows[0]) if rows else None

        return await self._call("get_conversation", _run(), None)

    async def get_messages_for_conversation(self, conversation_id: str) -> list[Message]:
        """读取会话消息（按发送时间正序）"""

        async def _run() -> list[Message]:
            rows = await self._client.select(
                "messages",
                eq={"conversation_id": conversation_id},
                order_by="created_date",
            )
            return parse_rows(rows, parse_message_row, "messages")

        return await self._call("get_messages_for_conversation", _run(), [])

    async def create_conversation(self, conversation: Conversation) -> Conversation | None:
        async def _run() -> Conversation:
            row = await self._client.insert("conversations", conversation_record(conversation))
            return parse_conversation_row(row)

        return await self._call("create_conversation", _run(), None)

    async def create_message(self, message: Message) -> Message | None:
        """插入消息；会话不存在时先建会话再重试一次，成功后更新会话预览"""
        if not message.conversation_id:
            log.warning("create_message_missing_conversation_id", message_id=message.id)
            return None

        async def _run() -> Message:
            record = message_record(message)
            try:
                row = await self._client.insert("messages", record)
            except ForeignKeyViolationError:
                log.info(
                    "conversation_missing_creating",
                    conversation_id=message.conversation_id,
                )
                await self._client.insert(
                    "conversations",
                    conversation_record(
                        Conversation(
                            id=message.conversation_id,
                            participant_id=message.recipient_id,
                        )
                    ),
                )
                # 只重试一次；再次失败由 _call 记录并返回 None
                row = await self._client.insert("messages", record)

            created = parse_message_row(row)
            await self._client.update(
                "conversations",
                {
                    "last_message_preview": created.content[:MESSAGE_PREVIEW_LENGTH],
                    "last_message_date": created.created_date,
                },
                eq={"id": created.conversation_id},
            )
            return created

        return await self._call("create_message", _run(), None)

    async def mark_conversation_read(self, conversation_id: str, user_id: str) -> bool:
        """把发给 user_id 的消息标记为已读，并清零未读数"""

        async def _run() -> bool:
            await self._client.update(
                "messages",
                {"read": True},
                eq={"conversation_id": conversation_id, "recipient_id": user_id},
            )
            rows = await self._client.update(
                "conversations",
                {"unread_count": 0},
                eq={"id": conversation_id},
            )
            return bool(rows)

        return await self._call("mark_conversation_read", _run(), False)
