"""CommunityService -- 社区与社区聊天

社区列表写入后端；社区聊天消息和反应只保存在内存中。
"""

import structlog
from socialhub.backend.repositories import CommunityRepository
from socialhub.core.cancellation import CancellationToken, is_cancelled
from socialhub.core.coordinator import MutationResult, OptimisticCoordinator
from socialhub.core.ids import new_id
from socialhub.core.models import Community, CommunityMessage, User
from socialhub.core.reactions import increment
from socialhub.core.state import CommunityMessageStore, CommunityStore

log = structlog.get_logger()


class CommunityService:
    """社区业务服务"""

    def __init__(
        self,
        communities: CommunityRepository,
        store: CommunityStore,
        message_store: CommunityMessageStore,
        coordinator: OptimisticCoordinator,
        fallback_communities: list[Community] | None = None,
    ) -> None:
        self._communities = communities
        self._store = store
        self._message_store = message_store
        self._coordinator = coordinator
        self._fallback_communities = list(fallback_communities or [])

    @property
    def store(self) -> CommunityStore:
        return self._store

    @property
    def message_store(self) -> CommunityMessageStore:
        return self._message_store

    async def load(self, token: CancellationToken | None = None) -> list[Community]:
        communities = await self._communities.get_communities()
        if not communities and self._fallback_communities:
            log.info("communities_fallback_used", count=len(self._fallback_communities))
            communities = [c.model_copy(deep=True) for c in self._fallback_communities]
        if is_cancelled(token):
            return []
        self._store.set_all(communities)
        return self._store.all()

    async def create_community(
        self,
        name: str,
        description: str = "",
        category: str = "",
        is_private: bool = False,
        image_url: str = "",
        token: CancellationToken | None = None,
    ) -> MutationResult[Community]:
        """创建社区，创建者计为第一个成员"""
        community = Community(
            id=new_id("community"),
            name=name,
            description=description,
            category=category,
            is_private=is_private,
            image_url=image_url,
            members_count=1,
        )
        return await self._coordinator.mutate(
            self._store,
            community.id,
            lambda _current: community,
            self._communities.create_community,
            operation="create_community",
            error="Não foi possível criar a comunidade.",
            server_id=lambda created: created.id,
            token=token,
        )

    def send_message(self, community_id: str, author: User, content: str) -> CommunityMessage:
        """发送社区聊天消息（仅本地）

        Raises:
            KeyError: 社区不存在
        """
        if community_id not in self._store:
            raise KeyError(community_id)
        message = CommunityMessage(
            id=new_id("cmsg"),
            community_id=community_id,
            author=author,
            content=content,
        )
        self._message_store.put(message, position="end")
        return message

    def react_to_message(self, message_id: str, emoji: str) -> CommunityMessage:
        """为社区消息添加表情反应（仅本地）

        Raises:
            KeyError: 消息不存在
        """
        message = self._message_store.get(message_id)
        if message is None:
            raise KeyError(message_id)
        updated = message.model_copy(update={"reactions": increment(message.reactions, emoji)})
        self._message_store.put(updated)
        return updated
