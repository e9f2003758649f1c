"""DesabafoService -- 匿名倾诉

反应按 (倾诉, emoji, 用户) 组合 key 保证幂等：
- 未反应过：计数 +1，成功后写入标记
- 已用同一 emoji 反应过：计数 -1，成功后清除标记
- 之前用过其他 emoji：同时撤销旧 emoji 的计数和标记
"""

from datetime import UTC, datetime

from socialhub.backend.repositories import DesabafoRepository
from socialhub.core.cancellation import CancellationToken, is_cancelled
from socialhub.core.coordinator import MutationResult, OptimisticCoordinator
from socialhub.core.ids import new_id
from socialhub.core.models import Desabafo, DesabafoComment, parse_hashtags
from socialhub.core.reactions import (
    apply_reaction,
    desabafo_reaction_key,
    find_user_reaction,
    has_marker,
    set_marker,
)
from socialhub.core.state import DesabafoStore
from socialhub.core.storage import LocalStorage


class DesabafoService:
    """倾诉业务服务"""

    def __init__(
        self,
        desabafos: DesabafoRepository,
        store: DesabafoStore,
        coordinator: OptimisticCoordinator,
        storage: LocalStorage,
    ) -> None:
        self._desabafos = desabafos
        self._store = store
        self._coordinator = coordinator
        self._storage = storage

    @property
    def store(self) -> DesabafoStore:
        return self._store

    async def load(self, token: CancellationToken | None = None) -> list[Desabafo]:
        items = await self._desabafos.get_desabafos()
        if is_cancelled(token):
            return []
        self._store.set_all(items)
        return self._store.all()

    async def create(
        self,
        content: str,
        hashtags: str = "",
        image_url: str | None = None,
        user_id: str | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[Desabafo]:
        desabafo = Desabafo(
            id=new_id("desabafo"),
            user_id=user_id,
            content=content,
            image_url=image_url or None,
            hashtags=parse_hashtags(hashtags),
        )
        return await self._coordinator.mutate(
            self._store,
            desabafo.id,
            lambda _current: desabafo,
            self._desabafos.create_desabafo,
            operation="create_desabafo",
            error="Não foi possível publicar o desabafo.",
            server_id=lambda created: created.id,
            token=token,
        )

    async def update(
        self,
        desabafo_id: str,
        content: str,
        hashtags: str | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[Desabafo]:
        """编辑倾诉，记录 updated_at"""
        self._require(desabafo_id)
        values: dict = {"content": content, "updated_at": datetime.now(UTC)}
        if hashtags is not None:
            values["hashtags"] = parse_hashtags(hashtags)
        return await self._coordinator.mutate(
            self._store,
            desabafo_id,
            lambda item: item.model_copy(update=values),
            lambda _item: self._desabafos.update_desabafo(desabafo_id, values),
            operation="update_desabafo",
            error="Não foi possível atualizar o desabafo.",
            token=token,
        )

    async def delete(self, desabafo_id: str, token: CancellationToken | None = None) -> MutationResult[Desabafo]:
        self._require(desabafo_id)
        return await self._coordinator.mutate(
            self._store,
            desabafo_id,
            lambda _item: None,
            lambda _none: self._desabafos.delete_desabafo(desabafo_id),
            operation="delete_desabafo",
            error="Não foi possível excluir o desabafo.",
            token=token,
        )

    async def react(
        self,
        desabafo_id: str,
        emoji: str,
        user_id: str,
        token: CancellationToken | None = None,
    ) -> MutationResult[Desabafo]:
        """切换用户在某个倾诉上的表情反应"""
        self._require(desabafo_id)
        key = desabafo_reaction_key(desabafo_id, emoji, user_id)
        state: dict = {"already": False, "previous": None}

        def _apply(item: Desabafo | None) -> Desabafo:
            already = has_marker(self._storage, key)
            previous = None if already else find_user_reaction(self._storage, desabafo_id, user_id)
            state.update(already=already, previous=previous)
            return item.model_copy(
                update={"reactions": apply_reaction(item.reactions, emoji, already, previous)}
            )

        def _on_success(_ok: object) -> None:
            set_marker(self._storage, key, not state["already"])
            if state["previous"]:
                set_marker(
                    self._storage,
                    desabafo_reaction_key(desabafo_id, state["previous"], user_id),
                    False,
                )

        return await self._coordinator.mutate(
            self._store,
            desabafo_id,
            _apply,
            lambda item: self._desabafos.update_reactions(desabafo_id, item.reactions),
            operation="react_desabafo",
            error="Não foi possível registrar a reação.",
            on_success=_on_success,
            token=token,
        )

    def user_reaction(self, desabafo_id: str, user_id: str) -> str | None:
        """用户当前在该倾诉上使用的 emoji"""
        return find_user_reaction(self._storage, desabafo_id, user_id)

    async def add_comment(
        self,
        desabafo_id: str,
        content: str,
        token: CancellationToken | None = None,
    ) -> MutationResult[Desabafo]:
        self._require(desabafo_id)
        comment = DesabafoComment(id=new_id("comment"), content=content)
        return await self._coordinator.mutate(
            self._store,
            desabafo_id,
            lambda item: item.model_copy(update={"comments": [*item.comments, comment]}),
            lambda _item: self._desabafos.add_comment(desabafo_id, comment),
            operation="add_desabafo_comment",
            error="Não foi possível publicar o comentário.",
            token=token,
        )

    def _require(self, desabafo_id: str) -> Desabafo:
        item = self._store.get(desabafo_id)
        if item is None:
            raise KeyError(desabafo_id)
        return item
