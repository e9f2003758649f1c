"""TagService -- 任务标签管理"""

from typing import Any

from socialhub.backend.repositories import TagRepository
from socialhub.core.cancellation import CancellationToken, is_cancelled
from socialhub.core.coordinator import MutationResult, OptimisticCoordinator
from socialhub.core.ids import new_id
from socialhub.core.models import Tag
from socialhub.core.state import TagStore


class TagService:
    """标签业务服务"""

    def __init__(self, tags: TagRepository, store: TagStore, coordinator: OptimisticCoordinator) -> None:
        self._tags = tags
        self._store = store
        self._coordinator = coordinator

    @property
    def store(self) -> TagStore:
        return self._store

    async def load(self, token: CancellationToken | None = None) -> list[Tag]:
        tags = await self._tags.get_tags()
        if is_cancelled(token):
            return []
        self._store.set_all(tags)
        return self._store.all()

    async def create(
        self,
        name: str,
        color: str | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[Tag]:
        tag = Tag(id=new_id("tag"), name=name, **({"color": color} if color else {}))
        return await self._coordinator.mutate(
            self._store,
            tag.id,
            lambda _current: tag,
            self._tags.create_tag,
            operation="create_tag",
            error="Não foi possível criar a tag.",
            position="end",
            server_id=lambda created: created.id,
            token=token,
        )

    async def update(
        self,
        tag_id: str,
        token: CancellationToken | None = None,
        **values: Any,
    ) -> MutationResult[Tag]:
        if tag_id not in self._store:
            raise KeyError(tag_id)
        return await self._coordinator.mutate(
            self._store,
            tag_id,
            lambda tag: Tag.model_validate({**tag.model_dump(), **values}),
            lambda _tag: self._tags.update_tag(tag_id, values),
            operation="update_tag",
            error="Não foi possível atualizar a tag.",
            token=token,
        )

    async def delete(self, tag_id: str, token: CancellationToken | None = None) -> MutationResult[Tag]:
        if tag_id not in self._store:
            raise KeyError(tag_id)
        return await self._coordinator.mutate(
            self._store,
            tag_id,
            lambda _tag: None,
            lambda _none: self._tags.delete_tag(tag_id),
            operation="delete_tag",
            error="Não foi possível excluir a tag.",
            token=token,
        )
