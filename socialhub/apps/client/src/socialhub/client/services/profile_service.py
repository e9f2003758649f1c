"""ProfileService -- 个人资料编辑"""

from collections.abc import Callable
from typing import Any

from socialhub.backend.repositories import UserRepository
from socialhub.core.cancellation import CancellationToken
from socialhub.core.coordinator import MutationResult, OptimisticCoordinator
from socialhub.core.models import User
from socialhub.core.state import UserStore

# 允许在资料页编辑的字段
EDITABLE_FIELDS = frozenset({"name", "bio", "website", "profile_image", "cover_image", "interests"})


class ProfileService:
    """资料编辑业务服务"""

    def __init__(
        self,
        users: UserRepository,
        store: UserStore,
        coordinator: OptimisticCoordinator,
        on_updated: Callable[[User], None] | None = None,
    ) -> None:
        """
        Args:
            users: 用户 Repository
            store: 用户资料 Store
            coordinator: 乐观变更协调器
            on_updated: 资料保存成功后的回调（刷新登录用户）
        """
        self._users = users
        self._store = store
        self._coordinator = coordinator
        self._on_updated = on_updated

    @property
    def store(self) -> UserStore:
        return self._store

    async def update_profile(
        self,
        user: User,
        token: CancellationToken | None = None,
        **values: Any,
    ) -> MutationResult[User]:
        """更新资料字段

        Raises:
            ValueError: 包含不可编辑的字段
        """
        invalid = set(values) - EDITABLE_FIELDS
        if invalid:
            raise ValueError(f"不可编辑的字段: {sorted(invalid)}")
        if user.id not in self._store:
            self._store.put(user)

        def _on_success(saved: User) -> None:
            if self._on_updated is not None:
                self._on_updated(saved)

        return await self._coordinator.mutate(
            self._store,
            user.id,
            lambda current: User.model_validate({**current.model_dump(), **values}),
            lambda _current: self._users.update_user(user.id, values),
            operation="update_profile",
            error="Não foi possível atualizar o perfil.",
            on_success=_on_success,
            token=token,
        )
