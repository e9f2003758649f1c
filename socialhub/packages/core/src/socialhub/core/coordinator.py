"""OptimisticCoordinator -- 乐观更新 + 失败回滚

流程：
1. 在实体级锁内捕获快照（深拷贝）
2. 同步计算并写入新状态（界面立即可见）
3. await 持久化调用
4. 成功：可选地把服务端分配的 id 对齐到本地；执行 on_success 回调
5. 失败（抛出异常，或返回 False/None/空值/异常对象）：恢复快照并发出错误 toast

并发规则：
- 同一 (store, entity_id) 的变更串行执行，不同实体之间并发
- 集合级变更（批量导入）独占整个 store，与该 store 上的实体变更互斥

CancellationToken 只影响界面反馈：Store 在视图之外长期存在，
因此即使 token 已取消，失败仍然回滚、成功仍然对齐 id 并执行 on_success，只是不再发 toast。
调用时 token 已取消则直接返回 CANCELLED，不做任何变更。
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

import structlog
from pydantic import BaseModel

from .cancellation import CancellationToken, is_cancelled
from .exceptions import PersistenceError
from .notifier import Notifier, Toast, error_toast
from .state.base import EntityStore, InsertPosition

log = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

# 默认错误提示
DEFAULT_ERROR_MESSAGE = "Não foi possível salvar a alteração."


class MutationStatus(StrEnum):
    """变更结果状态"""

    APPLIED = "applied"
    ROLLED_BACK = "rolled_back"
    CANCELLED = "cancelled"


@dataclass
class MutationResult(Generic[T]):
    """一次乐观变更的结果"""

    status: MutationStatus
    entity: T | None = None
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == MutationStatus.APPLIED


def is_failed_result(result: Any) -> bool:
    """持久化结果是否表示失败（假值或异常对象）"""
    return isinstance(result, Exception) or not result


class _StoreGate:
    """Store 级读写闸门：实体变更共享进入，集合变更独占进入

    有集合变更在等待时，新的实体变更排在它之后。
    """

    def __init__(self) -> None:
        self.users = 0
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @asynccontextmanager
    async def shared(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._writers_waiting == 0)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                self._cond.notify_all()

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._writers_waiting -= 1
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass
class _EntityLock:
    users: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class OptimisticCoordinator:
    """乐观变更协调器，所有实体 Store 共用一个实例"""

    def __init__(self, notifier: Notifier | None = None) -> None:
        self._notifier = notifier
        self._gates: dict[int, _StoreGate] = {}
        self._locks: dict[tuple[int, str], _EntityLock] = {}

    async def mutate(
        self,
        store: EntityStore[T],
        entity_id: str,
        apply: Callable[[T | None], T | None],
        persist: Callable[[T | None], Awaitable[Any]],
        *,
        operation: str,
        error: Toast | str = DEFAULT_ERROR_MESSAGE,
        position: InsertPosition = "start",
        move_to: InsertPosition | None = None,
        server_id: Callable[[Any], str | None] | None = None,
        on_success: Callable[[Any], None] | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[T]:
        """对单个实体执行乐观变更

        Args:
            store: 实体所在 Store
            entity_id: 实体 id（新建时为客户端占位 id）
            apply: 纯函数，当前实体（不存在为 None） -> 新实体（None 表示删除）
            persist: 持久化调用，入参为新实体
            operation: 操作名（日志用）
            error: 失败时展示的 toast 或错误描述
            position: 新建实体的插入位置
            move_to: 已有实体变更后移动到的位置（None 表示保持原位）
            server_id: 从持久化结果提取服务端 id 的函数
            on_success: 持久化成功后的回调（入参为持久化结果）
            token: 视图存活标记，只决定是否发 toast

        Returns:
            MutationResult
        """
        if is_cancelled(token):
            return MutationResult(MutationStatus.CANCELLED)

        async with self._entity_guard(store, entity_id):
            snap = store.snapshot(entity_id)
            next_entity = apply(store.get(entity_id))
            if next_entity is None:
                store.remove(entity_id)
            else:
                if move_to is not None:
                    store.remove(entity_id)
                store.put(next_entity, position=move_to or position)

            try:
                result = await persist(next_entity)
                if is_failed_result(result):
                    raise PersistenceError(operation, result)
            except Exception as e:
                store.restore(snap)
                log.warning(
                    "optimistic_mutation_rolled_back",
                    operation=operation,
                    entity_id=entity_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                self._notify_error(error, token)
                return MutationResult(MutationStatus.ROLLED_BACK, entity=snap.entity, error=e)

            final_entity = next_entity
            if next_entity is not None and server_id is not None:
                new_id = server_id(result)
                if new_id and new_id != entity_id:
                    store.rekey(entity_id, new_id)
                    final_entity = store.get(new_id)
                    log.debug("mutation_id_reconciled", operation=operation, old_id=entity_id, new_id=new_id)
            if on_success is not None:
                on_success(result)
            return MutationResult(MutationStatus.APPLIED, entity=final_entity, value=result)

    async def mutate_collection(
        self,
        store: EntityStore[T],
        apply: Callable[[list[T]], list[T]],
        persist: Callable[[list[T]], Awaitable[Any]],
        *,
        operation: str,
        error: Toast | str = DEFAULT_ERROR_MESSAGE,
        token: CancellationToken | None = None,
    ) -> MutationResult[T]:
        """对整个集合执行乐观变更（例如批量导入），失败时整体恢复

        执行期间独占 store，该 store 上的实体变更等待其结束。
        """
        if is_cancelled(token):
            return MutationResult(MutationStatus.CANCELLED)

        async with self._collection_guard(store):
            snap = store.snapshot_all()
            next_items = apply(store.all())
            store.set_all(next_items)

            try:
                result = await persist(next_items)
                if is_failed_result(result):
                    raise PersistenceError(operation, result)
            except Exception as e:
                store.restore_all(snap)
                log.warning(
                    "optimistic_collection_mutation_rolled_back",
                    operation=operation,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                self._notify_error(error, token)
                return MutationResult(MutationStatus.ROLLED_BACK, error=e)

            return MutationResult(MutationStatus.APPLIED, value=result)

    def _notify_error(self, error: Toast | str, token: CancellationToken | None) -> None:
        if self._notifier is None:
            return
        if is_cancelled(token):
            log.info("mutation_toast_suppressed", reason="view_cancelled")
            return
        toast = error if isinstance(error, Toast) else error_toast(error)
        self._notifier.notify(toast)

    # --- 锁 ---

    @asynccontextmanager
    async def _entity_guard(self, store: EntityStore, entity_id: str) -> AsyncIterator[None]:
        gate = self._checkout_gate(store)
        key = (id(store), entity_id)
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _EntityLock()
        entry.users += 1
        try:
            async with gate.shared(), entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._locks.pop(key, None)
            self._checkin_gate(store, gate)

    @asynccontextmanager
    async def _collection_guard(self, store: EntityStore) -> AsyncIterator[None]:
        gate = self._checkout_gate(store)
        try:
            async with gate.exclusive():
                yield
        finally:
            self._checkin_gate(store, gate)

    def _checkout_gate(self, store: EntityStore) -> _StoreGate:
        gate = self._gates.get(id(store))
        if gate is None:
            gate = self._gates[id(store)] = _StoreGate()
        gate.users += 1
        return gate

    def _checkin_gate(self, store: EntityStore, gate: _StoreGate) -> None:
        gate.users -= 1
        if gate.users == 0:
            self._gates.pop(id(store), None)
