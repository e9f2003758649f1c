"""本地 -> 后端迁移

把后端不可用期间保存在本地的任务、倾诉和日历事件推送到后端：
- 后端已存在的 id 跳过
- 单条失败记录 warning 并继续
- 某一类至少迁移成功一条时，清空该类本地列表
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import structlog
from pydantic import BaseModel, Field
from socialhub.core.config import LOCAL_DESABAFOS_KEY, LOCAL_EVENTS_KEY, LOCAL_TASKS_KEY
from socialhub.core.storage import LocalStorage, read_json_list

from .rows import parse_desabafo_row, parse_event_row, parse_rows, parse_task_row

if TYPE_CHECKING:
    from . import DataAccess

log = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


class SyncKindResult(BaseModel):
    """单类数据的迁移结果"""

    found: int = Field(default=0, description="本地条目数")
    migrated: int = Field(default=0, description="迁移成功数")
    skipped: int = Field(default=0, description="后端已存在而跳过的条目数")
    failed: int = Field(default=0, description="迁移失败数")


class SyncSummary(BaseModel):
    """一次迁移的汇总"""

    tasks: SyncKindResult = Field(default_factory=SyncKindResult)
    desabafos: SyncKindResult = Field(default_factory=SyncKindResult)
    events: SyncKindResult = Field(default_factory=SyncKindResult)


async def _sync_kind(
    kind: str,
    storage: LocalStorage,
    key: str,
    items: list[M],
    existing_ids: set[str] | None,
    create: Callable[[M], Awaitable[object]],
) -> SyncKindResult:
    result = SyncKindResult(found=len(items))
    if not items:
        return result

    log.info("local_sync_started", kind=kind, count=len(items))
    known = existing_ids or set()
    for item in items:
        if item.id in known:  # type: ignore[attr-defined]
            result.skipped += 1
            continue
        if await create(item):
            result.migrated += 1
        else:
            result.failed += 1
            log.warning("local_sync_item_failed", kind=kind, item_id=item.id)  # type: ignore[attr-defined]

    if result.migrated > 0:
        storage.remove_item(key)
    log.info(
        "local_sync_finished",
        kind=kind,
        migrated=result.migrated,
        skipped=result.skipped,
        failed=result.failed,
    )
    return result


async def sync_local_to_backend(
    data_access: "DataAccess",
    storage: LocalStorage,
    user_id: str | None = None,
) -> SyncSummary:
    """迁移本地任务、倾诉、日历事件到后端

    Args:
        data_access: 数据访问组
        storage: 本地存储
        user_id: 当前用户；缺少归属的条目归到该用户

    Returns:
        SyncSummary
    """
    summary = SyncSummary()

    tasks = parse_rows(read_json_list(storage, LOCAL_TASKS_KEY), parse_task_row, "local:tasks")
    tasks = [t if t.user_id or not user_id else t.model_copy(update={"user_id": user_id}) for t in tasks]
    summary.tasks = await _sync_kind(
        "tasks",
        storage,
        LOCAL_TASKS_KEY,
        tasks,
        await data_access.tasks.get_task_ids() if tasks else None,
        data_access.tasks.create_task,
    )

    desabafos = parse_rows(
        read_json_list(storage, LOCAL_DESABAFOS_KEY),
        parse_desabafo_row,
        "local:desabafos",
    )
    desabafos = [d if d.user_id or not user_id else d.model_copy(update={"user_id": user_id}) for d in desabafos]

    async def _create_desabafo(desabafo):
        return await data_access.desabafos.create_desabafo(desabafo, allow_fallback=False)

    summary.desabafos = await _sync_kind(
        "desabafos",
        storage,
        LOCAL_DESABAFOS_KEY,
        desabafos,
        await data_access.desabafos.get_remote_ids() if desabafos else None,
        _create_desabafo,
    )

    events = parse_rows(read_json_list(storage, LOCAL_EVENTS_KEY), parse_event_row, "local:events")
    events = [e if e.user_id or not user_id else e.model_copy(update={"user_id": user_id}) for e in events]
    summary.events = await _sync_kind(
        "events",
        storage,
        LOCAL_EVENTS_KEY,
        events,
        await data_access.events.get_event_ids() if events else None,
        data_access.events.create_event,
    )

    return summary
