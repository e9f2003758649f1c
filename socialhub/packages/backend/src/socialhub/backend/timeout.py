"""超时竞争 -- 防止挂起的后端调用无限阻塞界面

超时只限制调用方的等待时间，不取消底层操作（底层继续执行，结果被丢弃）。
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from .exceptions import BackendTimeoutError

log = structlog.get_logger()

T = TypeVar("T")


def _consume_late_result(task: asyncio.Future) -> None:
    """读取超时后才完成的调用结果，避免 'exception was never retrieved'"""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.debug("late_backend_call_failed", error=str(exc))


async def with_timeout(awaitable: Awaitable[T], timeout_s: float) -> T:
    """等待 awaitable，超时抛出 BackendTimeoutError

    Args:
        awaitable: 后端调用
        timeout_s: 超时秒数

    Raises:
        BackendTimeoutError: 超时
    """
    task = asyncio.ensure_future(awaitable)
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout_s)
    except TimeoutError as e:
        task.add_done_callback(_consume_late_result)
        raise BackendTimeoutError(timeout_s) from e
