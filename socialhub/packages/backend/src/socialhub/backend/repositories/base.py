"""Repository 基类 -- 超时竞争 + 失败返回哨兵

所有后端调用都经过 _call：
- 超时（默认 10s）抛出的 BackendTimeoutError
- 驱动层错误（BackendError 及其子类）
- 行解析失败（RowParseError）
均记录 warning 并返回调用方给定的哨兵值（[] / None / False），不向上抛出。
"""

from collections.abc import Awaitable
from typing import TypeVar

import structlog
from socialhub.core.exceptions import RowParseError

from ..client import TableClient
from ..config import DEFAULT_TIMEOUT_S
from ..exceptions import BackendError
from ..timeout import with_timeout

log = structlog.get_logger()

T = TypeVar("T")
D = TypeVar("D")


class BaseRepository:
    """按表划分的 Repository 基类"""

    def __init__(self, client: TableClient, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self._client = client
        self._timeout_s = timeout_s

    async def _call(self, operation: str, awaitable: Awaitable[T], default: D) -> T | D:
        """执行后端调用，失败时返回哨兵值"""
        try:
            return await with_timeout(awaitable, self._timeout_s)
        except (BackendError, RowParseError) as e:
            log.warning(
                "backend_call_failed",
                operation=operation,
                error_type=type(e).__name__,
                error=str(e),
            )
            return default
