"""CancellationToken -- 视图存活标记

视图销毁后，仍在进行中的异步调用可能返回；
持有 token 的处理函数在 await 之后检查 token，已取消则丢弃结果。
"""


class CancellationToken:
    """可取消标记（不会中断底层网络调用）"""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """标记为已取消（幂等）"""
        self._cancelled = True


def is_cancelled(token: CancellationToken | None) -> bool:
    """token 为 None 视为永不取消"""
    return token is not None and token.cancelled
