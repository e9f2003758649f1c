"""Backend 异常体系

数据访问层内部使用；Repository 对外不抛出，统一返回空值哨兵。
"""


class BackendError(Exception):
    """Backend 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试或降级恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class BackendTimeoutError(BackendError):
    """后端调用超时（超时竞争失败，底层调用仍在继续）"""

    def __init__(self, timeout_s: float) -> None:
        super().__init__(f"后端请求超时（{timeout_s}s）", recoverable=True)
        self.timeout_s = timeout_s


class BackendUnavailableError(BackendError):
    """后端不可达（连接已关闭、数据库无法打开等）"""

    def __init__(self, original_error: Exception) -> None:
        super().__init__(f"后端不可达: {original_error}", recoverable=True)
        self.original_error = original_error


class ForeignKeyViolationError(BackendError):
    """写入依赖的父行不存在（外键约束失败）"""

    def __init__(self, table: str, original_error: Exception) -> None:
        super().__init__(f"{table} 外键约束失败: {original_error}", recoverable=True)
        self.table = table
        self.original_error = original_error
