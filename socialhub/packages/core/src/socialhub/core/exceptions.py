"""Core 异常体系"""


class SocialHubError(Exception):
    """SocialHub 基础异常"""


class PersistenceError(SocialHubError):
    """持久化调用返回了失败结果（False/None/错误对象）

    由 Coordinator 内部使用，触发本地回滚。
    """

    def __init__(self, operation: str, result: object = None) -> None:
        super().__init__(f"持久化失败: {operation} -> {result!r}")
        self.operation = operation
        self.result = result


class SubtaskDepthError(SocialHubError):
    """子任务树超过最大深度"""

    def __init__(self, depth: int, max_depth: int) -> None:
        super().__init__(f"子任务嵌套深度 {depth} 超过上限 {max_depth}")
        self.depth = depth
        self.max_depth = max_depth


class TaskImportError(SocialHubError):
    """任务导入文件格式无效"""


class RowParseError(SocialHubError):
    """后端返回的行无法映射为领域实体"""

    def __init__(self, table: str, row_id: object, reason: str) -> None:
        super().__init__(f"{table} 行解析失败 (id={row_id!r}): {reason}")
        self.table = table
        self.row_id = row_id
        self.reason = reason


class AuthenticationError(SocialHubError):
    """登录或注册失败（用户不存在、邮箱已注册等）"""
