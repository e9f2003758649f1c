"""客户端占位 ID 生成

格式 <prefix>-<ULID>，ULID 保证时间有序；后端返回不同 ID 时由 Coordinator 对齐。
"""

from ulid import ULID


def new_id(prefix: str) -> str:
    """生成带前缀的客户端占位 ID"""
    return f"{prefix}-{ULID()}"
