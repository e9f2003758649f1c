"""枚举定义

包含任务优先级、边框样式、对齐方式、通知类型枚举。
"""

from enum import StrEnum


class Priority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BorderStyle(StrEnum):
    """任务卡片边框样式"""

    NONE = "none"
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"
    DOUBLE = "double"
    GROOVE = "groove"
    RIDGE = "ridge"
    INSET = "inset"
    OUTSET = "outset"


class Alignment(StrEnum):
    """标题/描述对齐方式"""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class NotificationType(StrEnum):
    """通知类型"""

    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
