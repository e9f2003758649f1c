"""Task Domain Model

子任务是递归树结构（不是扁平列表），最大深度由 MAX_SUBTASK_DEPTH 约束。
导出文件使用前端的 camelCase 字段名（backgroundColor 等），此处通过 alias 兼容。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import Alignment, BorderStyle, Priority


class Tag(BaseModel):
    """任务标签"""

    id: str = Field(description="标签 ID")
    name: str = Field(description="标签名")
    color: str = Field(default="#8b5cf6", description="标签颜色")


class Attachment(BaseModel):
    """任务附件"""

    id: str = Field(description="附件 ID")
    name: str = Field(description="文件名")
    url: str = Field(description="文件 URL")
    size: int = Field(default=0, ge=0, description="文件大小（字节）")
    type: str = Field(default="", description="MIME 类型")


class Subtask(BaseModel):
    """子任务节点"""

    id: str = Field(description="子任务 ID")
    title: str = Field(description="标题（HTML）")
    is_completed: bool = Field(default=False, description="是否完成")
    subtasks: list["Subtask"] = Field(default_factory=list, description="下级子任务")


class Task(BaseModel):
    """任务"""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="任务 ID")
    title: str = Field(description="标题")
    description: str = Field(default="", description="描述（富文本 HTML）")
    is_completed: bool = Field(default=False, description="是否完成")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")
    is_public: bool = Field(default=True, description="是否公开")
    tags: list[Tag] = Field(default_factory=list, description="标签")
    due_date: datetime | None = Field(default=None, description="截止时间")
    subtasks: list[Subtask] = Field(default_factory=list, description="子任务树")
    attachments: list[Attachment] = Field(default_factory=list, description="附件")
    background_color: str | None = Field(
        default=None,
        alias="backgroundColor",
        description="卡片背景色",
    )
    border_style: BorderStyle | None = Field(
        default=None,
        alias="borderStyle",
        description="卡片边框样式",
    )
    title_alignment: Alignment = Field(
        default=Alignment.LEFT,
        alias="titleAlignment",
        description="标题对齐",
    )
    description_alignment: Alignment = Field(
        default=Alignment.LEFT,
        alias="descriptionAlignment",
        description="描述对齐",
    )
    user_id: str | None = Field(default=None, description="所属用户 ID")
