"""Desabafo Domain Model

匿名"倾诉"帖：结构与 Post 相同，但界面不展示作者。
user_id 仅用于归属与同步，不对外显示。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .post import ReactionMap


class DesabafoComment(BaseModel):
    """倾诉评论（匿名）"""

    id: str = Field(description="评论 ID")
    content: str = Field(description="评论内容")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="创建时间",
    )
    reactions: ReactionMap = Field(default_factory=dict, description="表情反应计数")


class Desabafo(BaseModel):
    """匿名倾诉帖"""

    id: str = Field(description="倾诉 ID")
    user_id: str | None = Field(default=None, description="作者 ID（不展示）")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="创建时间",
    )
    content: str = Field(default="", description="正文")
    image_url: str | None = Field(default=None, description="配图 URL")
    hashtags: list[str] = Field(default_factory=list, description="话题标签（有序）")
    reactions: ReactionMap = Field(default_factory=dict, description="表情反应计数")
    comments: list[DesabafoComment] = Field(default_factory=list, description="评论列表")
    updated_at: datetime | None = Field(default=None, description="最后编辑时间")
