"""Post / Comment Domain Model

reactions 为 emoji -> 计数映射，计数不得小于 0。
comments_count 应与 len(comments) 保持一致，由写入路径负责维护。
"""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, Field

from .user import User

# emoji -> 非负计数
ReactionMap = dict[str, Annotated[int, Field(ge=0)]]


def parse_hashtags(text: str) -> list[str]:
    """从空格分隔的文本中提取 # 开头的标签，保持原始顺序"""
    return [word for word in text.split() if word.startswith("#")]


class Comment(BaseModel):
    """帖子评论（只追加，不单独删除）"""

    id: str = Field(description="评论 ID")
    author: User | None = Field(default=None, description="评论作者")
    content: str = Field(description="评论内容")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="创建时间",
    )
    likes_count: int = Field(default=0, ge=0, description="点赞数")


class Post(BaseModel):
    """动态帖子"""

    id: str = Field(description="帖子 ID")
    author: User | None = Field(default=None, description="作者")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="创建时间",
    )
    content: str = Field(default="", description="正文")
    image_url: str | None = Field(default=None, description="配图 URL")
    hashtags: list[str] = Field(default_factory=list, description="话题标签（有序）")
    likes_count: int = Field(default=0, ge=0, description="点赞数")
    comments_count: int = Field(default=0, ge=0, description="评论数")
    comments: list[Comment] = Field(default_factory=list, description="评论列表（有序）")
    reactions: ReactionMap = Field(default_factory=dict, description="表情反应计数")
    updated_at: datetime | None = Field(default=None, description="最后编辑时间")
