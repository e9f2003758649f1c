"""Community Domain Model"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .post import ReactionMap
from .user import User


class Community(BaseModel):
    """社区"""

    id: str = Field(description="社区 ID")
    name: str = Field(description="社区名称")
    description: str = Field(default="", description="社区简介")
    image_url: str = Field(default="", description="封面 URL")
    members_count: int = Field(default=0, ge=0, description="成员数")
    is_private: bool = Field(default=False, description="是否私密")
    category: str = Field(default="", description="分类")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="创建时间",
    )


class CommunityMessage(BaseModel):
    """社区聊天消息"""

    id: str = Field(description="消息 ID")
    community_id: str = Field(description="所属社区 ID")
    author: User | None = Field(default=None, description="作者")
    content: str = Field(description="消息内容")
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="发送时间",
    )
    reactions: ReactionMap = Field(default_factory=dict, description="表情反应计数")
