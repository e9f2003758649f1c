"""User Domain Model"""

from pydantic import BaseModel, Field


class User(BaseModel):
    """用户资料"""

    id: str = Field(description="用户 ID")
    name: str = Field(default="", description="显示名称")
    email: str = Field(default="", description="登录邮箱")
    profile_image: str = Field(default="", description="头像 URL")
    cover_image: str = Field(default="", description="封面 URL")
    bio: str = Field(default="", description="个人简介")
    posts_count: int = Field(default=0, ge=0, description="帖子数")
    followers_count: int = Field(default=0, ge=0, description="粉丝数")
    following_count: int = Field(default=0, ge=0, description="关注数")
    website: str | None = Field(default=None, description="个人网站")
    interests: list[str] = Field(default_factory=list, description="兴趣标签")
