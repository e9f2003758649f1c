"""Session Domain Model

本地持久化的登录会话：{ user: {id, email}, expires_at }。
"""

from datetime import UTC, datetime

from pydantic import AwareDatetime, BaseModel, Field


class SessionUser(BaseModel):
    """会话中保存的最小用户信息"""

    id: str = Field(description="用户 ID")
    email: str = Field(description="登录邮箱")


class Session(BaseModel):
    """登录会话"""

    user: SessionUser = Field(description="会话用户")
    expires_at: AwareDatetime = Field(description="过期时间（带时区）")

    def is_expired(self, now: datetime | None = None) -> bool:
        """会话是否已过期"""
        now = now or datetime.now(UTC)
        return self.expires_at <= now
