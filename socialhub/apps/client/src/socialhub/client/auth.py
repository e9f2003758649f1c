"""会话与登录

SessionRepository 把 {user: {id, email}, expires_at} 保存在本地存储中；
AuthService 在加载时校验过期时间，过期会话直接清除。
登录是模拟查找：按邮箱找到用户即成功，不校验密码。
"""

from datetime import UTC, datetime, timedelta

import structlog
from pydantic import ValidationError
from socialhub.backend.repositories import UserRepository
from socialhub.core.cancellation import CancellationToken, is_cancelled
from socialhub.core.config import SESSION_STORAGE_KEY, SESSION_TTL_S
from socialhub.core.exceptions import AuthenticationError
from socialhub.core.ids import new_id
from socialhub.core.models import Session, SessionUser, User
from socialhub.core.storage import LocalStorage

from .logging_config import bind_session_context

log = structlog.get_logger()


class SessionRepository:
    """本地会话记录读写"""

    def __init__(self, storage: LocalStorage, key: str = SESSION_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    def get(self) -> Session | None:
        """读取会话；记录缺失返回 None，格式错误的记录被清除后返回 None"""
        raw = self._storage.get_item(self._key)
        if not raw:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError as e:
            log.warning("session_record_invalid", error_count=e.error_count())
            self.clear()
            return None

    def set(self, session: Session) -> None:
        self._storage.set_item(self._key, session.model_dump_json())

    def clear(self) -> None:
        self._storage.remove_item(self._key)


class AuthService:
    """模拟登录服务"""

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        fallback_users: list[User] | None = None,
        ttl_s: int = SESSION_TTL_S,
    ) -> None:
        """
        Args:
            users: 用户 Repository
            sessions: 会话记录
            fallback_users: 后端不可用时用于查找的内置用户
            ttl_s: 会话有效期（秒）
        """
        self._users = users
        self._sessions = sessions
        self._fallback_users = list(fallback_users or [])
        self._ttl = timedelta(seconds=ttl_s)
        self.current_user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    async def restore(self, token: CancellationToken | None = None) -> User | None:
        """启动时恢复会话

        会话过期则清除记录；token 在加载期间被取消时不修改 current_user。
        """
        session = self._sessions.get()
        if session is None:
            return None
        if session.is_expired():
            log.info("session_expired", user_id=session.user.id)
            self._sessions.clear()
            return None

        user = await self._users.get_user_by_id(session.user.id)
        if user is None:
            user = self._find_fallback(session.user.email, session.user.id)
        if is_cancelled(token):
            return None
        if user is None:
            log.warning("session_user_not_found", user_id=session.user.id)
            self._sessions.clear()
            return None

        self._set_current(user)
        return user

    async def login(self, email: str, password: str) -> User:
        """按邮箱登录（不校验密码）

        Raises:
            AuthenticationError: 用户不存在
        """
        del password  # 模拟登录不校验密码
        user = await self._users.get_user_by_email(email)
        if user is None:
            user = self._find_fallback(email)
        if user is None:
            log.info("login_user_not_found", email=email)
            raise AuthenticationError("Usuário não encontrado.")
        self._start_session(user)
        return user

    async def register(self, name: str, email: str, password: str) -> User:
        """注册新用户并登录

        后端写入失败时仍以本地用户登录。

        Raises:
            AuthenticationError: 邮箱已注册
        """
        del password
        existing = await self._users.get_user_by_email(email) or self._find_fallback(email)
        if existing is not None:
            raise AuthenticationError("Este e-mail já está cadastrado.")

        user = User(id=new_id("user"), name=name, email=email)
        created = await self._users.create_user(user)
        if created is None:
            log.warning("register_backend_failed_using_local_user", user_id=user.id)
            self._fallback_users.append(user)
            created = user
        self._start_session(created)
        return created

    def logout(self) -> None:
        self._sessions.clear()
        self.current_user = None
        bind_session_context(None)

    def update_current_user(self, user: User) -> None:
        """资料更新后刷新当前用户"""
        if self.current_user is not None and self.current_user.id == user.id:
            self.current_user = user

    def _start_session(self, user: User) -> None:
        expires_at = datetime.now(UTC) + self._ttl
        self._sessions.set(Session(user=SessionUser(id=user.id, email=user.email), expires_at=expires_at))
        self._set_current(user)
        log.info("session_started", user_id=user.id)

    def _set_current(self, user: User) -> None:
        self.current_user = user
        bind_session_context(user.id)

    def _find_fallback(self, email: str, user_id: str | None = None) -> User | None:
        email_lower = email.lower()
        for user in self._fallback_users:
            if user.email.lower() == email_lower or (user_id and user.id == user_id):
                return user
        return None
