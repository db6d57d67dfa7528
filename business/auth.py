"""认证服务 - 注册、登录、登出、获取当前会话

会话以随机 token 标识，保存在进程内存中。
会话在一段时间无操作后失效（默认 15 分钟），每次成功访问都会刷新。
"""
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from loguru import logger

from agenda.types import User
from agenda.validation import REQUIRED_FIELDS_MESSAGE, ValidationError
from database.errors import BackendError, ErrorKind
from database.user_repo import UserRepository

MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 120_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """PBKDF2-SHA256 哈希，返回 ``salt$hash``"""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), PBKDF2_ITERATIONS
    )
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    salt, _, _ = stored.partition("$")
    if not salt:
        return False
    return hmac.compare_digest(hash_password(password, salt), stored)


@dataclass
class AuthSession:
    """登录会话"""
    token: str
    user: User
    last_seen: datetime


class AuthService:
    """认证服务

    Args:
        users: 用户仓库
        idle_timeout: 无操作超时
        clock: 当前时间（测试中可替换）
    """

    def __init__(
        self,
        users: UserRepository,
        idle_timeout: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.users = users
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: Dict[str, AuthSession] = {}

    def _start_session(self, user: User) -> AuthSession:
        session = AuthSession(
            token=secrets.token_hex(32), user=user, last_seen=self._clock()
        )
        self._sessions[session.token] = session
        return session

    def sign_up(self, name: str, email: str, password: str,
                confirm_password: Optional[str] = None) -> AuthSession:
        """注册并直接登录

        Raises:
            ValidationError: 必填项缺失、两次密码不一致、密码过短
            BackendError: 邮箱已注册（UNIQUE）或其他后端错误
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()
        password = password or ""
        if not name or not email or not password:
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        if confirm_password is not None and password != confirm_password:
            raise ValidationError("As senhas não coincidem.", field="confirmPassword")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"A senha deve ter no mínimo {MIN_PASSWORD_LENGTH} caracteres.",
                field="password",
            )

        try:
            user = self.users.create(name, email, hash_password(password))
        except BackendError as e:
            if e.kind is ErrorKind.UNIQUE:
                raise BackendError(e.kind, e.detail, hint="Este e-mail já está cadastrado.") from e
            raise
        logger.info(f"新用户注册: {email}")
        return self._start_session(user)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """登录

        Raises:
            BackendError: 邮箱或密码错误时 kind 为 INVALID_CREDENTIALS
        """
        email = (email or "").strip().lower()
        found = self.users.find_credentials(email) if email else None
        if found is None or not verify_password(password or "", found[1]):
            logger.warning(f"登录失败: {email}")
            raise BackendError(ErrorKind.INVALID_CREDENTIALS, "Invalid login credentials")
        user, _ = found
        logger.info(f"用户登录: {email}")
        return self._start_session(user)

    def sign_out(self, token: str) -> None:
        session = self._sessions.pop(token, None)
        if session:
            logger.info(f"用户登出: {session.user.email}")

    def get_session(self, token: Optional[str]) -> AuthSession:
        """获取并刷新会话

        Raises:
            BackendError: token 无效或已超时，kind 为 SESSION_EXPIRED
        """
        session = self._sessions.get(token or "")
        if session is None:
            raise BackendError(ErrorKind.SESSION_EXPIRED, "session not found")

        now = self._clock()
        if now - session.last_seen > self.idle_timeout:
            del self._sessions[session.token]
            logger.info(f"会话因无操作过期: {session.user.email}")
            raise BackendError(
                ErrorKind.SESSION_EXPIRED, "session idle timeout",
                hint="Sessão expirada por inatividade.",
            )
        session.last_seen = now
        return session

    def prune_expired(self) -> List[str]:
        """移除所有已超时的会话，返回被移除的 token"""
        now = self._clock()
        expired = [
            token for token, session in self._sessions.items()
            if now - session.last_seen > self.idle_timeout
        ]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info(f"清理过期会话: {len(expired)} 个")
        return expired
