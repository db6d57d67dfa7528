"""用户仓库 —— users 表的数据访问层。"""
from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.orm import Session

from agenda.types import User
from .connection import DatabaseConnection
from .errors import backend_call
from .models import UserAccount


def _to_user(record: UserAccount) -> User:
    return User(id=record.id, name=record.name, email=record.email)


class UserRepository:
    """用户仓库"""

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def create(self, name: str, email: str, password_hash: str) -> User:
        """创建用户

        Raises:
            BackendError: 邮箱已存在时 kind 为 UNIQUE
        """
        with backend_call("创建用户"), self._get_session() as sess:
            record = UserAccount(name=name, email=email, password_hash=password_hash)
            sess.add(record)
            sess.commit()
            sess.refresh(record)
            logger.info(f"已创建用户 {record.email}")
            return _to_user(record)

    def get(self, user_id: str) -> Optional[User]:
        with backend_call("读取用户"), self._get_session() as sess:
            record = sess.get(UserAccount, user_id)
            return _to_user(record) if record else None

    def find_credentials(self, email: str) -> Optional[Tuple[User, str]]:
        """按邮箱查找用户及其密码哈希"""
        with backend_call("查询用户"), self._get_session() as sess:
            record = sess.query(UserAccount).filter(
                UserAccount.email == email
            ).first()
            if record is None:
                return None
            return _to_user(record), record.password_hash
