"""后端错误分类

所有数据库/认证错误在仓库边界被转换为 BackendError，
其 kind 取自封闭的 ErrorKind 枚举，上层只需按类别处理，
不再对错误文本做字符串匹配。
"""
import re
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from loguru import logger
from sqlalchemy.exc import (
    DisconnectionError, IntegrityError, InterfaceError,
    OperationalError, SQLAlchemyError
)


class ErrorKind(Enum):
    """后端错误类别"""
    PERMISSION_DENIED = "permission_denied"      # 行级安全/权限拒绝
    FOREIGN_KEY = "foreign_key"                  # 外键约束
    UNIQUE = "unique"                            # 唯一约束
    CHECK = "check"                              # CHECK 约束
    CONNECTIVITY = "connectivity"                # 网络/连接失败
    INVALID_CREDENTIALS = "invalid_credentials"  # 用户名或密码错误
    SESSION_EXPIRED = "session_expired"          # 会话过期
    SCHEMA_MISSING = "schema_missing"            # 表不存在
    UNKNOWN = "unknown"


USER_MESSAGES = {
    ErrorKind.PERMISSION_DENIED: "Você não tem permissão para realizar esta ação.",
    ErrorKind.FOREIGN_KEY: "Não foi possível realizar a operação devido a dados relacionados.",
    ErrorKind.UNIQUE: "Já existe um registro com estes dados. Verifique se há duplicatas.",
    ErrorKind.CHECK: "Os dados fornecidos são inválidos. Por favor, verifique os campos.",
    ErrorKind.CONNECTIVITY: "Falha de conexão. Verifique sua internet e tente novamente.",
    ErrorKind.INVALID_CREDENTIALS: "E-mail ou senha inválidos.",
    ErrorKind.SESSION_EXPIRED: "Sua sessão expirou. Faça login novamente.",
    ErrorKind.SCHEMA_MISSING: (
        "A tabela do banco de dados não foi encontrada. "
        "Execute o script de configuração."
    ),
}

# PostgreSQL SQLSTATE
_SQLSTATE_KINDS = {
    "23505": ErrorKind.UNIQUE,
    "23503": ErrorKind.FOREIGN_KEY,
    "23514": ErrorKind.CHECK,
    "42P01": ErrorKind.SCHEMA_MISSING,
    "42501": ErrorKind.PERMISSION_DENIED,
}

# 没有 SQLSTATE 的驱动（SQLite）按错误信息归类
_MESSAGE_KINDS = (
    (re.compile(r"row-level security|permission denied"), ErrorKind.PERMISSION_DENIED),
    (re.compile(r"foreign key"), ErrorKind.FOREIGN_KEY),
    (re.compile(r"unique constraint|duplicate key"), ErrorKind.UNIQUE),
    (re.compile(r"check constraint"), ErrorKind.CHECK),
    (re.compile(r"no such table|relation \".*\" does not exist"), ErrorKind.SCHEMA_MISSING),
)


class BackendError(Exception):
    """后端操作失败

    Attributes:
        kind: 错误类别
        detail: 后端原始错误信息
        hint: 覆盖默认提示的用户信息（可选）
    """

    def __init__(self, kind: ErrorKind, detail: str = "", hint: Optional[str] = None):
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail
        self.hint = hint

    @property
    def message(self) -> str:
        """面向用户的提示；未知错误直接展示原始信息"""
        if self.hint:
            return self.hint
        return USER_MESSAGES.get(self.kind) or self.detail or "Ocorreu um erro desconhecido."


def _sqlstate(exc: BaseException) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def classify(exc: BaseException) -> ErrorKind:
    """判断异常所属类别"""
    if isinstance(exc, BackendError):
        return exc.kind

    code = _sqlstate(exc)
    if code in _SQLSTATE_KINDS:
        return _SQLSTATE_KINDS[code]
    if code and code.startswith("08"):
        return ErrorKind.CONNECTIVITY

    text = str(getattr(exc, "orig", None) or exc).lower()
    for pattern, kind in _MESSAGE_KINDS:
        if pattern.search(text):
            return kind

    if isinstance(exc, (DisconnectionError, InterfaceError, OperationalError)):
        return ErrorKind.CONNECTIVITY
    if isinstance(exc, IntegrityError):
        return ErrorKind.CHECK
    return ErrorKind.UNKNOWN


def translate_error(exc: BaseException) -> BackendError:
    """把任意后端异常转换为 BackendError"""
    if isinstance(exc, BackendError):
        return exc
    return BackendError(classify(exc), str(getattr(exc, "orig", None) or exc))


def user_message(error: BackendError, context: str) -> str:
    """完整的用户提示，例如 ``Erro ao excluir o agendamento: ...``"""
    return f"Erro ao {context}: {error.message}"


@contextmanager
def backend_call(operation: str) -> Iterator[None]:
    """在仓库方法中包裹数据库调用，统一转换并记录错误

    Args:
        operation: 操作描述，用于日志
    """
    try:
        yield
    except SQLAlchemyError as e:
        error = translate_error(e)
        logger.error(f"{operation}失败 [{error.kind.value}]: {error.detail}")
        raise error from e
