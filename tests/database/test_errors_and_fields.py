"""后端错误分类与字段名映射测试。"""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError, SQLAlchemyError

from database.errors import (
    USER_MESSAGES,
    BackendError,
    ErrorKind,
    backend_call,
    classify,
    translate_error,
    user_message,
)
from database.field_map import API_TO_DB, to_api_fields, to_api_name, to_db_name


class FakeDriverError(Exception):
    """带 SQLSTATE 的驱动异常（模拟 psycopg2）"""

    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def wrapped(message, pgcode=None, cls=IntegrityError):
    return cls("INSERT ...", {}, FakeDriverError(message, pgcode))


class TestClassify:

    @pytest.mark.parametrize("pgcode, kind", [
        ("23505", ErrorKind.UNIQUE),
        ("23503", ErrorKind.FOREIGN_KEY),
        ("23514", ErrorKind.CHECK),
        ("42P01", ErrorKind.SCHEMA_MISSING),
        ("42501", ErrorKind.PERMISSION_DENIED),
        ("08006", ErrorKind.CONNECTIVITY),
    ])
    def test_sqlstate_takes_priority(self, pgcode, kind):
        assert classify(wrapped("whatever", pgcode)) is kind

    @pytest.mark.parametrize("message, kind", [
        ("UNIQUE constraint failed: users.email", ErrorKind.UNIQUE),
        ("FOREIGN KEY constraint failed", ErrorKind.FOREIGN_KEY),
        ("CHECK constraint failed: ck_measurements_status", ErrorKind.CHECK),
        ("no such table: measurements", ErrorKind.SCHEMA_MISSING),
        ('relation "measurements" does not exist', ErrorKind.SCHEMA_MISSING),
        ("new row violates row-level security policy", ErrorKind.PERMISSION_DENIED),
        ("duplicate key value violates unique constraint", ErrorKind.UNIQUE),
    ])
    def test_driver_messages(self, message, kind):
        assert classify(wrapped(message)) is kind

    def test_fallback_by_exception_type(self):
        assert classify(wrapped("server closed the connection", cls=OperationalError)) \
            is ErrorKind.CONNECTIVITY
        assert classify(wrapped("NOT NULL constraint failed")) is ErrorKind.CHECK
        assert classify(wrapped("syntax error", cls=ProgrammingError)) is ErrorKind.UNKNOWN
        assert classify(RuntimeError("boom")) is ErrorKind.UNKNOWN

    def test_every_kind_except_unknown_has_message(self):
        assert set(USER_MESSAGES) == set(ErrorKind) - {ErrorKind.UNKNOWN}


class TestBackendError:

    def test_translate_keeps_driver_detail(self):
        error = translate_error(wrapped("UNIQUE constraint failed: users.email"))
        assert error.kind is ErrorKind.UNIQUE
        assert error.detail == "UNIQUE constraint failed: users.email"

    def test_translate_is_idempotent(self):
        error = BackendError(ErrorKind.CHECK, "x")
        assert translate_error(error) is error

    def test_unknown_surfaces_raw_detail(self):
        error = BackendError(ErrorKind.UNKNOWN, "algo deu errado")
        assert error.message == "algo deu errado"
        assert BackendError(ErrorKind.UNKNOWN).message == "Ocorreu um erro desconhecido."

    def test_hint_overrides_message(self):
        error = BackendError(ErrorKind.UNIQUE, "dup", hint="Este e-mail já está cadastrado.")
        assert error.message == "Este e-mail já está cadastrado."

    def test_user_message(self):
        error = BackendError(ErrorKind.FOREIGN_KEY, "fk")
        assert user_message(error, "excluir o agendamento") == (
            "Erro ao excluir o agendamento: " + USER_MESSAGES[ErrorKind.FOREIGN_KEY]
        )

    def test_backend_call_translates(self):
        with pytest.raises(BackendError) as exc_info:
            with backend_call("测试操作"):
                raise wrapped("CHECK constraint failed")
        assert exc_info.value.kind is ErrorKind.CHECK
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)

    def test_backend_call_leaves_other_errors(self):
        with pytest.raises(KeyError):
            with backend_call("测试操作"):
                raise KeyError("x")


class TestFieldMap:

    def test_exact_pairs(self):
        assert API_TO_DB == {
            "orderNumber": "order_number",
            "clientName": "client_name",
            "clientPhone": "client_phone",
            "orderValue": "order_value",
            "commissionRate": "commission_rate",
            "commissionPaid": "commission_paid",
            "requesterName": "requester_name",
        }

    @pytest.mark.parametrize("name", ["id", "date", "status", "address", "observations"])
    def test_pass_through(self, name):
        assert to_db_name(name) == name
        assert to_api_name(name) == name

    def test_row_to_api_fields(self):
        row = {"id": "1", "order_value": 10, "commission_paid": True, "address": {}}
        assert to_api_fields(row) == {
            "id": "1", "orderValue": 10, "commissionPaid": True, "address": {},
        }
