"""预约仓库 —— measurements 表的数据访问层。

提供应用所需的五个动词：按日期倒序列出全部、按 ID 读取、插入、
按 ID 更新、按 ID 删除。所有数据库异常都在这里转换为 BackendError。
返回值为 agenda.types.Appointment（不可变对象），不向上层泄露 ORM 对象。
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from agenda.types import Address, Appointment, AppointmentStatus
from .connection import DatabaseConnection
from .errors import backend_call
from .models import Measurement

# 允许通过 insert/update 写入的列
WRITABLE_COLUMNS = (
    "order_number", "date", "requester_name", "status", "client_name",
    "client_phone", "address", "observations", "order_value",
    "commission_rate", "commission_paid",
)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def to_appointment(record: Measurement) -> Appointment:
    """ORM 对象 -> 领域对象"""
    return Appointment(
        id=record.id,
        date=record.date,
        requester_name=record.requester_name,
        status=AppointmentStatus.parse(record.status),
        client_name=record.client_name,
        client_phone=record.client_phone or "",
        address=Address.from_dict(record.address),
        order_number=record.order_number,
        observations=record.observations,
        order_value=_decimal(record.order_value),
        commission_rate=_decimal(record.commission_rate),
        commission_paid=bool(record.commission_paid),
        user_id=record.user_id,
    )


def _writable(fields: Dict[str, Any]) -> Dict[str, Any]:
    values = {k: v for k, v in fields.items() if k in WRITABLE_COLUMNS}
    status = values.get("status")
    if isinstance(status, AppointmentStatus):
        values["status"] = status.value
    address = values.get("address")
    if isinstance(address, Address):
        values["address"] = address.to_dict()
    return values


class AppointmentRepository:
    """预约仓库

    Example::

        repo = AppointmentRepository(DatabaseConnection("sqlite:///data/agenda.db"))
        created = repo.insert({"date": date(2024, 5, 2), ...}, user_id=user.id)
        repo.update(created.id, {"status": "Realizado"})
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def list_all(self) -> List[Appointment]:
        """全部预约，按日期倒序"""
        with backend_call("加载预约列表"), self._get_session() as sess:
            records = sess.query(Measurement).order_by(
                Measurement.date.desc(), Measurement.created_at.desc()
            ).all()
            return [to_appointment(r) for r in records]

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with backend_call("读取预约"), self._get_session() as sess:
            record = sess.get(Measurement, appointment_id)
            return to_appointment(record) if record else None

    def insert(self, fields: Dict[str, Any],
               user_id: Optional[str] = None) -> Appointment:
        """插入新预约，ID 由数据库层分配

        Args:
            fields: 列名 -> 值（snake_case）
            user_id: 创建者 ID
        """
        with backend_call("创建预约"), self._get_session() as sess:
            record = Measurement(user_id=user_id, **_writable(fields))
            sess.add(record)
            sess.commit()
            sess.refresh(record)
            logger.info(f"已创建预约 {record.id} ({record.client_name})")
            return to_appointment(record)

    def update(self, appointment_id: str,
               fields: Dict[str, Any]) -> Optional[Appointment]:
        """按 ID 更新部分字段

        Returns:
            更新后的预约；ID 不存在时返回 None
        """
        values = _writable(fields)
        with backend_call("更新预约"), self._get_session() as sess:
            record = sess.get(Measurement, appointment_id)
            if record is None:
                return None
            for key, value in values.items():
                setattr(record, key, value)
            sess.commit()
            sess.refresh(record)
            logger.debug(f"已更新预约 {appointment_id}: {sorted(values)}")
            return to_appointment(record)

    def delete(self, appointment_id: str) -> bool:
        """按 ID 删除（不可恢复）

        Returns:
            是否删除了记录
        """
        with backend_call("删除预约"), self._get_session() as sess:
            record = sess.get(Measurement, appointment_id)
            if record is None:
                return False
            sess.delete(record)
            sess.commit()
            logger.info(f"已删除预约 {appointment_id}")
            return True
