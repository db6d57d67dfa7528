"""SQLAlchemy ORM 模型定义。

- UserAccount: 登录用户
- Measurement: 上门测量预约（提成字段也存放在这里）

列名统一使用 snake_case，与 API 的 camelCase 之间的映射见 field_map.py。
"""
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey,
    JSON, Numeric, String, Text
)
from sqlalchemy.orm import declarative_base

# SQLAlchemy declarative base，所有模型都继承自此类
Base = declarative_base()

# 允许使用旧式类型注解
Base.__allow_unmapped__ = True

STATUS_VALUES = ("Pendente", "Realizado", "Cancelado")


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserAccount(Base):
    """用户表模型。

    Attributes:
        id: 主键，uuid 字符串。
        name: 显示名称。
        email: 登录邮箱，唯一。
        password_hash: PBKDF2 哈希，格式 ``salt$hash``。
        created_at: 创建时间。
    """
    __tablename__ = "users"

    id: str = Column(String(36), primary_key=True, default=_new_id)
    name: str = Column(String(100), nullable=False)
    email: str = Column(String(255), nullable=False, unique=True)
    password_hash: str = Column(String(255), nullable=False)
    created_at: datetime = Column(DateTime, default=_utcnow)


class Measurement(Base):
    """上门测量预约表模型。

    Attributes:
        id: 主键，插入时由数据库层分配的 uuid 字符串。
        user_id: 创建者，外键关联 users 表。
        order_number: 订单号，可选。
        date: 预约日期。
        requester_name: 申请人（销售）姓名。
        status: Pendente / Realizado / Cancelado。
        client_name: 客户姓名。
        client_phone: 客户电话。
        address: JSON 地址（street, number, complement, district, city）。
        observations: 备注。
        order_value: 订单金额，NUMERIC(12,2)，可为空。
        commission_rate: 提成比例（百分数），NUMERIC(7,4)，可为空。
        commission_paid: 提成是否已支付。
        created_at: 创建时间。
    """
    __tablename__ = "measurements"
    __table_args__ = (
        CheckConstraint(
            "status IN ('Pendente', 'Realizado', 'Cancelado')",
            name="ck_measurements_status",
        ),
        CheckConstraint(
            "order_value IS NULL OR order_value >= 0",
            name="ck_measurements_order_value",
        ),
        CheckConstraint(
            "commission_rate IS NULL OR commission_rate >= 0",
            name="ck_measurements_commission_rate",
        ),
    )

    id: str = Column(String(36), primary_key=True, default=_new_id)
    user_id: Optional[str] = Column(String(36), ForeignKey("users.id"))
    order_number: Optional[str] = Column(String(50))
    date: date = Column(Date, nullable=False, index=True)
    requester_name: str = Column(String(100), nullable=False)
    status: str = Column(String(20), nullable=False, default="Pendente")
    client_name: str = Column(String(100), nullable=False)
    client_phone: str = Column(String(30), default="")
    address: Dict[str, Any] = Column(JSON, default=dict)
    observations: Optional[str] = Column(Text)
    order_value: Optional[Decimal] = Column(Numeric(12, 2))
    commission_rate: Optional[Decimal] = Column(Numeric(7, 4))
    commission_paid: bool = Column(Boolean, nullable=False, default=False)
    created_at: datetime = Column(DateTime, default=_utcnow)
