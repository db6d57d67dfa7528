"""agenda 领域类型

定义上门测量预约（Appointment）及其地址、状态等数据结构。
所有对象均为不可变 dataclass，修改时通过 dataclasses.replace 生成新对象。
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class AppointmentStatus(Enum):
    """预约状态（存储值与原系统保持一致，为葡语）

    状态之间可以任意切换，不存在禁止的转换。
    """
    PENDING = "Pendente"       # 待测量
    COMPLETED = "Realizado"    # 已完成
    CANCELLED = "Cancelado"    # 已取消

    @classmethod
    def parse(cls, value: Any) -> "AppointmentStatus":
        """从存储值或枚举名解析状态

        Raises:
            ValueError: 未知状态值
        """
        if isinstance(value, cls):
            return value
        for status in cls:
            if value == status.value or value == status.name:
                return status
        raise ValueError(f"未知的预约状态: {value!r}")


@dataclass(frozen=True)
class Address:
    """测量地址"""
    street: str = ""
    number: str = ""
    district: str = ""
    city: str = ""
    complement: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Address":
        data = data or {}
        return cls(
            street=data.get("street") or "",
            number=str(data.get("number") or ""),
            district=data.get("district") or "",
            city=data.get("city") or "",
            complement=data.get("complement") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "street": self.street,
            "number": self.number,
            "district": self.district,
            "city": self.city,
        }
        if self.complement:
            result["complement"] = self.complement
        return result


@dataclass(frozen=True)
class Appointment:
    """上门测量预约（持久化实体）

    Attributes:
        id: 由后端在插入时分配的不透明字符串 ID
        date: 预约日期（无时间部分）
        requester_name: 申请人（销售）姓名
        status: 预约状态
        client_name: 客户姓名
        client_phone: 客户电话
        address: 测量地址
        order_number: 订单号（可选）
        observations: 备注（可选）
        order_value: 订单金额（可选）
        commission_rate: 提成比例，百分数（可选）
        commission_paid: 提成是否已支付
        user_id: 创建者
    """
    id: str
    date: date
    requester_name: str
    status: AppointmentStatus
    client_name: str
    client_phone: str = ""
    address: Address = field(default_factory=Address)
    order_number: Optional[str] = None
    observations: Optional[str] = None
    order_value: Optional[Decimal] = None
    commission_rate: Optional[Decimal] = None
    commission_paid: bool = False
    user_id: Optional[str] = None


@dataclass(frozen=True)
class User:
    """已登录用户"""
    id: str
    name: str
    email: str
