"""提成模块的数据结构"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from agenda.types import Address, AppointmentStatus
from commissions.locale_number import (
    Number,
    format_currency_number,
    format_rate_number,
    parse_locale_number,
)


@dataclass(frozen=True)
class EditableNumber:
    """可编辑的数字：原始输入文本 + 解析后的值

    text 保存用户正在输入的内容（可能是 "12," 这样的半成品），
    value 是对 text 解析的结果，无法解析时为 None。
    不在编辑状态时，text 总是由规范数值重新生成。
    """
    text: str = ""
    value: Optional[Decimal] = None

    @classmethod
    def from_text(cls, text: Optional[str]) -> "EditableNumber":
        text = text or ""
        return cls(text=text, value=parse_locale_number(text))

    @classmethod
    def from_currency(cls, value: Optional[Number]) -> "EditableNumber":
        if value is None:
            return cls()
        return cls(text=format_currency_number(value), value=Decimal(str(value)))

    @classmethod
    def from_rate(cls, value: Optional[Number]) -> "EditableNumber":
        if value is None:
            return cls()
        return cls(text=format_rate_number(value), value=Decimal(str(value)))

    @property
    def amount(self) -> Decimal:
        """参与计算的数值，空值按 0 处理"""
        return self.value if self.value is not None else Decimal(0)


@dataclass(frozen=True)
class CommissionItem:
    """已完成预约的提成行（仅存在于会话本地的工作集中）"""
    id: str
    date: date
    requester_name: str
    status: AppointmentStatus
    client_name: str
    client_phone: str = ""
    address: Address = field(default_factory=Address)
    order_number: Optional[str] = None
    observations: Optional[str] = None
    commission_paid: bool = False
    order_value: EditableNumber = field(default_factory=EditableNumber)
    commission_rate: EditableNumber = field(default_factory=EditableNumber)
    commission_value: Decimal = Decimal(0)

    @property
    def has_order_value(self) -> bool:
        """订单是否已成交（金额 > 0）"""
        return self.order_value.amount > 0


class PaymentFilter(Enum):
    """提成支付状态过滤"""
    ALL = "all"
    PAID = "paid"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class FilterCriteria:
    """提成列表过滤条件，日期区间两端均包含，空端表示不限"""
    search: str = ""
    start: Optional[date] = None
    end: Optional[date] = None
    payment: PaymentFilter = PaymentFilter.ALL

    @property
    def is_active(self) -> bool:
        return bool(self.search or self.start or self.end
                    or self.payment is not PaymentFilter.ALL)


@dataclass(frozen=True)
class CommissionTotals:
    """过滤后列表的汇总"""
    orders: Decimal = Decimal(0)
    commissions_to_pay: Decimal = Decimal(0)
    commissions_paid: Decimal = Decimal(0)

    @property
    def grand_total(self) -> Decimal:
        """提成总额（待付 + 已付），不含订单金额"""
        return self.commissions_to_pay + self.commissions_paid


@dataclass(frozen=True)
class CommissionPatch:
    """发往数据库的单条补丁，fields 使用数据库列名"""
    appointment_id: str
    fields: Dict[str, Any]


@dataclass(frozen=True)
class EditResult:
    """一次本地修改的结果：新的工作集、被修改的行、待发送的补丁"""
    items: Tuple[CommissionItem, ...]
    changed: Optional[CommissionItem] = None
    patch: Optional[CommissionPatch] = None
