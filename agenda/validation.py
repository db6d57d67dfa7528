"""预约表单校验与输入掩码

所有校验在发起任何数据库调用之前同步完成，失败时抛出 ValidationError，
其中的 message 直接展示给用户（葡语）。
"""
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from agenda.types import Address, AppointmentStatus
from commissions.locale_number import parse_locale_number

REQUIRED_FIELDS_MESSAGE = "Por favor, preencha todos os campos obrigatórios."
PAID_WITHOUT_ORDER_MESSAGE = "Informe o Valor do Pedido antes de alterar o status para Pago."


class ValidationError(ValueError):
    """本地校验失败

    Attributes:
        field: 出错的字段名（camelCase，与前端一致），整体错误时为 None
        message: 面向用户的提示
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


@dataclass(frozen=True)
class AppointmentDraft:
    """通过校验的表单数据，字段名与数据库列一致"""
    date: date
    requester_name: str
    status: AppointmentStatus
    client_name: str
    client_phone: str
    address: Address
    order_number: Optional[str] = None
    observations: Optional[str] = None
    order_value: Optional[Decimal] = None
    commission_rate: Optional[Decimal] = None
    commission_paid: bool = False

    def to_fields(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "order_number": self.order_number,
            "requester_name": self.requester_name,
            "status": self.status.value,
            "client_name": self.client_name,
            "client_phone": self.client_phone,
            "address": self.address.to_dict(),
            "observations": self.observations,
            "order_value": self.order_value,
            "commission_rate": self.commission_rate,
            "commission_paid": self.commission_paid,
        }


def format_phone_number(value: Optional[str]) -> str:
    """电话掩码：(XX) XXXXX-XXXX"""
    if not value:
        return ""
    digits = re.sub(r"\D", "", value)
    if len(digits) < 3:
        return f"({digits}"
    if len(digits) < 8:
        return f"({digits[:2]}) {digits[2:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:11]}"


def parse_date(value: Any, field_name: str = "date") -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (TypeError, ValueError):
        raise ValidationError("Data inválida.", field=field_name)


def parse_status(value: Any) -> AppointmentStatus:
    try:
        return AppointmentStatus.parse(value)
    except ValueError:
        raise ValidationError("Status inválido.", field="status")


def ensure_payable(order_value: Optional[Decimal], paid: bool) -> None:
    """只有订单金额 > 0 时才允许标记提成为已付"""
    if paid and (order_value is None or order_value <= 0):
        raise ValidationError(PAID_WITHOUT_ORDER_MESSAGE, field="commissionPaid")


def _text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else ""


def validate_appointment_form(payload: Dict[str, Any]) -> AppointmentDraft:
    """校验预约表单（camelCase 载荷）

    地址既可以是嵌套的 ``address`` 对象，也可以是平铺的 street/number 等字段。

    Raises:
        ValidationError: 必填项缺失、日期/状态非法、无金额却标记为已付
    """
    address_data = payload.get("address") or {
        key: payload.get(key)
        for key in ("street", "number", "complement", "district", "city")
    }
    address = Address.from_dict(address_data)

    required = {
        "date": _text(payload, "date"),
        "requesterName": _text(payload, "requesterName"),
        "clientName": _text(payload, "clientName"),
        "street": address.street.strip(),
        "number": address.number.strip(),
        "district": address.district.strip(),
        "city": address.city.strip(),
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE, field=missing[0])

    status = parse_status(payload.get("status") or AppointmentStatus.PENDING)
    order_value = parse_locale_number(payload.get("orderValue"))
    commission_rate = parse_locale_number(payload.get("commissionRate"))
    commission_paid = bool(payload.get("commissionPaid", False))
    ensure_payable(order_value, commission_paid)

    return AppointmentDraft(
        date=parse_date(payload.get("date")),
        requester_name=required["requesterName"],
        status=status,
        client_name=required["clientName"],
        client_phone=format_phone_number(_text(payload, "clientPhone")),
        address=address,
        order_number=_text(payload, "orderNumber") or None,
        observations=_text(payload, "observations") or None,
        order_value=order_value,
        commission_rate=commission_rate,
        commission_paid=commission_paid,
    )
