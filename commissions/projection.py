"""预约 -> 提成行的投影"""
from decimal import Decimal
from typing import Iterable, Tuple

from agenda.types import Appointment, AppointmentStatus
from commissions.types import CommissionItem, EditableNumber

# 未设置比例时的默认提成（百分数）
DEFAULT_COMMISSION_RATE = Decimal("0.5")


def commission_value(order_value: Decimal, commission_rate: Decimal) -> Decimal:
    """提成金额 = 订单金额 × 比例 / 100"""
    return order_value * commission_rate / 100


def to_commission_item(appointment: Appointment) -> CommissionItem:
    """把一条预约投影为提成行

    比例缺省为 0.5%，订单金额缺省为 0；订单金额为空时输入框保持空白。
    """
    rate = appointment.commission_rate
    if rate is None:
        rate = DEFAULT_COMMISSION_RATE
    order_value = EditableNumber.from_currency(appointment.order_value)
    commission_rate = EditableNumber.from_rate(rate)

    return CommissionItem(
        id=appointment.id,
        date=appointment.date,
        requester_name=appointment.requester_name,
        status=appointment.status,
        client_name=appointment.client_name,
        client_phone=appointment.client_phone,
        address=appointment.address,
        order_number=appointment.order_number,
        observations=appointment.observations,
        commission_paid=appointment.commission_paid,
        order_value=order_value,
        commission_rate=commission_rate,
        commission_value=commission_value(order_value.amount, commission_rate.amount),
    )


def project_commissions(appointments: Iterable[Appointment]) -> Tuple[CommissionItem, ...]:
    """只有已完成（Realizado）的预约进入提成工作集"""
    return tuple(
        to_commission_item(a) for a in appointments
        if a.status is AppointmentStatus.COMPLETED
    )
