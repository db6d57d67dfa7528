"""预约 -> 提成行投影测试。"""
from decimal import Decimal

import pytest

from agenda.types import AppointmentStatus
from commissions.projection import (
    DEFAULT_COMMISSION_RATE,
    commission_value,
    project_commissions,
    to_commission_item,
)


class TestToCommissionItem:
    """单条投影。"""

    def test_completed_with_default_rate(self, make_appointment):
        """1250,00 的订单、无比例 -> 比例 0,5，提成 6.25"""
        appointment = make_appointment(order_value=Decimal("1250.00"), commission_rate=None)
        item = to_commission_item(appointment)

        assert item.commission_rate.text == "0,5"
        assert item.commission_rate.value == DEFAULT_COMMISSION_RATE
        assert item.order_value.text == "1250,00"
        assert item.commission_value == Decimal("6.25")

    def test_stored_rate_is_kept(self, make_appointment):
        item = to_commission_item(make_appointment(
            order_value=Decimal("1000"), commission_rate=Decimal("1.5")
        ))
        assert item.commission_rate.text == "1,5"
        assert item.commission_value == Decimal("15")

    def test_missing_order_value_is_blank_and_zero(self, make_appointment):
        item = to_commission_item(make_appointment(order_value=None))
        assert item.order_value.text == ""
        assert item.order_value.value is None
        assert item.order_value.amount == Decimal(0)
        assert item.commission_value == Decimal(0)
        assert item.has_order_value is False

    def test_copies_appointment_fields(self, make_appointment):
        appointment = make_appointment(order_number="PED-7", commission_paid=True,
                                       order_value=Decimal("10"))
        item = to_commission_item(appointment)
        assert item.id == appointment.id
        assert item.date == appointment.date
        assert item.client_name == appointment.client_name
        assert item.requester_name == appointment.requester_name
        assert item.order_number == "PED-7"
        assert item.commission_paid is True


class TestCommissionFormula:
    """提成金额 = 订单 × 比例 / 100。"""

    @pytest.mark.parametrize("order, rate, expected", [
        ("0", "0.5", "0"),
        ("1250", "0.5", "6.25"),
        ("2000", "0.5", "10"),
        ("333.33", "3", "9.9999"),
        ("100", "0", "0"),
    ])
    def test_exact_decimal_arithmetic(self, order, rate, expected):
        assert commission_value(Decimal(order), Decimal(rate)) == Decimal(expected)


class TestProjectCommissions:
    """只有已完成的预约进入工作集。"""

    def test_only_completed_appointments(self, make_appointment):
        appointments = [
            make_appointment("p", status=AppointmentStatus.PENDING, order_value=Decimal("500")),
            make_appointment("c", status=AppointmentStatus.COMPLETED),
            make_appointment("x", status=AppointmentStatus.CANCELLED,
                             order_value=Decimal("900"), commission_rate=Decimal("2")),
        ]
        items = project_commissions(appointments)
        assert [item.id for item in items] == ["c"]

    def test_returns_immutable_tuple_in_input_order(self, make_appointment):
        items = project_commissions([make_appointment("b"), make_appointment("a")])
        assert isinstance(items, tuple)
        assert [item.id for item in items] == ["b", "a"]
