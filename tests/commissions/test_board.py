"""会话级提成工作集测试。"""
from datetime import date
from decimal import Decimal

import pytest

from agenda.types import AppointmentStatus
from agenda.validation import ValidationError
from commissions.board import CommissionBoard
from commissions.filtering import current_month_criteria
from commissions.types import FilterCriteria, PaymentFilter


@pytest.fixture
def appointments(make_appointment):
    return [
        make_appointment("may", date=date(2024, 5, 10), order_value=Decimal("1000")),
        make_appointment("june", date=date(2024, 6, 3), order_value=Decimal("500")),
        make_appointment("zero", date=date(2024, 5, 20), order_value=None),
        make_appointment("pending", status=AppointmentStatus.PENDING, order_value=Decimal("50")),
    ]


class TestCommissionBoard:

    def test_starts_empty_and_unloaded(self):
        board = CommissionBoard()
        assert board.items == ()
        assert board.loaded is False

    def test_load_projects_completed_only(self, appointments):
        board = CommissionBoard()
        board.load(appointments)
        assert board.loaded is True
        assert {item.id for item in board.items} == {"may", "june", "zero"}

    def test_view_applies_criteria_and_totals(self, appointments):
        board = CommissionBoard(current_month_criteria(date(2024, 5, 5)))
        board.load(appointments)

        view = board.view()
        assert [item.id for item in view.items] == ["may", "zero"]
        assert view.totals.orders == Decimal("1000")
        assert view.totals.commissions_to_pay == Decimal("5")

    def test_totals_follow_criteria_changes(self, appointments):
        board = CommissionBoard()
        board.load(appointments)
        assert board.view().totals.orders == Decimal("1500")

        board.set_criteria(FilterCriteria(payment=PaymentFilter.UNPAID, start=date(2024, 6, 1)))
        assert board.view().totals.orders == Decimal("500")

    def test_edit_replaces_items(self, appointments):
        board = CommissionBoard()
        board.load(appointments)
        before = board.items

        result = board.edit("may", "order_value", "2000,00")

        assert board.items is result.items
        assert board.items is not before
        assert board.get("may").commission_value == Decimal("10")

    def test_rejected_payment_keeps_items(self, appointments):
        board = CommissionBoard()
        board.load(appointments)
        before = board.items

        with pytest.raises(ValidationError):
            board.mark_paid("zero", True)
        assert board.items is before

    def test_remove_drops_row(self, appointments):
        board = CommissionBoard()
        board.load(appointments)
        board.remove("june")
        assert board.get("june") is None

    def test_reload_discards_local_edits(self, appointments):
        board = CommissionBoard()
        board.load(appointments)
        board.edit("may", "order_value", "1,00")
        board.load(appointments)
        assert board.get("may").order_value.text == "1000,00"
