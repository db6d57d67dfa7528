"""提成本地修改测试。"""
from decimal import Decimal

import pytest

from agenda.validation import PAID_WITHOUT_ORDER_MESSAGE, ValidationError
from commissions.projection import project_commissions
from commissions.reconciler import apply_edit, find_item, remove_commission, set_commission_paid


@pytest.fixture
def items(make_appointment):
    return project_commissions([
        make_appointment("a", order_value=Decimal("1250.00")),
        make_appointment("b", order_value=None, client_name="Sem Pedido"),
        make_appointment("c", order_value=Decimal("300"), commission_rate=Decimal("2"),
                         commission_paid=True),
    ])


class TestApplyEdit:
    """字段编辑。"""

    def test_order_value_edit_recomputes_commission(self, items):
        result = apply_edit(items, "a", "order_value", "2000,00")

        assert result.changed.order_value.text == "2000,00"
        assert result.changed.commission_value == Decimal("10")
        assert find_item(result.items, "a").commission_value == Decimal("10")

    def test_patch_contains_only_the_changed_field(self, items):
        result = apply_edit(items, "a", "order_value", "2000,00")

        assert result.patch.appointment_id == "a"
        assert result.patch.fields == {"order_value": Decimal("2000.00")}

    def test_other_items_are_untouched(self, items):
        result = apply_edit(items, "a", "commission_rate", "1")
        assert result.items[1] is items[1]
        assert result.items[2] is items[2]

    def test_original_collection_is_not_mutated(self, items):
        before = items[0]
        apply_edit(items, "a", "order_value", "9,99")
        assert items[0] is before
        assert items[0].order_value.text == "1250,00"

    def test_rate_edit_uses_current_order_text(self, items):
        typed = apply_edit(items, "a", "order_value", "2.000,")
        result = apply_edit(typed.items, "a", "commission_rate", "1,5")
        assert result.changed.commission_value == Decimal("30")

    def test_in_progress_text_is_preserved(self, items):
        result = apply_edit(items, "a", "order_value", "12,")
        assert result.changed.order_value.text == "12,"
        assert result.changed.order_value.value == Decimal("12")

    def test_order_value_truncated_to_two_decimals(self, items):
        result = apply_edit(items, "a", "order_value", "2000,555")

        assert result.changed.order_value.text == "2000,55"
        assert result.changed.order_value.value == Decimal("2000.55")
        assert result.changed.commission_value == Decimal("10.00275")
        assert result.patch.fields == {"order_value": Decimal("2000.55")}

    def test_currency_prefix_is_stripped(self, items):
        result = apply_edit(items, "a", "order_value", "R$ 2.000,00")

        assert result.changed.order_value.text == "2000,00"
        assert result.patch.fields == {"order_value": Decimal("2000.00")}

    def test_rate_keeps_digits_and_one_comma(self, items):
        result = apply_edit(items, "a", "commission_rate", "1,5%")

        assert result.changed.commission_rate.text == "1,5"
        assert result.patch.fields == {"commission_rate": Decimal("1.5")}

    def test_text_fields_are_not_masked(self, items):
        result = apply_edit(items, "a", "order_number", "PED-1.234")
        assert result.patch.fields == {"order_number": "PED-1.234"}

    def test_unparsable_numeric_patches_null(self, items):
        result = apply_edit(items, "a", "order_value", "")
        assert result.patch.fields == {"order_value": None}
        assert result.changed.commission_value == Decimal(0)

    def test_text_field_edit(self, items):
        result = apply_edit(items, "a", "client_name", "Maria Souza")
        assert result.changed.client_name == "Maria Souza"
        assert result.changed.commission_value == items[0].commission_value
        assert result.patch.fields == {"client_name": "Maria Souza"}

    def test_blank_order_number_patches_null(self, items):
        result = apply_edit(items, "a", "order_number", "")
        assert result.patch.fields == {"order_number": None}

    def test_unknown_field_rejected(self, items):
        with pytest.raises(ValueError):
            apply_edit(items, "a", "status", "Cancelado")

    def test_unknown_id_is_noop(self, items):
        result = apply_edit(items, "missing", "order_value", "10")
        assert result.items == tuple(items)
        assert result.changed is None
        assert result.patch is None


class TestSetCommissionPaid:
    """支付状态修改。"""

    def test_mark_paid(self, items):
        result = set_commission_paid(items, "a", True)
        assert result.changed.commission_paid is True
        assert result.patch.fields == {"commission_paid": True}

    def test_mark_unpaid_always_allowed(self, items):
        result = set_commission_paid(items, "c", False)
        assert result.patch.fields == {"commission_paid": False}

    def test_paid_without_order_value_rejected(self, items):
        with pytest.raises(ValidationError) as exc_info:
            set_commission_paid(items, "b", True)
        assert exc_info.value.message == PAID_WITHOUT_ORDER_MESSAGE
        assert find_item(items, "b").commission_paid is False

    def test_paid_after_order_value_cleared_rejected(self, items):
        cleared = apply_edit(items, "a", "order_value", "0,00")
        with pytest.raises(ValidationError):
            set_commission_paid(cleared.items, "a", True)


class TestRemoveCommission:
    """清除提成数据。"""

    def test_removes_row_and_clears_values(self, items):
        result = remove_commission(items, "a")

        assert find_item(result.items, "a") is None
        assert len(result.items) == 2
        assert result.changed.order_value.value is None
        assert result.changed.commission_value == Decimal(0)
        assert result.patch.fields == {"order_value": None, "commission_rate": None}

    def test_unknown_id_is_noop(self, items):
        result = remove_commission(items, "zzz")
        assert result.patch is None
        assert len(result.items) == 3
