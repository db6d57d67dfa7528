"""提成工作集的本地修改

每个操作都返回新的工作集（从不原地修改）、被修改的那一行，
以及一条只包含变更字段的补丁，供调用方发往数据库。
单字段修改绝不会重发整个列表。
"""
import dataclasses
from typing import Callable, Optional, Sequence, Tuple

from agenda.validation import ValidationError, ensure_payable
from commissions.locale_number import mask_currency_input, mask_rate_input, parse_locale_number
from commissions.projection import commission_value
from commissions.types import CommissionItem, CommissionPatch, EditableNumber, EditResult

# 可编辑字段 -> 数据库列
EDITABLE_FIELDS = ("order_value", "commission_rate", "order_number", "client_name")
# 数值字段 -> 输入掩码
INPUT_MASKS = {
    "order_value": mask_currency_input,
    "commission_rate": mask_rate_input,
}
NUMERIC_FIELDS = tuple(INPUT_MASKS)


def _replace_one(
    items: Sequence[CommissionItem],
    item_id: str,
    change: Callable[[CommissionItem], CommissionItem],
) -> Tuple[Tuple[CommissionItem, ...], Optional[CommissionItem]]:
    changed = None
    updated = []
    for item in items:
        if item.id == item_id:
            item = change(item)
            changed = item
        updated.append(item)
    return tuple(updated), changed


def find_item(items: Sequence[CommissionItem], item_id: str) -> Optional[CommissionItem]:
    return next((item for item in items if item.id == item_id), None)


def recompute(item: CommissionItem) -> CommissionItem:
    """按当前输入文本重新计算提成金额"""
    return dataclasses.replace(
        item,
        commission_value=commission_value(item.order_value.amount, item.commission_rate.amount),
    )


def apply_edit(items: Sequence[CommissionItem], item_id: str,
               field: str, raw_value: Optional[str]) -> EditResult:
    """修改某一行的一个字段

    金额/比例字段先经过输入掩码（只保留数字和一个逗号，金额小数最多两位），
    保留掩码后的文本并立即重新计算提成金额；补丁中的数值按"无法解析即为空"写入。

    Args:
        items: 当前工作集
        item_id: 预约 ID
        field: order_value / commission_rate / order_number / client_name
        raw_value: 输入框中的文本

    Raises:
        ValueError: 字段不可编辑
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"字段不可编辑: {field}")

    raw_value = raw_value or ""
    if field in INPUT_MASKS:
        raw_value = INPUT_MASKS[field](raw_value)

    def change(item: CommissionItem) -> CommissionItem:
        if field in NUMERIC_FIELDS:
            return recompute(dataclasses.replace(item, **{field: EditableNumber.from_text(raw_value)}))
        return dataclasses.replace(item, **{field: raw_value})

    updated, changed = _replace_one(items, item_id, change)
    if changed is None:
        return EditResult(items=tuple(items))

    if field in NUMERIC_FIELDS:
        stored = parse_locale_number(raw_value)
    else:
        stored = raw_value or None
    patch = CommissionPatch(appointment_id=item_id, fields={field: stored})
    return EditResult(items=updated, changed=changed, patch=patch)


def set_commission_paid(items: Sequence[CommissionItem], item_id: str,
                        paid: bool) -> EditResult:
    """修改提成支付状态

    Raises:
        ValidationError: 订单金额为空或为 0 时标记为已付，此时工作集不变
    """
    current = find_item(items, item_id)
    if current is None:
        return EditResult(items=tuple(items))
    ensure_payable(current.order_value.value, paid)

    updated, changed = _replace_one(
        items, item_id, lambda item: dataclasses.replace(item, commission_paid=paid)
    )
    patch = CommissionPatch(appointment_id=item_id, fields={"commission_paid": paid})
    return EditResult(items=updated, changed=changed, patch=patch)


def remove_commission(items: Sequence[CommissionItem], item_id: str) -> EditResult:
    """清除某行的提成数据（预约本身不删除）"""
    current = find_item(items, item_id)
    if current is None:
        return EditResult(items=tuple(items))

    cleared = recompute(dataclasses.replace(
        current, order_value=EditableNumber(), commission_rate=EditableNumber()
    ))
    remaining = tuple(item for item in items if item.id != item_id)
    patch = CommissionPatch(
        appointment_id=item_id,
        fields={"order_value": None, "commission_rate": None},
    )
    return EditResult(items=remaining, changed=cleared, patch=patch)


__all__ = [
    "EDITABLE_FIELDS",
    "ValidationError",
    "apply_edit",
    "find_item",
    "recompute",
    "remove_commission",
    "set_commission_paid",
]
