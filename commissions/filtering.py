"""提成列表的过滤与汇总

三个谓词（文本、日期、支付状态）相互独立，filter_items 对其取交集；
汇总只针对过滤后的结果，过滤条件变化时合计随之变化。
"""
import calendar
import unicodedata
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from commissions.types import (
    CommissionItem,
    CommissionTotals,
    FilterCriteria,
    PaymentFilter,
)


def remove_accents(text: Optional[str]) -> str:
    """去掉变音符号（"João" -> "Joao"）"""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def matches_search(term: str, client_name: str, requester_name: str,
                   order_number: Optional[str]) -> bool:
    """客户名、申请人忽略大小写与重音；订单号只忽略大小写"""
    lowered = (term or "").lower()
    normalized = remove_accents(lowered)
    return (
        normalized in remove_accents((client_name or "").lower())
        or normalized in remove_accents((requester_name or "").lower())
        or bool(order_number and lowered in order_number.lower())
    )


def matches_text(item: CommissionItem, term: str) -> bool:
    return matches_search(term, item.client_name, item.requester_name, item.order_number)


def matches_date(item: CommissionItem, start: Optional[date], end: Optional[date]) -> bool:
    if start and item.date < start:
        return False
    if end and item.date > end:
        return False
    return True


def matches_payment(item: CommissionItem, payment: PaymentFilter) -> bool:
    """待付（unpaid）额外要求订单金额 > 0，尚未成交的行只出现在 all 中"""
    if payment is PaymentFilter.PAID:
        return item.commission_paid
    if payment is PaymentFilter.UNPAID:
        return not item.commission_paid and item.has_order_value
    return True


def filter_items(items: Iterable[CommissionItem],
                 criteria: FilterCriteria) -> List[CommissionItem]:
    return [
        item for item in items
        if matches_text(item, criteria.search)
        and matches_date(item, criteria.start, criteria.end)
        and matches_payment(item, criteria.payment)
    ]


def aggregate(items: Iterable[CommissionItem]) -> CommissionTotals:
    """合计订单金额，以及已付/待付提成"""
    orders = Decimal(0)
    to_pay = Decimal(0)
    paid = Decimal(0)
    for item in items:
        orders += item.order_value.amount
        if item.commission_paid:
            paid += item.commission_value
        else:
            to_pay += item.commission_value
    return CommissionTotals(orders=orders, commissions_to_pay=to_pay, commissions_paid=paid)


def current_month_criteria(today: date) -> FilterCriteria:
    """默认过滤条件：当月第一天到最后一天"""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return FilterCriteria(
        start=today.replace(day=1),
        end=today.replace(day=last_day),
    )
