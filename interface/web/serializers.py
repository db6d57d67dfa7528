"""领域对象 -> JSON（camelCase）

Decimal 统一转为 float，日期转为 ISO 字符串，与前端约定一致。
数据库列名到 API 字段名的转换统一走 database.field_map。
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from agenda.calendar_grid import CalendarWeek
from agenda.dashboard import DashboardStats
from agenda.sharing import build_share_url
from agenda.types import Appointment, User
from commissions.board import CommissionView
from commissions.report import period_text
from commissions.types import CommissionItem, CommissionTotals, EditableNumber, FilterCriteria
from database.field_map import to_api_fields


def _json_value(obj):
    """JSON 序列化辅助函数，处理特殊类型"""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    return obj


def appointment_to_dict(appointment: Appointment, base_url: Optional[str] = None) -> Dict[str, Any]:
    row = {
        "id": appointment.id,
        "date": _json_value(appointment.date),
        "order_number": appointment.order_number,
        "requester_name": appointment.requester_name,
        "status": appointment.status.value,
        "client_name": appointment.client_name,
        "client_phone": appointment.client_phone,
        "address": appointment.address.to_dict(),
        "observations": appointment.observations,
        "order_value": _json_value(appointment.order_value),
        "commission_rate": _json_value(appointment.commission_rate),
        "commission_paid": appointment.commission_paid,
    }
    data = to_api_fields(row)
    if base_url:
        data["shareUrl"] = build_share_url(base_url, appointment.id)
    return data


def _editable_to_dict(number: EditableNumber) -> Dict[str, Any]:
    return {"text": number.text, "value": _json_value(number.value)}


def commission_item_to_dict(item: CommissionItem) -> Dict[str, Any]:
    row = {
        "id": item.id,
        "date": _json_value(item.date),
        "order_number": item.order_number,
        "requester_name": item.requester_name,
        "status": item.status.value,
        "client_name": item.client_name,
        "client_phone": item.client_phone,
        "address": item.address.to_dict(),
        "observations": item.observations,
        "order_value": _editable_to_dict(item.order_value),
        "commission_rate": _editable_to_dict(item.commission_rate),
        "commission_paid": item.commission_paid,
    }
    data = to_api_fields(row)
    data["commissionValue"] = _json_value(item.commission_value)
    return data


def totals_to_dict(totals: CommissionTotals) -> Dict[str, Any]:
    return {
        "orders": _json_value(totals.orders),
        "commissionsToPay": _json_value(totals.commissions_to_pay),
        "commissionsPaid": _json_value(totals.commissions_paid),
        "grandTotal": _json_value(totals.grand_total),
    }


def criteria_to_dict(criteria: FilterCriteria) -> Dict[str, Any]:
    return {
        "search": criteria.search,
        "start": _json_value(criteria.start),
        "end": _json_value(criteria.end),
        "payment": criteria.payment.value,
        "period": period_text(criteria.start, criteria.end),
        "active": criteria.is_active,
    }


def commission_view_to_dict(view: CommissionView) -> Dict[str, Any]:
    return {
        "data": [commission_item_to_dict(item) for item in view.items],
        "totals": totals_to_dict(view.totals),
        "filters": criteria_to_dict(view.criteria),
    }


def dashboard_to_dict(stats: DashboardStats) -> Dict[str, Any]:
    return {
        "totalPending": stats.total_pending,
        "completedThisMonth": stats.completed_this_month,
        "totalThisMonth": stats.total_this_month,
        "completionRate": stats.completion_rate,
        "completionRateText": stats.completion_rate_text,
        "completionDetail": stats.completion_detail,
        "upcoming": [appointment_to_dict(a) for a in stats.upcoming],
    }


def calendar_to_list(weeks: List[CalendarWeek]) -> List[List[Optional[Dict[str, Any]]]]:
    return [
        [
            None if day is None else {
                "date": _json_value(day.date),
                "isToday": day.is_today,
                "appointments": [appointment_to_dict(a) for a in day.appointments],
            }
            for day in week
        ]
        for week in weeks
    ]


def user_to_dict(user: User) -> Dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email}
