"""预约列表的搜索与状态过滤"""
from typing import Iterable, List, Optional, Union

from agenda.types import Appointment, AppointmentStatus
from commissions.filtering import matches_search

ALL_STATUSES = "all"


def filter_appointments(
    appointments: Iterable[Appointment],
    search: str = "",
    status: Optional[Union[str, AppointmentStatus]] = ALL_STATUSES,
) -> List[Appointment]:
    """按文本（客户/申请人/订单号）与状态过滤

    Args:
        appointments: 预约列表
        search: 搜索词，空串匹配全部
        status: "all"、状态存储值或 AppointmentStatus

    Raises:
        ValueError: 未知状态值
    """
    wanted = None
    if status and status != ALL_STATUSES:
        wanted = AppointmentStatus.parse(status)

    return [
        a for a in appointments
        if matches_search(search, a.client_name, a.requester_name, a.order_number)
        and (wanted is None or a.status is wanted)
    ]
