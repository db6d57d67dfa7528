"""首页仪表盘统计"""
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List

from agenda.types import Appointment, AppointmentStatus

UPCOMING_LIMIT = 5


@dataclass(frozen=True)
class DashboardStats:
    """仪表盘数据

    Attributes:
        total_pending: 全部待测量预约数
        completed_this_month: 本月已完成数
        total_this_month: 本月未取消的预约数
        completion_rate: 本月完成率（整数百分比）
        upcoming: 今天及以后最近的待测量预约
    """
    total_pending: int = 0
    completed_this_month: int = 0
    total_this_month: int = 0
    completion_rate: int = 0
    upcoming: List[Appointment] = field(default_factory=list)

    @property
    def completion_rate_text(self) -> str:
        return f"{self.completion_rate}%"

    @property
    def completion_detail(self) -> str:
        return f"{self.completed_this_month} de {self.total_this_month} concluído(s)"


def build_dashboard(appointments: Iterable[Appointment], today: date) -> DashboardStats:
    appointments = list(appointments)
    this_month = [
        a for a in appointments
        if a.date.year == today.year and a.date.month == today.month
    ]
    pending = [a for a in appointments if a.status is AppointmentStatus.PENDING]

    completed = sum(1 for a in this_month if a.status is AppointmentStatus.COMPLETED)
    relevant = sum(1 for a in this_month if a.status is not AppointmentStatus.CANCELLED)
    rate = 0
    if relevant:
        # 四舍五入（0.5 进位）
        percent = Decimal(completed) * 100 / relevant
        rate = int(percent.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    upcoming = sorted((a for a in pending if a.date >= today), key=lambda a: a.date)

    return DashboardStats(
        total_pending=len(pending),
        completed_this_month=completed,
        total_this_month=relevant,
        completion_rate=rate,
        upcoming=upcoming[:UPCOMING_LIMIT],
    )
