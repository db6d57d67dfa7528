"""月历网格

周日为每周第一天，月初之前和月末之后的空位为 None。
"""
import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from agenda.types import Appointment


@dataclass(frozen=True)
class CalendarDay:
    date: date
    appointments: List[Appointment] = field(default_factory=list)
    is_today: bool = False


CalendarWeek = List[Optional[CalendarDay]]


def month_grid(year: int, month: int, appointments: Iterable[Appointment],
               today: Optional[date] = None) -> List[CalendarWeek]:
    """生成某月的日历网格

    Raises:
        ValueError: 月份不在 1-12 之间
    """
    if not 1 <= month <= 12:
        raise ValueError(f"月份无效: {month}")

    by_day: Dict[date, List[Appointment]] = {}
    for a in appointments:
        if a.date.year == year and a.date.month == month:
            by_day.setdefault(a.date, []).append(a)

    weeks: List[CalendarWeek] = []
    for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month):
        weeks.append([
            CalendarDay(date=d, appointments=by_day.get(d, []), is_today=(d == today))
            if d.month == month else None
            for d in week
        ])
    return weeks
