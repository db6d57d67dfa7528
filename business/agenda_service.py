"""预约业务服务

把 agenda 模块的纯函数与注入的预约仓库连接起来。
后端错误以 BackendError 向上传播，由调用方决定如何提示用户；
唯一的例外是分享链接读取，失败时只记录日志并返回 None。
"""
from datetime import date
from typing import List, Optional

from loguru import logger

from agenda.calendar_grid import CalendarWeek, month_grid
from agenda.dashboard import DashboardStats, build_dashboard
from agenda.search import filter_appointments
from agenda.types import Appointment, User
from agenda.validation import parse_status, validate_appointment_form
from database.appointment_repo import AppointmentRepository
from database.errors import BackendError


class AgendaService:
    """预约的增删改查、仪表盘与日历"""

    def __init__(self, appointments: AppointmentRepository):
        self.appointments = appointments

    def list(self, search: str = "", status: str = "all") -> List[Appointment]:
        """Raises: ValueError（未知状态）、BackendError"""
        return filter_appointments(self.appointments.list_all(), search, status)

    def get(self, appointment_id: str) -> Optional[Appointment]:
        return self.appointments.get(appointment_id)

    def create(self, payload: dict, user: User) -> Appointment:
        """校验表单后插入；校验失败时不会访问数据库"""
        draft = validate_appointment_form(payload)
        return self.appointments.insert(draft.to_fields(), user_id=user.id)

    def update(self, appointment_id: str, payload: dict) -> Optional[Appointment]:
        draft = validate_appointment_form(payload)
        return self.appointments.update(appointment_id, draft.to_fields())

    def update_status(self, appointment_id: str, status) -> Optional[Appointment]:
        """状态可在三者之间任意切换"""
        new_status = parse_status(status)
        return self.appointments.update(appointment_id, {"status": new_status.value})

    def delete(self, appointment_id: str) -> bool:
        return self.appointments.delete(appointment_id)

    def fetch_shared(self, appointment_id: str) -> Optional[Appointment]:
        """分享链接读取（无需登录），失败时仅记录日志"""
        try:
            return self.appointments.get(appointment_id)
        except BackendError as e:
            logger.error(f"读取分享的预约 {appointment_id} 出错: {e.detail}")
            return None

    def dashboard(self, today: date) -> DashboardStats:
        return build_dashboard(self.appointments.list_all(), today)

    def calendar(self, year: int, month: int, today: date) -> List[CalendarWeek]:
        return month_grid(year, month, self.appointments.list_all(), today=today)
