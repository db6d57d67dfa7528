"""agenda 模块 - 上门测量预约的领域逻辑

包含预约数据类型、表单校验、搜索过滤、仪表盘统计、日历网格与分享链接。
所有函数均为纯函数，不依赖数据库。
"""
from agenda.types import Address, Appointment, AppointmentStatus, User
from agenda.validation import ValidationError

__all__ = [
    "Address",
    "Appointment",
    "AppointmentStatus",
    "User",
    "ValidationError",
]
