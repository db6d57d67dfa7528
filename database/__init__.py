"""数据库模块 - 预约与用户的持久化

核心组件：
- DatabaseConnection: 引擎与会话管理（显式创建，注入到仓库）
- AppointmentRepository / UserRepository: 数据访问
- BackendError / ErrorKind: 后端错误分类
- DatabaseManager: 统一门面

使用示例：
    ```python
    from database import DatabaseManager

    db = DatabaseManager("sqlite:///data/agenda.db")
    db.create_tables()
    for appointment in db.appointments.list_all():
        print(appointment.client_name)
    ```
"""
from database.connection import DatabaseConnection
from database.errors import BackendError, ErrorKind, translate_error, user_message
from database.manager import DatabaseManager

__all__ = [
    "BackendError",
    "DatabaseConnection",
    "DatabaseManager",
    "ErrorKind",
    "translate_error",
    "user_message",
]
