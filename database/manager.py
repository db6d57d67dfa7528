"""数据库管理器 —— 统一门面（Facade）。

DatabaseManager 是 database 模块的统一入口，持有一个显式创建的
DatabaseConnection，并组合所有子仓库：

- ``db.appointments``: 预约仓库
- ``db.users``: 用户仓库

上层业务服务接收 DatabaseManager（或单个仓库）作为构造参数，
不通过全局对象访问数据库，因此可以在测试中注入临时数据库。
"""
from typing import Optional

from sqlalchemy.orm import Session

from .appointment_repo import AppointmentRepository
from .connection import DatabaseConnection
from .user_repo import UserRepository


class DatabaseManager:
    """数据库管理器 —— 统一门面。

    Attributes:
        conn: 数据库连接管理器。
        appointments: 预约仓库。
        users: 用户仓库。

    Example::

        db = DatabaseManager("sqlite:///data/agenda.db")
        db.create_tables()

        appointments = db.appointments.list_all()
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库管理器。

        Args:
            database_url: 数据库连接URL。如果为None则使用settings配置。
                        支持 ``sqlite:///`` 和 ``postgresql://`` 格式。
        """
        # 基础设施层
        self.conn = DatabaseConnection(database_url)

        # 仓库
        self.appointments = AppointmentRepository(self.conn)
        self.users = UserRepository(self.conn)

    # ================================================================
    # 基础设施方法
    # ================================================================

    def create_tables(self) -> None:
        """创建所有数据库表（幂等操作）。"""
        self.conn.create_tables()

    def get_session(self) -> Session:
        """获取数据库会话。"""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """数据库连接URL。"""
        return self.conn.database_url

    @property
    def engine(self):
        """SQLAlchemy 引擎对象。"""
        return self.conn.engine

    def close(self) -> None:
        """关闭数据库连接，释放资源。"""
        self.conn.close()
