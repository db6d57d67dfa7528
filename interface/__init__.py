"""用户接口模块 - Web 服务

核心组件：
- WebServer: FastAPI 应用 + uvicorn 生命周期（独立线程运行）

架构设计：
    浏览器 ──→ WebServer ──→ business 服务 ──→ database 仓库
              (JSON API)     (认证/预约/提成)    (SQLAlchemy)

使用示例：
    ```python
    from database import DatabaseManager
    from interface import WebServer

    db = DatabaseManager()
    db.create_tables()
    server = WebServer(db_manager=db, port=8080)
    await server.startup()
    ```
"""
from interface.web.server import WebServer

__all__ = [
    "WebServer",
]
