"""全局配置管理

所有用户可配置项均通过 .env 文件设置，运行时自动加载到此处。

使用方式：
    1. 运行 python scripts/setup_env.py 生成 .env 文件
    2. 或手动创建 .env 文件
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置 - 所有字段均可通过 .env 或环境变量覆盖"""

    # ========== 数据库 ==========
    # 生产环境指向托管的 PostgreSQL，开发/测试使用 SQLite
    database_url: str = "sqlite:///data/agenda.db"

    # ========== Web 平台配置 ==========
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    # 无操作多少分钟后会话失效
    session_idle_minutes: int = 15

    # 分享链接的前缀地址
    public_base_url: str = "http://localhost:8080/"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def is_database_configured(self, url: Optional[str] = None) -> bool:
        """数据库地址是否可用（非空且不是占位符）

        Args:
            url: 待检查的地址，默认检查 database_url
        """
        url = (self.database_url if url is None else url or "").strip()
        return bool(url) and "placeholder" not in url


# 全局配置实例
settings = Settings()
