"""初始化数据库

使用方式：
    python scripts/init_db.py
    python scripts/init_db.py --name "Ana" --email ana@example.com --password segredo
"""
import argparse
import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from loguru import logger

from agenda.validation import ValidationError
from business.auth import AuthService
from database import BackendError, DatabaseManager


def init_database(database_url=None, name=None, email=None, password=None):
    """创建所有表，并可选地创建第一个用户"""
    logger.info("Initializing database...")

    db = DatabaseManager(database_url)
    try:
        logger.info("Creating tables...")
        db.create_tables()

        if email:
            try:
                session = AuthService(db.users).sign_up(name or email, email, password or "")
                logger.info(f"Created user: {session.user.email}")
            except (ValidationError, BackendError) as e:
                logger.warning(f"User not created: {e.message}")

        logger.info("Database initialization completed!")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="初始化数据库")
    parser.add_argument("--db", default=None, help="数据库连接 URL")
    parser.add_argument("--name", default=None, help="第一个用户的姓名")
    parser.add_argument("--email", default=None, help="第一个用户的邮箱")
    parser.add_argument("--password", default=None, help="第一个用户的密码")
    args = parser.parse_args()
    init_database(args.db, args.name, args.email, args.password)
