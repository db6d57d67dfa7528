#!/usr/bin/env python3
"""Agenda do Medidor - Web 服务入口

启动测量预约与提成管理 API：
1. 预约登记、仪表盘、日历、分享链接
2. 提成列表、行内编辑与打印报表

使用方式：
    python app.py

    # 指定端口
    python app.py --port 8080

    # 指定数据库
    python app.py --db sqlite:///data/agenda.db

环境变量（在 .env 文件中配置，运行 python scripts/setup_env.py 生成）：
    DATABASE_URL          数据库连接地址（必填，PostgreSQL 或 SQLite）
    WEB_HOST              监听地址（默认 0.0.0.0）
    WEB_PORT              Web 端口（默认 8080）
    SESSION_IDLE_MINUTES  无操作自动登出时间（默认 15 分钟）
    PUBLIC_BASE_URL       分享链接使用的公开地址
"""
import argparse
import asyncio
import signal
import sys

from loguru import logger

from config.settings import settings


async def _cleanup(web, db):
    """统一资源清理函数。

    确保 Web 服务器和数据库连接被正确关闭，释放端口和文件句柄。
    """
    logger.info("正在清理资源...")

    # 1. 停止 Web 服务器（释放端口）
    if web is not None:
        try:
            await web.shutdown()
        except Exception as e:
            logger.warning(f"停止 Web 服务器时出错: {e}")

    # 2. 关闭数据库连接（释放连接池）
    if db is not None:
        try:
            db.close()
        except Exception as e:
            logger.warning(f"关闭数据库连接时出错: {e}")

    logger.info("服务已停止")


async def main():
    parser = argparse.ArgumentParser(description="Agenda do Medidor Web 服务")
    parser.add_argument("--host", default=settings.web_host,
                        help="监听地址 (默认: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=settings.web_port,
                        help="监听端口 (默认: 8080)")
    parser.add_argument("--db", default=settings.database_url,
                        help="数据库连接 URL")
    args = parser.parse_args()

    if not settings.is_database_configured(args.db):
        logger.error("未配置数据库连接 (DATABASE_URL)，请运行 python scripts/setup_env.py")
        sys.exit(1)

    # 用于 finally 清理的引用
    web = None
    db = None

    try:
        # 初始化数据库
        from database import DatabaseManager
        db = DatabaseManager(args.db)
        db.create_tables()
        logger.info(f"数据库已连接: {db.database_url}")

        from interface import WebServer

        web = WebServer(
            db_manager=db,
            host=args.host,
            port=args.port,
            idle_minutes=settings.session_idle_minutes,
            public_base_url=settings.public_base_url,
        )

        await web.startup()

        print()
        print("=" * 60)
        print("  Agenda do Medidor 已启动!")
        print(f"  访问地址: http://localhost:{args.port}")
        print(f"  分享链接: {settings.public_base_url}")
        print(f"  数据库: {db.database_url}")
        print(f"  自动登出: {settings.session_idle_minutes} 分钟无操作")
        print("=" * 60)
        print("  按 Ctrl+C 停止服务")
        print()

        # 设置信号处理 —— 使用 asyncio 的信号处理确保事件循环能正确响应
        loop = asyncio.get_running_loop()
        shutdown_event = asyncio.Event()
        _shutdown_requested = False

        def signal_handler(signum):
            """处理退出信号"""
            nonlocal _shutdown_requested
            if _shutdown_requested:
                logger.warning("再次收到退出信号，强制退出...")
                for task in asyncio.all_tasks(loop):
                    task.cancel()
                return
            _shutdown_requested = True
            logger.info(f"收到信号 {signum}，正在关闭服务...")
            shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler, sig)

        # 保持运行，直到收到退出信号
        await shutdown_event.wait()

    except asyncio.CancelledError:
        logger.info("任务被取消，正在清理...")
    except KeyboardInterrupt:
        logger.info("收到键盘中断信号")
    finally:
        await _cleanup(web, db)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        print("\n已停止。")
