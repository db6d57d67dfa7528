"""Web 服务 - 测量预约与提成管理 API

基于 FastAPI 提供 JSON 接口：
1. 登录认证（注册 / 登录 / 登出，无操作超时自动失效）
2. 预约的增删改查、仪表盘、日历、公开分享
3. 提成列表：过滤、合计、行内编辑、支付状态、打印报表

使用方式：
    ```python
    server = WebServer(db_manager=db, port=8080)
    await server.startup()
    # 访问 http://localhost:8080/health 检查服务状态
    ```
"""
import asyncio
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, Iterator, Optional

from loguru import logger

from agenda.validation import ValidationError, parse_date
from business.agenda_service import AgendaService
from business.auth import AuthService, AuthSession
from business.commission_desk import CommissionDesk, PatchOutcome
from commissions.board import CommissionBoard
from commissions.filtering import current_month_criteria
from commissions.report import build_report, render_report_html
from commissions.types import FilterCriteria, PaymentFilter
from database.errors import BackendError, ErrorKind, user_message
from database.field_map import to_db_name
from interface.web.serializers import (
    appointment_to_dict,
    calendar_to_list,
    commission_item_to_dict,
    commission_view_to_dict,
    dashboard_to_dict,
    totals_to_dict,
    user_to_dict,
)

# 错误类别 -> HTTP 状态码
HTTP_STATUS = {
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.FOREIGN_KEY: 409,
    ErrorKind.UNIQUE: 409,
    ErrorKind.CHECK: 400,
    ErrorKind.CONNECTIVITY: 503,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.SESSION_EXPIRED: 401,
    ErrorKind.SCHEMA_MISSING: 500,
    ErrorKind.UNKNOWN: 500,
}

NOT_FOUND_MESSAGE = "Agendamento não encontrado."


class RequestFailed(Exception):
    """带有操作描述的后端错误，用于生成 ``Erro ao ...`` 提示"""

    def __init__(self, error: BackendError, context: str):
        super().__init__(error.detail)
        self.error = error
        self.context = context


@contextmanager
def failing_as(context: str) -> Iterator[None]:
    """把 BackendError 包装为 RequestFailed

    Args:
        context: 葡语操作描述，例如 "carregar os agendamentos"
    """
    try:
        yield
    except BackendError as e:
        raise RequestFailed(e, context) from e


def _payment_filter(value: str) -> PaymentFilter:
    try:
        return PaymentFilter(value or PaymentFilter.ALL.value)
    except ValueError:
        raise ValidationError("Filtro de pagamento inválido.", field="payment")


class WebServer:
    """测量预约 Web 服务

    路由：
    - POST   /api/auth/sign-up              → 注册并登录
    - POST   /api/auth/sign-in              → 登录
    - POST   /api/auth/sign-out             → 登出
    - GET    /api/auth/session              → 当前用户
    - GET    /api/appointments              → 预约列表（search, status）
    - POST   /api/appointments              → 新建预约
    - GET    /api/appointments/{id}         → 单个预约
    - PUT    /api/appointments/{id}         → 修改预约
    - PATCH  /api/appointments/{id}/status  → 修改状态
    - DELETE /api/appointments/{id}         → 删除预约
    - GET    /api/dashboard                 → 仪表盘
    - GET    /api/calendar                  → 月历（year, month）
    - GET    /api/shared/{id}               → 公开分享（无需登录）
    - GET    /api/commissions               → 重新加载提成列表（search, start, end, payment, clear）
    - PATCH  /api/commissions/{id}          → 编辑提成字段
    - PATCH  /api/commissions/{id}/payment  → 标记已付/未付
    - DELETE /api/commissions/{id}          → 清除提成数据
    - GET    /api/commissions/report        → 可打印的 HTML 报表
    - GET    /health                        → 健康检查
    """

    def __init__(
        self,
        db_manager,
        host: str = "0.0.0.0",
        port: int = 8080,
        idle_minutes: int = 15,
        public_base_url: str = "http://localhost:8080/",
    ):
        self.db_manager = db_manager
        self.host = host
        self.port = port
        self.public_base_url = public_base_url
        self.auth = AuthService(db_manager.users, idle_timeout=timedelta(minutes=idle_minutes))
        self.agenda = AgendaService(db_manager.appointments)
        self.app = None
        self.running = False
        self._today = date.today
        self._server_thread: Optional[threading.Thread] = None
        self._server = None  # uvicorn.Server 实例
        self._server_loop = None  # 服务器事件循环
        # 每个登录会话一个提成工作集
        self._desks: Dict[str, CommissionDesk] = {}

    def _desk_for(self, session: AuthSession) -> CommissionDesk:
        # 顺带释放已超时会话的工作集
        for token in self.auth.prune_expired():
            self._desks.pop(token, None)
        desk = self._desks.get(session.token)
        if desk is None:
            board = CommissionBoard(current_month_criteria(self._today()))
            desk = CommissionDesk(self.db_manager.appointments, board)
            self._desks[session.token] = desk
        return desk

    def _criteria_from_query(self, current: FilterCriteria, search: Optional[str],
                             start: Optional[str], end: Optional[str],
                             payment: Optional[str], clear: bool) -> FilterCriteria:
        """未传入的参数保持不变，传入空字符串表示清除该条件"""
        if clear:
            return FilterCriteria()
        changes = {}
        if search is not None:
            changes["search"] = search.strip()
        if start is not None:
            changes["start"] = parse_date(start, "start") if start else None
        if end is not None:
            changes["end"] = parse_date(end, "end") if end else None
        if payment is not None:
            changes["payment"] = _payment_filter(payment)
        return replace(current, **changes) if changes else current

    def _outcome_response(self, desk: CommissionDesk, outcome: PatchOutcome, context: str):
        from fastapi.responses import JSONResponse

        changed = outcome.result.changed
        body = {
            "item": commission_item_to_dict(changed) if changed else None,
            "totals": totals_to_dict(desk.board.view().totals),
            "synced": outcome.synced,
        }
        if outcome.ok:
            return body
        # 本地值不回滚，提示前端重新加载
        body["error"] = user_message(outcome.error, context)
        body["reloadRequired"] = True
        return JSONResponse(status_code=HTTP_STATUS[outcome.error.kind], content=body)

    def create_app(self):
        """创建 FastAPI 应用"""
        from fastapi import Depends, FastAPI, Request
        from fastapi.responses import HTMLResponse, JSONResponse

        app = FastAPI(
            title="Agenda do Medidor",
            description="测量预约与提成管理 API",
            version="1.0.0",
        )

        def not_found():
            return JSONResponse(status_code=404, content={"error": NOT_FOUND_MESSAGE})

        # ==================== 错误处理 ====================

        @app.exception_handler(ValidationError)
        async def validation_failed(request: Request, exc: ValidationError):
            return JSONResponse(
                status_code=400,
                content={"error": exc.message, "field": exc.field},
            )

        @app.exception_handler(RequestFailed)
        async def request_failed(request: Request, exc: RequestFailed):
            return JSONResponse(
                status_code=HTTP_STATUS[exc.error.kind],
                content={"error": user_message(exc.error, exc.context), "kind": exc.error.kind.value},
            )

        @app.exception_handler(BackendError)
        async def backend_failed(request: Request, exc: BackendError):
            return JSONResponse(
                status_code=HTTP_STATUS[exc.kind],
                content={"error": exc.message, "kind": exc.kind.value},
            )

        def current_session(request: Request) -> AuthSession:
            """从请求头中验证 token"""
            auth = request.headers.get("Authorization", "")
            token = auth[7:] if auth.startswith("Bearer ") else None
            try:
                return self.auth.get_session(token)
            except BackendError:
                if token:
                    self._desks.pop(token, None)
                raise

        # ==================== 认证 API ====================

        @app.post("/api/auth/sign-up")
        async def sign_up(data: dict):
            """注册并直接登录"""
            with failing_as("criar a conta"):
                session = self.auth.sign_up(
                    data.get("name", ""),
                    data.get("email", ""),
                    data.get("password", ""),
                    data.get("confirmPassword"),
                )
            return {"success": True, "token": session.token, "user": user_to_dict(session.user)}

        @app.post("/api/auth/sign-in")
        async def sign_in(data: dict):
            """登录认证"""
            with failing_as("entrar"):
                session = self.auth.sign_in(data.get("email", ""), data.get("password", ""))
            return {"success": True, "token": session.token, "user": user_to_dict(session.user)}

        @app.post("/api/auth/sign-out")
        async def sign_out(session: AuthSession = Depends(current_session)):
            self.auth.sign_out(session.token)
            self._desks.pop(session.token, None)
            return {"success": True}

        @app.get("/api/auth/session")
        async def current_user(session: AuthSession = Depends(current_session)):
            return {"user": user_to_dict(session.user)}

        # ==================== 预约 API ====================

        @app.get("/api/appointments")
        async def appointments_list(
            search: str = "",
            status: str = "all",
            _=Depends(current_session),
        ):
            """预约列表"""
            try:
                with failing_as("carregar os agendamentos"):
                    items = self.agenda.list(search, status)
            except ValidationError:
                raise
            except ValueError:
                raise ValidationError("Status inválido.", field="status")
            return {"data": [appointment_to_dict(a, self.public_base_url) for a in items]}

        @app.post("/api/appointments")
        async def appointment_create(data: dict, session: AuthSession = Depends(current_session)):
            with failing_as("criar o agendamento"):
                created = self.agenda.create(data, session.user)
            logger.info(f"新建预约 {created.id} ({created.client_name})")
            return {"data": appointment_to_dict(created, self.public_base_url)}

        @app.get("/api/appointments/{appointment_id}")
        async def appointment_detail(appointment_id: str, _=Depends(current_session)):
            with failing_as("carregar o agendamento"):
                found = self.agenda.get(appointment_id)
            if found is None:
                return not_found()
            return {"data": appointment_to_dict(found, self.public_base_url)}

        @app.put("/api/appointments/{appointment_id}")
        async def appointment_update(appointment_id: str, data: dict, _=Depends(current_session)):
            with failing_as("atualizar o agendamento"):
                updated = self.agenda.update(appointment_id, data)
            if updated is None:
                return not_found()
            return {"data": appointment_to_dict(updated, self.public_base_url)}

        @app.patch("/api/appointments/{appointment_id}/status")
        async def appointment_status(appointment_id: str, data: dict, _=Depends(current_session)):
            with failing_as("atualizar o status"):
                updated = self.agenda.update_status(appointment_id, data.get("status"))
            if updated is None:
                return not_found()
            return {"data": appointment_to_dict(updated, self.public_base_url)}

        @app.delete("/api/appointments/{appointment_id}")
        async def appointment_delete(appointment_id: str, _=Depends(current_session)):
            with failing_as("excluir o agendamento"):
                deleted = self.agenda.delete(appointment_id)
            if not deleted:
                return not_found()
            return {"success": True}

        @app.get("/api/dashboard")
        async def dashboard_data(_=Depends(current_session)):
            """仪表盘概览数据"""
            with failing_as("carregar o painel"):
                stats = self.agenda.dashboard(self._today())
            return dashboard_to_dict(stats)

        @app.get("/api/calendar")
        async def calendar_data(
            year: Optional[int] = None,
            month: Optional[int] = None,
            _=Depends(current_session),
        ):
            today = self._today()
            year = year or today.year
            month = month or today.month
            if not 1 <= month <= 12:
                raise ValidationError("Mês inválido.", field="month")
            with failing_as("carregar o calendário"):
                weeks = self.agenda.calendar(year, month, today)
            return {"year": year, "month": month, "weeks": calendar_to_list(weeks)}

        @app.get("/api/shared/{appointment_id}")
        async def shared_appointment(appointment_id: str):
            """公开分享的预约（只读），读取失败时返回空结果"""
            found = self.agenda.fetch_shared(appointment_id)
            return {"data": appointment_to_dict(found) if found else None}

        # ==================== 提成 API ====================

        @app.get("/api/commissions")
        async def commissions_list(
            search: Optional[str] = None,
            start: Optional[str] = None,
            end: Optional[str] = None,
            payment: Optional[str] = None,
            clear: bool = False,
            session: AuthSession = Depends(current_session),
        ):
            """重新加载提成列表并按条件过滤"""
            desk = self._desk_for(session)
            criteria = self._criteria_from_query(
                desk.board.criteria, search, start, end, payment, clear
            )
            with failing_as("carregar as comissões"):
                desk.reload()
            desk.board.set_criteria(criteria)
            return commission_view_to_dict(desk.board.view())

        @app.get("/api/commissions/report", response_class=HTMLResponse)
        async def commissions_report(session: AuthSession = Depends(current_session)):
            """当前过滤结果的打印报表"""
            desk = self._desk_for(session)
            with failing_as("gerar o relatório"):
                desk.ensure_loaded()
            view = desk.board.view()
            report = build_report(view.items, view.criteria.start, view.criteria.end)
            return render_report_html(report)

        @app.patch("/api/commissions/{item_id}")
        async def commission_edit(item_id: str, data: dict,
                                  session: AuthSession = Depends(current_session)):
            """编辑订单金额、提成比例、订单号或客户名"""
            desk = self._desk_for(session)
            with failing_as("carregar as comissões"):
                desk.ensure_loaded()
            if desk.board.get(item_id) is None:
                return not_found()
            field, value = data.get("field"), data.get("value")
            if not isinstance(field, str):
                raise ValidationError("Campo não editável.", field="field")
            if value is not None and not isinstance(value, str):
                raise ValidationError("Valor inválido.", field="value")
            try:
                outcome = desk.edit(item_id, to_db_name(field), value)
            except ValueError:
                raise ValidationError(f"Campo não editável: {data.get('field')}", field="field")
            return self._outcome_response(desk, outcome, "atualizar a comissão")

        @app.patch("/api/commissions/{item_id}/payment")
        async def commission_payment(item_id: str, data: dict,
                                     session: AuthSession = Depends(current_session)):
            desk = self._desk_for(session)
            with failing_as("carregar as comissões"):
                desk.ensure_loaded()
            if desk.board.get(item_id) is None:
                return not_found()
            outcome = desk.mark_paid(item_id, bool(data.get("paid")))
            return self._outcome_response(desk, outcome, "atualizar o status de pagamento")

        @app.delete("/api/commissions/{item_id}")
        async def commission_remove(item_id: str, session: AuthSession = Depends(current_session)):
            """清除订单金额与提成比例，预约本身保留"""
            desk = self._desk_for(session)
            with failing_as("carregar as comissões"):
                desk.ensure_loaded()
            if desk.board.get(item_id) is None:
                return not_found()
            outcome = desk.remove(item_id)
            return self._outcome_response(desk, outcome, "excluir a comissão")

        # ==================== 健康检查 ====================

        @app.get("/health")
        async def health_check():
            """健康检查"""
            return {
                "status": "ok",
                "running": self.running,
                "db_connected": self.db_manager is not None,
            }

        return app

    async def startup(self):
        """启动 Web 服务器"""
        import uvicorn

        self.app = self.create_app()
        self.running = True

        def run_server():
            """在独立线程中运行 uvicorn 服务器"""
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._server_loop = loop

            config = uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                log_level="warning",
                loop="asyncio",
            )
            self._server = uvicorn.Server(config)
            # 禁用 uvicorn 内置的信号处理器（由 app.py 统一管理）
            self._server.install_signal_handlers = lambda: None

            try:
                loop.run_until_complete(self._server.serve())
            except Exception as e:
                logger.error(f"服务器运行出错: {e}")
            finally:
                pending = asyncio.all_tasks(loop)
                for task in pending:
                    task.cancel()
                if pending:
                    loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
                loop.run_until_complete(loop.shutdown_asyncgens())
                loop.close()

        self._server_thread = threading.Thread(target=run_server, daemon=True)
        self._server_thread.start()

        # 等待服务器启动
        max_wait = 5
        waited = 0
        while self._server is None and waited < max_wait:
            await asyncio.sleep(0.1)
            waited += 0.1

        logger.info(f"Web 服务已启动: http://{self.host}:{self.port}")

    async def shutdown(self):
        """停止 Web 服务器"""
        self.running = False

        if self._server is not None:
            try:
                logger.info("正在停止 Web 服务器...")
                self._server.should_exit = True

                if self._server_thread and self._server_thread.is_alive():
                    self._server_thread.join(timeout=3.0)

                if self._server_thread and self._server_thread.is_alive():
                    logger.warning("服务器未在 3 秒内优雅停止，强制退出...")
                    self._server.force_exit = True
                    if self._server_loop and self._server_loop.is_running():
                        self._server_loop.call_soon_threadsafe(self._server_loop.stop)
                    self._server_thread.join(timeout=2.0)
                    if self._server_thread.is_alive():
                        logger.warning("服务器线程未能停止，将随主进程退出")
            finally:
                self._server = None
                self._server_loop = None
                self._server_thread = None

        self._desks.clear()
        logger.info("Web 服务已停止")
