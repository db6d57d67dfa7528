"""提成工作台 - 本地修改 + 发送补丁

每次操作分两步：
1. 在会话的 CommissionBoard 上立即应用修改（乐观更新）
2. 把生成的补丁写入数据库，结果以 PatchOutcome 返回

写库失败时不回滚本地值：PatchOutcome 会带上错误，调用方应提示用户
并重新加载列表，届时以数据库为准。
"""
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from commissions.board import CommissionBoard, CommissionView
from commissions.types import EditResult
from database.appointment_repo import AppointmentRepository
from database.errors import BackendError, ErrorKind


@dataclass(frozen=True)
class PatchOutcome:
    """一次修改的结果

    Attributes:
        result: 本地修改结果（新工作集、修改的行、补丁）
        error: 写库失败时的错误；成功或无需写库时为 None
    """
    result: EditResult
    error: Optional[BackendError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def synced(self) -> bool:
        """本地修改已写入数据库"""
        return self.ok and self.result.patch is not None


class CommissionDesk:
    """连接会话工作集与预约仓库"""

    def __init__(self, appointments: AppointmentRepository,
                 board: Optional[CommissionBoard] = None):
        self.appointments = appointments
        self.board = board or CommissionBoard()

    def reload(self) -> CommissionView:
        """从数据库重建工作集

        读取失败时抛出 BackendError，原工作集保持不变。
        """
        appointments = self.appointments.list_all()
        self.board.load(appointments)
        return self.board.view()

    def ensure_loaded(self) -> None:
        if not self.board.loaded:
            self.reload()

    def _push(self, result: EditResult) -> PatchOutcome:
        patch = result.patch
        if patch is None:
            return PatchOutcome(result)
        try:
            updated = self.appointments.update(patch.appointment_id, patch.fields)
        except BackendError as e:
            logger.warning(f"提成补丁写入失败 {patch.appointment_id}: {e.detail}")
            return PatchOutcome(result, error=e)
        if updated is None:
            return PatchOutcome(result, error=BackendError(
                ErrorKind.UNKNOWN, f"appointment {patch.appointment_id} not found",
                hint="Agendamento não encontrado.",
            ))
        return PatchOutcome(result)

    def edit(self, item_id: str, field: str, raw_value: Optional[str]) -> PatchOutcome:
        return self._push(self.board.edit(item_id, field, raw_value))

    def mark_paid(self, item_id: str, paid: bool) -> PatchOutcome:
        """Raises: ValidationError（无订单金额时标记为已付，不写库）"""
        return self._push(self.board.mark_paid(item_id, paid))

    def remove(self, item_id: str) -> PatchOutcome:
        return self._push(self.board.remove(item_id))
