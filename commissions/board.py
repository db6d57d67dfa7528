"""单个会话的提成工作集

CommissionBoard 持有某个登录会话当前看到的提成行和过滤条件。
工作集只会被整体替换（load）或通过 reconciler 生成的新元组替换，
从不原地修改。重新加载会覆盖尚未同步的本地修改。
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from agenda.types import Appointment
from commissions import reconciler
from commissions.filtering import aggregate, filter_items
from commissions.projection import project_commissions
from commissions.types import (
    CommissionItem,
    CommissionTotals,
    EditResult,
    FilterCriteria,
)


@dataclass(frozen=True)
class CommissionView:
    """过滤后的提成行及其合计"""
    items: List[CommissionItem]
    totals: CommissionTotals
    criteria: FilterCriteria


class CommissionBoard:
    """会话级提成工作集

    Attributes:
        items: 当前工作集（已完成预约的投影）
        criteria: 当前过滤条件
        loaded: 是否已从数据库加载过
    """

    def __init__(self, criteria: Optional[FilterCriteria] = None):
        self.items: Tuple[CommissionItem, ...] = ()
        self.criteria = criteria or FilterCriteria()
        self.loaded = False

    def load(self, appointments: Iterable[Appointment]) -> None:
        """用最新的预约列表重建工作集"""
        self.items = project_commissions(appointments)
        self.loaded = True

    def set_criteria(self, criteria: FilterCriteria) -> None:
        self.criteria = criteria

    def get(self, item_id: str) -> Optional[CommissionItem]:
        return reconciler.find_item(self.items, item_id)

    def _commit(self, result: EditResult) -> EditResult:
        self.items = result.items
        return result

    def edit(self, item_id: str, field: str, raw_value: Optional[str]) -> EditResult:
        return self._commit(reconciler.apply_edit(self.items, item_id, field, raw_value))

    def mark_paid(self, item_id: str, paid: bool) -> EditResult:
        return self._commit(reconciler.set_commission_paid(self.items, item_id, paid))

    def remove(self, item_id: str) -> EditResult:
        return self._commit(reconciler.remove_commission(self.items, item_id))

    def view(self) -> CommissionView:
        visible = filter_items(self.items, self.criteria)
        return CommissionView(items=visible, totals=aggregate(visible), criteria=self.criteria)
