"""提成打印报表

报表固定列：日期、订单号、客户、申请人、订单金额、比例、提成金额、状态。
合计与提成页面的 aggregate 完全一致，另加总计。
"""
import html
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from commissions.filtering import aggregate, matches_date
from commissions.locale_number import format_brl, format_rate_number
from commissions.types import CommissionItem, CommissionTotals


def format_date_br(value: Optional[date]) -> str:
    if not value:
        return "N/A"
    return value.strftime("%d/%m/%Y")


def period_text(start: Optional[date], end: Optional[date]) -> str:
    """报表抬头的日期区间文本"""
    if not start and not end:
        return "Todos os períodos"
    if start and not end:
        return f"A partir de {format_date_br(start)}"
    if end and not start:
        return f"Até {format_date_br(end)}"
    if start == end:
        return format_date_br(start)
    return f"{format_date_br(start)} a {format_date_br(end)}"


@dataclass(frozen=True)
class ReportRow:
    date: date
    order_number: str
    client_name: str
    requester_name: str
    order_value: Decimal
    commission_rate: Decimal
    commission_value: Decimal
    paid: bool

    @property
    def status_text(self) -> str:
        return "Pago" if self.paid else "A Pagar"


@dataclass(frozen=True)
class CommissionReport:
    rows: List[ReportRow]
    start: Optional[date]
    end: Optional[date]
    totals: CommissionTotals

    @property
    def period_text(self) -> str:
        return period_text(self.start, self.end)


def build_report(items: Sequence[CommissionItem], start: Optional[date] = None,
                 end: Optional[date] = None) -> CommissionReport:
    """由（已过滤的）提成行生成报表

    未指定区间时取行日期的最小值和最大值作为区间。
    """
    if start is None and end is None and items:
        dates = [item.date for item in items]
        start, end = min(dates), max(dates)

    selected = [item for item in items if matches_date(item, start, end)]
    rows = [
        ReportRow(
            date=item.date,
            order_number=item.order_number or "",
            client_name=item.client_name,
            requester_name=item.requester_name,
            order_value=item.order_value.amount,
            commission_rate=item.commission_rate.amount,
            commission_value=item.commission_value,
            paid=item.commission_paid,
        )
        for item in selected
    ]
    return CommissionReport(rows=rows, start=start, end=end, totals=aggregate(selected))


_REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="pt-BR">
<head>
<meta charset="UTF-8">
<title>Relatório de Comissões</title>
<style>
    body {{ font-family: Arial, sans-serif; color: #1e293b; margin: 24px; }}
    h1 {{ font-size: 20px; margin-bottom: 4px; }}
    .period {{ color: #64748b; margin-bottom: 16px; }}
    table {{ width: 100%; border-collapse: collapse; font-size: 12px; }}
    th, td {{ border: 1px solid #e2e8f0; padding: 6px 8px; text-align: left; }}
    th {{ background: #f8fafc; }}
    td.num {{ text-align: right; }}
    .totals {{ margin-top: 16px; display: flex; gap: 24px; }}
    .totals div {{ border: 1px solid #e2e8f0; padding: 8px 12px; }}
    @media print {{ body {{ margin: 0; }} }}
</style>
</head>
<body>
<h1>Relatório de Comissões</h1>
<div class="period">Período: {period}</div>
<table>
<thead>
<tr><th>Data</th><th>Pedido</th><th>Cliente</th><th>Solicitante</th><th>Valor Pedido</th><th>%</th><th>Comissão</th><th>Status</th></tr>
</thead>
<tbody>
{rows}
</tbody>
</table>
<div class="totals">
<div>Total Pedidos: <strong>{orders}</strong></div>
<div>Comissões a Pagar: <strong>{to_pay}</strong></div>
<div>Comissões Pagas: <strong>{paid}</strong></div>
<div>Total Geral de Comissões: <strong>{grand_total}</strong></div>
</div>
</body>
</html>
"""


def render_report_html(report: CommissionReport) -> str:
    """渲染可打印的 HTML 报表"""
    rows = "\n".join(
        "<tr>"
        f"<td>{format_date_br(row.date)}</td>"
        f"<td>{html.escape(row.order_number)}</td>"
        f"<td>{html.escape(row.client_name)}</td>"
        f"<td>{html.escape(row.requester_name)}</td>"
        f"<td class=\"num\">{format_brl(row.order_value)}</td>"
        f"<td class=\"num\">{format_rate_number(row.commission_rate)}%</td>"
        f"<td class=\"num\">{format_brl(row.commission_value)}</td>"
        f"<td>{row.status_text}</td>"
        "</tr>"
        for row in report.rows
    )
    if not rows:
        rows = '<tr><td colspan="8">Nenhum item para comissão</td></tr>'

    totals = report.totals
    return _REPORT_TEMPLATE.format(
        period=html.escape(report.period_text),
        rows=rows,
        orders=format_brl(totals.orders),
        to_pay=format_brl(totals.commissions_to_pay),
        paid=format_brl(totals.commissions_paid),
        grand_total=format_brl(totals.grand_total),
    )
