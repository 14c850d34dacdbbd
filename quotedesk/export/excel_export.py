# quotedesk/export/excel_export.py
from __future__ import annotations

from io import BytesIO
from typing import IO, Union

from openpyxl import Workbook
from openpyxl.styles import Font

from quotedesk.engine.commission import AdminCommissionReport, SalespersonCommissionReport
from quotedesk.engine.numbers import qmoney

Report = Union[AdminCommissionReport, SalespersonCommissionReport]

BOLD = Font(bold=True)


def _money(v) -> float:
    # openpyxl writes floats; rounding happens before the cast
    return float(qmoney(v))


def _header(ws, row) -> None:
    ws.append(row)
    for cell in ws[ws.max_row]:
        cell.font = BOLD


def _write_admin(wb: Workbook, report: AdminCommissionReport) -> None:
    ws = wb.active
    ws.title = "Resumo"
    ws.append(["Faturamento total", _money(report.total_revenue)])
    ws.append(["Orçamentos", report.total_quotations])
    ws.append(["Aprovados", report.approved_quotations])
    ws.append(["Conversão (%)", _money(report.conversion_rate)])
    ws.append(["Lucro da empresa", _money(report.total_company_profit)])
    ws.append(["Lucro líquido", _money(report.total_net_profit)])
    ws.append(["Comissões pagas", _money(report.total_commissions_paid)])
    ws.append(["Líquido após comissões", _money(report.net_after_commissions)])

    ws = wb.create_sheet("Comissões")
    _header(
        ws,
        ["Funcionário", "Filial", "Comissão (%)", "Vendas", "Comissão",
         "Aprovados", "Total", "Conversão (%)"],
    )
    for e in report.by_employee:
        ws.append(
            [
                e.employee_name,
                e.employee_branch,
                _money(e.commission_percent),
                _money(e.total_sales),
                _money(e.total_commission),
                e.quotations_count,
                e.all_quotations_count,
                _money(e.conversion_rate),
            ]
        )


def _write_salesperson(wb: Workbook, report: SalespersonCommissionReport) -> None:
    ws = wb.active
    ws.title = "Minhas comissões"
    ws.append(["Funcionário", report.employee_name])
    ws.append(["Filial", report.employee_branch])
    ws.append(["Comissão (%)", _money(report.commission_percent)])
    ws.append(["Total vendido", _money(report.total_revenue)])
    ws.append(["Total de comissão", _money(report.total_commission)])
    ws.append([])

    _header(ws, ["Número", "Cliente", "Valor", "Comissão (%)", "Comissão", "Aprovado em"])
    for ln in report.lines:
        ws.append(
            [
                ln.quotation_number,
                ln.customer_name,
                _money(ln.quotation_total),
                _money(ln.commission_percent),
                _money(ln.commission_amount),
                ln.approved_date.strftime("%d/%m/%Y") if ln.approved_date else "",
            ]
        )


def export_commission_report(
    report: Report, target: Union[str, IO[bytes], None] = None
) -> Union[str, IO[bytes]]:
    """
    Write a commission report to an .xlsx file path or binary buffer.
    Without a target a fresh BytesIO is returned, rewound to the start.
    """
    wb = Workbook()
    if isinstance(report, AdminCommissionReport):
        _write_admin(wb, report)
    else:
        _write_salesperson(wb, report)

    out = target if target is not None else BytesIO()
    wb.save(out)
    if hasattr(out, "seek"):
        out.seek(0)
    return out
