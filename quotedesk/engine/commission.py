from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from .numbers import HUNDRED, ZERO, to_decimal

D = Decimal

STATUS_APPROVED = "approved"


def commission_amount(base: Any, commission_percent: Any) -> D:
    """
    base * pct / 100. The base used everywhere is the quotation's stored
    total, i.e. the final total after discount.
    """
    return to_decimal(base) * to_decimal(commission_percent) / HUNDRED


# -----------------------------
# Report inputs (plain values, no ORM)
# -----------------------------


@dataclass(frozen=True)
class Salesperson:
    id: str
    name: str
    branch: str = ""
    commission_percent: D = ZERO


@dataclass(frozen=True)
class QuotationSummary:
    id: str
    quotation_number: str
    user_id: str
    customer_name: str
    status: str
    total: D
    company_profit: D = ZERO
    net_profit: D = ZERO
    admin_calculated: bool = False
    decided_at: Optional[datetime] = None

    @property
    def approved(self) -> bool:
        return self.status == STATUS_APPROVED


# -----------------------------
# Report outputs
# -----------------------------


@dataclass(frozen=True)
class SalespersonCommission:
    employee_id: str
    employee_name: str
    employee_branch: str
    commission_percent: D
    total_sales: D
    total_commission: D
    quotations_count: int
    all_quotations_count: int
    conversion_rate: D


@dataclass(frozen=True)
class CommissionLine:
    quotation_id: str
    quotation_number: str
    customer_name: str
    quotation_total: D
    commission_percent: D
    commission_amount: D
    approved_date: Optional[datetime] = None


@dataclass(frozen=True)
class AdminCommissionReport:
    total_revenue: D
    total_quotations: int
    approved_quotations: int
    conversion_rate: D
    total_company_profit: D
    total_net_profit: D
    total_commissions_paid: D
    net_after_commissions: D
    by_employee: List[SalespersonCommission] = field(default_factory=list)


@dataclass(frozen=True)
class SalespersonCommissionReport:
    employee_id: str
    employee_name: str
    employee_branch: str
    commission_percent: D
    total_revenue: D
    total_quotations: int
    approved_quotations: int
    conversion_rate: D
    total_commission: D
    lines: List[CommissionLine] = field(default_factory=list)


def _rate(part: int, whole: int) -> D:
    if whole <= 0:
        return ZERO
    return D(part) / D(whole) * HUNDRED


def build_admin_report(
    quotations: Sequence[QuotationSummary],
    salespeople: Sequence[Salesperson],
) -> AdminCommissionReport:
    """
    Company-wide commission view for one period. Only approved quotations
    count towards revenue, profit and commission. Admin-calculated copies
    contribute profit only; their originals carry revenue and commission.
    """
    originals = [q for q in quotations if not q.admin_calculated]
    approved = [q for q in originals if q.approved]
    total_revenue = sum((q.total for q in approved), ZERO)

    # profit figures only exist on admin-calculated versions
    costed = [q for q in quotations if q.admin_calculated and q.approved]
    total_company_profit = sum((q.company_profit for q in costed), ZERO)
    total_net_profit = sum((q.net_profit for q in costed), ZERO)

    by_employee: List[SalespersonCommission] = []
    for sp in salespeople:
        mine_all = [q for q in originals if q.user_id == sp.id]
        mine_ok = [q for q in mine_all if q.approved]
        sales = sum((q.total for q in mine_ok), ZERO)
        by_employee.append(
            SalespersonCommission(
                employee_id=sp.id,
                employee_name=sp.name,
                employee_branch=sp.branch,
                commission_percent=sp.commission_percent,
                total_sales=sales,
                total_commission=commission_amount(sales, sp.commission_percent),
                quotations_count=len(mine_ok),
                all_quotations_count=len(mine_all),
                conversion_rate=_rate(len(mine_ok), len(mine_all)),
            )
        )

    paid = sum((e.total_commission for e in by_employee), ZERO)
    if total_net_profit > ZERO:
        net_after = total_net_profit - paid
    else:
        net_after = total_revenue - paid

    return AdminCommissionReport(
        total_revenue=total_revenue,
        total_quotations=len(originals),
        approved_quotations=len(approved),
        conversion_rate=_rate(len(approved), len(originals)),
        total_company_profit=total_company_profit,
        total_net_profit=total_net_profit,
        total_commissions_paid=paid,
        net_after_commissions=net_after,
        by_employee=by_employee,
    )


def build_salesperson_report(
    salesperson: Salesperson,
    quotations: Sequence[QuotationSummary],
) -> SalespersonCommissionReport:
    """Own-commission view: one line per approved quotation of this salesperson."""
    mine_all = [
        q for q in quotations if q.user_id == salesperson.id and not q.admin_calculated
    ]
    mine_ok = [q for q in mine_all if q.approved]
    pct = salesperson.commission_percent

    lines = [
        CommissionLine(
            quotation_id=q.id,
            quotation_number=q.quotation_number,
            customer_name=q.customer_name,
            quotation_total=q.total,
            commission_percent=pct,
            commission_amount=commission_amount(q.total, pct),
            approved_date=q.decided_at,
        )
        for q in mine_ok
    ]

    return SalespersonCommissionReport(
        employee_id=salesperson.id,
        employee_name=salesperson.name,
        employee_branch=salesperson.branch,
        commission_percent=pct,
        total_revenue=sum((q.total for q in mine_ok), ZERO),
        total_quotations=len(mine_all),
        approved_quotations=len(mine_ok),
        conversion_rate=_rate(len(mine_ok), len(mine_all)),
        total_commission=sum((ln.commission_amount for ln in lines), ZERO),
        lines=lines,
    )
