from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Dict

from .numbers import HUNDRED, ZERO, money_str

D = Decimal

INVOICE_RATE = D("0.05")
TITHE_RATE = D("0.10")


@dataclass(frozen=True)
class FinancialBreakdown:
    """
    Derived quotation figures. Always recomputed in full from the inputs;
    never mutated. Values carry full Decimal precision; rounding to cents
    happens only in as_payload().
    """

    gross_revenue: D = ZERO
    product_cost: D = ZERO
    total_costs: D = ZERO
    invoice_rate: D = INVOICE_RATE
    invoice_amount: D = ZERO
    total_with_invoice: D = ZERO
    company_profit: D = ZERO
    profit_percent: D = ZERO
    tithe_rate: D = TITHE_RATE
    tithe: D = ZERO
    net_profit: D = ZERO
    discount_percent: D = ZERO
    discount_amount: D = ZERO
    final_total: D = ZERO

    @property
    def total_without_invoice(self) -> D:
        return self.total_costs

    def as_payload(self) -> Dict[str, str]:
        """
        String-decimal serialization ("1234.56") for persistence, PDF and API.
        Rates are reported as percentages (invoice_percent=5.00).
        """
        out: Dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "invoice_rate":
                out["invoice_percent"] = money_str(value * HUNDRED)
            elif f.name == "tithe_rate":
                out["tithe_percent"] = money_str(value * HUNDRED)
            else:
                out[f.name] = money_str(value)
        out["total_without_invoice"] = money_str(self.total_without_invoice)
        return out


def derive_breakdown(
    gross_revenue: D,
    product_cost: D,
    extra_costs: D,
    discount_percent: D,
) -> FinancialBreakdown:
    # Order is fixed: each step reads only values computed above it.
    total_costs = product_cost + extra_costs
    invoice_amount = gross_revenue * INVOICE_RATE
    total_with_invoice = total_costs + invoice_amount
    company_profit = gross_revenue - total_with_invoice

    if gross_revenue == ZERO:
        profit_percent = ZERO
    else:
        profit_percent = company_profit / gross_revenue * HUNDRED

    tithe = company_profit * TITHE_RATE
    net_profit = company_profit - tithe

    # Discount stays out of the profit chain; it only changes what the customer pays.
    discount_amount = gross_revenue * (discount_percent / HUNDRED)
    final_total = gross_revenue - discount_amount

    return FinancialBreakdown(
        gross_revenue=gross_revenue,
        product_cost=product_cost,
        total_costs=total_costs,
        invoice_rate=INVOICE_RATE,
        invoice_amount=invoice_amount,
        total_with_invoice=total_with_invoice,
        company_profit=company_profit,
        profit_percent=profit_percent,
        tithe_rate=TITHE_RATE,
        tithe=tithe,
        net_profit=net_profit,
        discount_percent=discount_percent,
        discount_amount=discount_amount,
        final_total=final_total,
    )
