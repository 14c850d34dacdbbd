from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .context import LineItem
from .numbers import ZERO

D = Decimal


@dataclass(frozen=True)
class LineTotals:
    gross_revenue: D = ZERO
    product_cost: D = ZERO


def aggregate_line_items(items: Iterable[LineItem]) -> LineTotals:
    """Reduce the line items to (gross revenue, product cost). Empty -> zeros."""
    revenue = ZERO
    cost = ZERO
    for item in items:
        revenue += item.line_revenue
        cost += item.line_cost
    return LineTotals(gross_revenue=revenue, product_cost=cost)
