# quotedesk/explain/visibility_policy.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, FrozenSet, Mapping, Optional

from quotedesk.domain.auth import Role
from quotedesk.engine.breakdown import FinancialBreakdown
from quotedesk.engine.commission import commission_amount
from quotedesk.engine.numbers import ZERO, money_str, to_decimal


class VisibilityPolicy:
    """
    Decides which breakdown fields a viewer may receive.

    Applied server-side before a payload leaves the API: a salesperson never
    gets cost, invoice, profit or tithe figures over the wire.
    """

    SALESPERSON_FIELDS: FrozenSet[str] = frozenset(
        {"gross_revenue", "discount_percent", "discount_amount", "final_total"}
    )
    RESTRICTED_LINE_FIELDS: FrozenSet[str] = frozenset({"unit_cost", "total_cost"})

    def filter_breakdown(
        self,
        breakdown: FinancialBreakdown,
        role: Role,
        commission_percent: Optional[Any] = None,
    ) -> Dict[str, Any]:
        return self.filter_stored(breakdown.as_payload(), role, commission_percent)

    def filter_stored(
        self,
        totals: Mapping[str, Any],
        role: Role,
        commission_percent: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """
        Works on string-decimal snapshots (as_payload() or a stored record).
        Commission is taken from the stored final total, as the detail view does.
        """
        if Role.parse(role) == Role.ADMIN:
            return dict(totals)

        out = {k: v for k, v in totals.items() if k in self.SALESPERSON_FIELDS}
        pct = to_decimal(commission_percent)
        if pct > ZERO:
            out["commission_percent"] = money_str(pct)
            out["commission_amount"] = money_str(
                commission_amount(totals.get("final_total"), pct)
            )
        return out

    def filter_line_item(self, item: Mapping[str, Any], role: Role) -> Dict[str, Any]:
        if Role.parse(role) == Role.ADMIN:
            return dict(item)
        return {k: v for k, v in item.items() if k not in self.RESTRICTED_LINE_FIELDS}


default_policy = VisibilityPolicy()


def filter_breakdown(
    breakdown: FinancialBreakdown, role: Role, commission_percent: Optional[Decimal] = None
) -> Dict[str, Any]:
    return default_policy.filter_breakdown(breakdown, role, commission_percent)
