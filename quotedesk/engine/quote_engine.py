from __future__ import annotations

from typing import Any, Mapping

from quotedesk.core.logging_config import logger

from .breakdown import FinancialBreakdown, derive_breakdown
from .context import QuoteInput
from .costs import aggregate_costs
from .line_items import aggregate_line_items


class QuoteEngine:
    """
    Stateless calculation facade. One instance can serve any number of
    quotations concurrently: calculate() reads only its argument.
    """

    def calculate(self, qin: QuoteInput) -> FinancialBreakdown:
        lines = aggregate_line_items(qin.items)
        extra = aggregate_costs(qin.costs)

        out = derive_breakdown(
            gross_revenue=lines.gross_revenue,
            product_cost=lines.product_cost,
            extra_costs=extra,
            discount_percent=qin.discount_percent,
        )

        logger.debug(
            "quote_calculated",
            item_count=len(qin.items),
            cost_count=len(qin.costs),
        )
        return out

    def calculate_payload(self, payload: Mapping[str, Any]) -> FinancialBreakdown:
        return self.calculate(QuoteInput.from_payload(payload))


default_engine = QuoteEngine()
