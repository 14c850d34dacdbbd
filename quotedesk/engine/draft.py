from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

from .breakdown import FinancialBreakdown
from .context import CostEntry, LineItem, QuoteInput
from .numbers import to_decimal
from .quote_engine import QuoteEngine, default_engine


class QuoteDraft:
    """
    Editing session for one quotation.

    Holds a single current QuoteInput slot. Every edit builds a new
    QuoteInput, swaps it in and recomputes the whole breakdown; nothing
    is patched in place.
    """

    def __init__(
        self, qin: Optional[QuoteInput] = None, engine: Optional[QuoteEngine] = None
    ):
        self._engine = engine or default_engine
        self._input = qin or QuoteInput()
        self._breakdown = self._engine.calculate(self._input)

    @property
    def input(self) -> QuoteInput:
        return self._input

    @property
    def breakdown(self) -> FinancialBreakdown:
        return self._breakdown

    def _swap(self, qin: QuoteInput) -> FinancialBreakdown:
        self._input = qin
        self._breakdown = self._engine.calculate(qin)
        return self._breakdown

    # --- items ---

    def add_item(self, item: LineItem) -> FinancialBreakdown:
        return self._swap(replace(self._input, items=self._input.items + (item,)))

    def update_item(self, index: int, **fields: Any) -> FinancialBreakdown:
        items = list(self._input.items)
        items[index] = items[index].with_changes(**fields)
        return self._swap(replace(self._input, items=tuple(items)))

    def remove_item(self, index: int) -> FinancialBreakdown:
        items = list(self._input.items)
        del items[index]
        return self._swap(replace(self._input, items=tuple(items)))

    # --- costs ---

    def add_cost(self, entry: CostEntry) -> FinancialBreakdown:
        return self._swap(replace(self._input, costs=self._input.costs + (entry,)))

    def update_cost(self, index: int, **fields: Any) -> FinancialBreakdown:
        costs = list(self._input.costs)
        costs[index] = costs[index].with_changes(**fields)
        return self._swap(replace(self._input, costs=tuple(costs)))

    def remove_cost(self, index: int) -> FinancialBreakdown:
        costs = list(self._input.costs)
        del costs[index]
        return self._swap(replace(self._input, costs=tuple(costs)))

    # --- discount ---

    def set_discount(self, discount_percent: Any) -> FinancialBreakdown:
        return self._swap(
            replace(self._input, discount_percent=to_decimal(discount_percent))
        )
