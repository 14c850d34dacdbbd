from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from .context import CostEntry
from .numbers import ZERO

D = Decimal


def cost_entry_total(entry: CostEntry) -> D:
    return entry.total_value


def aggregate_costs(entries: Iterable[CostEntry]) -> D:
    # product cost is added by the pipeline, not here
    total = ZERO
    for entry in entries:
        total += cost_entry_total(entry)
    return total
