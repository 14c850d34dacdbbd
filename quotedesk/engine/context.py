from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .numbers import HUNDRED, ZERO, to_decimal

D = Decimal


# -----------------------------
# Input models
# -----------------------------


class CalculationMode(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"

    @classmethod
    def parse(cls, raw: Any) -> "CalculationMode":
        # missing/unknown -> fixed (column default of quotation_costs)
        if isinstance(raw, CalculationMode):
            return raw
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.FIXED


@dataclass(frozen=True)
class LineItem:
    product_id: str
    quantity: D = ZERO
    unit_cost: D = ZERO
    unit_sale_price: D = ZERO

    @property
    def line_revenue(self) -> D:
        return self.quantity * self.unit_sale_price

    @property
    def line_cost(self) -> D:
        return self.quantity * self.unit_cost

    def with_changes(self, **fields: Any) -> "LineItem":
        clean = {
            k: (v if k == "product_id" else to_decimal(v)) for k, v in fields.items()
        }
        return replace(self, **clean)

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> "LineItem":
        return cls(
            product_id=str(_pick(row, "product_id", "productId") or ""),
            quantity=to_decimal(_pick(row, "quantity", "qty")),
            unit_cost=to_decimal(_pick(row, "unit_cost", "unitCost")),
            unit_sale_price=to_decimal(
                _pick(row, "unit_sale_price", "unitSalePrice", "unit_price", "unitPrice")
            ),
        )


@dataclass(frozen=True)
class CostEntry:
    """
    One cost attached to a quotation.

    total_value is always derived from the other fields; use with_changes()
    to edit an entry so the total follows.
    """

    name: str
    cost_id: Optional[str] = None
    calculation_mode: CalculationMode = CalculationMode.FIXED
    unit_value: D = ZERO
    quantity: D = D("1")
    percentage_value: D = ZERO
    supplier: Optional[str] = None
    description: Optional[str] = None

    @property
    def total_value(self) -> D:
        if self.calculation_mode == CalculationMode.PERCENTAGE:
            # percentage of the entry's own unit value, not of revenue
            return self.unit_value * (self.percentage_value / HUNDRED)
        return self.unit_value * self.quantity

    def with_changes(self, **fields: Any) -> "CostEntry":
        numeric = {"unit_value", "quantity", "percentage_value"}
        clean: Dict[str, Any] = {}
        for k, v in fields.items():
            if k in numeric:
                clean[k] = to_decimal(v)
            elif k == "calculation_mode":
                clean[k] = CalculationMode.parse(v)
            else:
                clean[k] = v
        return replace(self, **clean)

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> "CostEntry":
        cost_id = _pick(row, "cost_id", "costId")
        if cost_id == "manual":
            cost_id = None
        return cls(
            name=str(row.get("name") or ""),
            cost_id=cost_id,
            calculation_mode=CalculationMode.parse(
                _pick(
                    row,
                    "calculation_mode",
                    "calculationMode",
                    "calculation_type",
                    "calculationType",
                )
            ),
            unit_value=to_decimal(_pick(row, "unit_value", "unitValue")),
            quantity=to_decimal(_pick(row, "quantity")),
            percentage_value=to_decimal(
                _pick(row, "percentage_value", "percentageValue")
            ),
            supplier=row.get("supplier"),
            description=row.get("description"),
        )


@dataclass(frozen=True)
class QuoteInput:
    """
    Immutable snapshot of an editing session: one revision of the quotation.
    The engine derives a full breakdown from this value and nothing else.
    """

    items: Tuple[LineItem, ...] = ()
    costs: Tuple[CostEntry, ...] = ()
    discount_percent: D = ZERO

    @classmethod
    def build(
        cls,
        items: Sequence[LineItem] = (),
        costs: Sequence[CostEntry] = (),
        discount_percent: Any = None,
    ) -> "QuoteInput":
        return cls(
            items=tuple(items),
            costs=tuple(costs),
            discount_percent=to_decimal(discount_percent),
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "QuoteInput":
        """
        Request contract: {items: [...], costs: [...], discountPercent: str|number}.
        camelCase and snake_case keys are both accepted.
        """
        items = [LineItem.from_payload(r) for r in (payload.get("items") or [])]
        costs = [CostEntry.from_payload(r) for r in (payload.get("costs") or [])]
        return cls.build(
            items=items,
            costs=costs,
            discount_percent=_pick(payload, "discount_percent", "discountPercent"),
        )


def _pick(row: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in row and row[k] is not None:
            return row[k]
    return None
