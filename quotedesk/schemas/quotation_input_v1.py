# quotedesk/schemas/quotation_input_v1.py
from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, constr
from pydantic.alias_generators import to_camel

# Numbers stay loose on purpose: text from the form is accepted and the
# engine turns anything unparseable into 0.
Num = Optional[Union[int, float, str]]


class _V1(BaseModel):
    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )


class QuotationItemV1(_V1):
    product_id: constr(strip_whitespace=True, min_length=1)  # type: ignore
    quantity: Num = None
    # optional overrides; default to the product's catalogue prices
    unit_price: Num = None
    unit_cost: Num = None


class QuotationCostV1(_V1):
    cost_id: Optional[str] = None  # None / "manual" => ad-hoc cost
    name: constr(strip_whitespace=True, min_length=1)  # type: ignore
    calculation_type: Optional[str] = "fixed"
    unit_value: Num = None
    quantity: Num = None
    percentage_value: Num = None
    supplier: Optional[str] = None
    description: Optional[str] = None


class QuotationCalculateInputV1(_V1):
    items: List[QuotationItemV1] = Field(default_factory=list)
    costs: List[QuotationCostV1] = Field(default_factory=list)
    discount_percent: Num = None


class QuotationCreateInputV1(QuotationCalculateInputV1):
    customer_id: constr(strip_whitespace=True, min_length=1)  # type: ignore
    valid_until: Optional[date] = None
    notes: Optional[str] = None
    shipping_included: bool = True
    warranty_text: Optional[str] = None
    pdf_title: Optional[str] = None
    responsible_name: Optional[str] = None
    responsible_position: Optional[str] = None


class QuotationStatusInputV1(_V1):
    status: Literal["pending", "approved", "rejected"]


class QuotationCommissionInputV1(_V1):
    commission: float = Field(ge=0, le=100)
