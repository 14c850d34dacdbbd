# quotedesk/schemas/quotation_output_v1.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class BreakdownOutputV1(BaseModel):
    """
    Calculation result as seen by the caller. totals is already filtered
    for the caller's role; values are string decimals ("1234.56").
    """

    model_config = ConfigDict(extra="forbid")

    version: Literal["v1"] = "v1"
    role: Literal["admin", "salesperson"]
    totals: Dict[str, str]


class QuotationOutputV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: Literal["v1"] = "v1"
    id: str
    quotation_number: str
    status: Literal["pending", "approved", "rejected"]
    customer_id: str
    customer_name: str
    user_id: str
    branch: str
    valid_until: str
    created_at: str
    notes: Optional[str] = None
    shipping_included: bool = True
    warranty_text: Optional[str] = None
    pdf_title: Optional[str] = None
    responsible_name: Optional[str] = None
    responsible_position: Optional[str] = None
    admin_calculated: bool = False
    original_quotation_id: Optional[str] = None

    totals: Dict[str, str]
    items: List[Dict[str, Any]]
    # cost entries are internal; only admins receive them
    costs: Optional[List[Dict[str, Any]]] = None
