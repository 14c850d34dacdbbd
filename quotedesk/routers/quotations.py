# quotedesk/routers/quotations.py
from __future__ import annotations

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from quotedesk.auth.deps import get_current_user, require_admin
from quotedesk.core.logging_config import logger
from quotedesk.db import get_db
from quotedesk.domain.auth import CurrentUser
from quotedesk.engine.numbers import money_str, qarea, to_decimal
from quotedesk.engine.quote_engine import default_engine
from quotedesk.explain.visibility_policy import default_policy
from quotedesk.models import Quotation
from quotedesk.repositories import quotations as repo
from quotedesk.repositories.errors import NotFoundError
from quotedesk.schemas.quotation_input_v1 import (
    QuotationCalculateInputV1,
    QuotationCommissionInputV1,
    QuotationCreateInputV1,
    QuotationStatusInputV1,
)
from quotedesk.schemas.quotation_output_v1 import BreakdownOutputV1, QuotationOutputV1
from quotedesk.services.quote_renderer import QuoteRenderer

router = APIRouter(prefix="/api/quotations", tags=["quotations"])

renderer = QuoteRenderer()


# ----------------------------
# Helpers
# ----------------------------
def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID", "unknown"
    )


def _load(db: Session, quotation_id: str) -> Quotation:
    try:
        return repo.get_quotation(db, quotation_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Quotation not found.")


def _load_visible(db: Session, quotation_id: str, user: CurrentUser) -> Quotation:
    q = _load(db, quotation_id)
    if not user.is_admin and q.branch != user.branch:
        raise HTTPException(status_code=403, detail="Quotation belongs to another branch.")
    return q


def _commission_for(q: Quotation, user: CurrentUser):
    # commission is shown to the quotation owner only
    if q.user_id != user.id:
        return None
    # an admin-set per-quotation percentage wins over the owner's default
    return q.commission if q.commission is not None else user.commission_percent


def _item_payload(item) -> Dict[str, Any]:
    return {
        "product_id": item.product_id,
        "product_name": item.product.name if item.product else "",
        "quantity": str(qarea(to_decimal(item.quantity))),
        "unit_price": money_str(to_decimal(item.unit_price)),
        "subtotal": money_str(to_decimal(item.subtotal)),
        "unit_cost": money_str(to_decimal(item.unit_cost)),
        "total_cost": money_str(to_decimal(item.total_cost)),
    }


def _cost_payload(cost) -> Dict[str, Any]:
    return {
        "cost_id": cost.cost_id,
        "name": cost.name,
        "calculation_type": cost.calculation_type,
        "unit_value": money_str(to_decimal(cost.unit_value)),
        "quantity": money_str(to_decimal(cost.quantity)),
        "percentage_value": money_str(to_decimal(cost.percentage_value)),
        "total_value": money_str(to_decimal(cost.total_value)),
        "supplier": cost.supplier,
        "description": cost.description,
    }


def to_output(q: Quotation, user: CurrentUser) -> QuotationOutputV1:
    """Role-filtered view of a stored quotation."""
    totals = default_policy.filter_stored(
        repo.quotation_totals(q), user.role, _commission_for(q, user)
    )
    return QuotationOutputV1(
        id=q.id,
        quotation_number=q.quotation_number,
        status=q.status,
        customer_id=q.customer_id,
        customer_name=q.customer.name if q.customer else "",
        user_id=q.user_id,
        branch=q.branch,
        valid_until=q.valid_until.date().isoformat(),
        created_at=q.created_at.isoformat(),
        notes=q.notes,
        shipping_included=q.shipping_included,
        warranty_text=q.warranty_text,
        pdf_title=q.pdf_title,
        responsible_name=q.responsible_name,
        responsible_position=q.responsible_position,
        admin_calculated=q.admin_calculated,
        original_quotation_id=q.original_quotation_id,
        totals=totals,
        items=[default_policy.filter_line_item(_item_payload(i), user.role) for i in q.items],
        costs=[_cost_payload(c) for c in q.costs] if user.is_admin else None,
    )


# ----------------------------
# 1) Calculate (no persistence)
# ----------------------------
@router.post("/calculate", response_model=BreakdownOutputV1)
def calculate_quotation(
    payload: QuotationCalculateInputV1,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> BreakdownOutputV1:
    t0 = time.time()
    try:
        qin = repo.build_quote_input(db, payload, allow_cost_override=user.is_admin)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=f"Not found: {e}")

    breakdown = default_engine.calculate(qin)
    totals = default_policy.filter_breakdown(breakdown, user.role, user.commission_percent)

    logger.bind(
        request_id=_request_id(request),
        role=user.role.value,
        line_count=len(qin.items),
        cost_count=len(qin.costs),
        duration_ms=round((time.time() - t0) * 1000, 2),
    ).info("quotation_calculate")

    return BreakdownOutputV1(role=user.role.value, totals=totals)


# ----------------------------
# 2) Create / read
# ----------------------------
@router.post(
    "", response_model=QuotationOutputV1, response_model_exclude_none=True, status_code=201
)
def create_quotation(
    payload: QuotationCreateInputV1,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> QuotationOutputV1:
    try:
        q = repo.create_quotation(db, user, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=f"Not found: {e}")
    return to_output(q, user)


@router.get("/{quotation_id}", response_model=QuotationOutputV1, response_model_exclude_none=True)
def get_quotation(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> QuotationOutputV1:
    return to_output(_load_visible(db, quotation_id, user), user)


# ----------------------------
# 3) Status / commission / admin version
# ----------------------------
@router.put("/{quotation_id}/status", response_model=QuotationOutputV1, response_model_exclude_none=True)
def update_status(
    quotation_id: str,
    payload: QuotationStatusInputV1,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> QuotationOutputV1:
    q = _load_visible(db, quotation_id, user)
    if not user.is_admin and q.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not allowed to change this quotation.")
    try:
        q = repo.update_status(db, quotation_id, payload.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return to_output(q, user)


@router.patch("/{quotation_id}/commission", response_model=QuotationOutputV1, response_model_exclude_none=True)
def update_commission(
    quotation_id: str,
    payload: QuotationCommissionInputV1,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_admin),
) -> QuotationOutputV1:
    _load(db, quotation_id)
    try:
        q = repo.update_commission(db, quotation_id, payload.commission)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return to_output(q, user)


@router.post(
    "/{quotation_id}/calculate-costs",
    response_model=QuotationOutputV1,
    response_model_exclude_none=True,
    status_code=201,
)
def calculate_costs(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_admin),
) -> QuotationOutputV1:
    _load(db, quotation_id)
    return to_output(repo.duplicate_for_admin(db, quotation_id), user)


@router.delete("/{quotation_id}", status_code=204)
def delete_quotation(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> Response:
    q = _load(db, quotation_id)
    if not user.is_admin and q.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not allowed to delete this quotation.")
    repo.delete_quotation(db, quotation_id)
    return Response(status_code=204)


# ----------------------------
# 4) Customer document
# ----------------------------
@router.get("/{quotation_id}/pdf")
def quotation_pdf(
    quotation_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> Response:
    q = _load_visible(db, quotation_id, user)
    pdf = renderer.render_pdf(q)
    filename = f"orcamento_{q.quotation_number.lstrip('#')}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
