from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quotedesk.config import settings
from quotedesk.core.logging_config import logger
from quotedesk.domain.auth import CurrentUser
from quotedesk.engine.breakdown import TITHE_RATE, FinancialBreakdown
from quotedesk.engine.commission import QuotationSummary
from quotedesk.engine.context import CalculationMode, CostEntry, LineItem, QuoteInput
from quotedesk.engine.numbers import HUNDRED, ZERO, money_str, qarea, qmoney, to_decimal
from quotedesk.engine.quote_engine import QuoteEngine, default_engine
from quotedesk.models import Customer, Product, Quotation, QuotationCost, QuotationItem
from quotedesk.schemas.quotation_input_v1 import (
    QuotationCalculateInputV1,
    QuotationCreateInputV1,
)

from .errors import NotFoundError


STATUSES = ("pending", "approved", "rejected")


def _utcnow() -> datetime:
    # stored naive (UTC) so SQLite range filters compare like with like
    return datetime.now(timezone.utc).replace(tzinfo=None)


# -----------------------------
# Input building (server-side recompute)
# -----------------------------


def build_quote_input(
    db: Session,
    data: QuotationCalculateInputV1,
    *,
    allow_cost_override: bool = False,
) -> QuoteInput:
    """
    Resolve line items against the product catalogue. The sale price may be
    overridden per line; the unit cost only by callers allowed to see costs.
    """
    items: List[LineItem] = []
    for row in data.items:
        product = db.get(Product, row.product_id)
        if product is None:
            raise NotFoundError(f"products:{row.product_id}")

        unit_price = (
            to_decimal(row.unit_price) if row.unit_price is not None else product.price_per_m2
        )
        unit_cost = product.cost_per_m2 or ZERO
        if allow_cost_override and row.unit_cost is not None:
            unit_cost = to_decimal(row.unit_cost)

        items.append(
            LineItem(
                product_id=product.id,
                quantity=to_decimal(row.quantity),
                unit_cost=to_decimal(unit_cost),
                unit_sale_price=to_decimal(unit_price),
            )
        )

    costs = [
        CostEntry.from_payload(c.model_dump(by_alias=False)) for c in data.costs
    ]
    return QuoteInput.build(items=items, costs=costs, discount_percent=data.discount_percent)


def stored_quote_input(q: Quotation) -> QuoteInput:
    """Rebuild the engine input from a persisted quotation."""
    return QuoteInput.build(
        items=[
            LineItem(
                product_id=i.product_id,
                quantity=to_decimal(i.quantity),
                unit_cost=to_decimal(i.unit_cost),
                unit_sale_price=to_decimal(i.unit_price),
            )
            for i in q.items
        ],
        costs=[
            CostEntry(
                name=c.name,
                cost_id=c.cost_id,
                calculation_mode=CalculationMode.parse(c.calculation_type),
                unit_value=to_decimal(c.unit_value),
                quantity=to_decimal(c.quantity),
                percentage_value=to_decimal(c.percentage_value),
                supplier=c.supplier,
                description=c.description,
            )
            for c in q.costs
        ],
        discount_percent=q.discount_percent,
    )


# -----------------------------
# Snapshot mapping
# -----------------------------


def _apply_breakdown(q: Quotation, b: FinancialBreakdown) -> None:
    q.subtotal = qmoney(b.gross_revenue)
    q.product_cost = qmoney(b.product_cost)
    q.total_costs = qmoney(b.total_costs)
    q.total_without_invoice = qmoney(b.total_without_invoice)
    q.invoice_percent = qmoney(b.invoice_rate * HUNDRED)
    q.invoice_amount = qmoney(b.invoice_amount)
    q.total_with_invoice = qmoney(b.total_with_invoice)
    q.company_profit = qmoney(b.company_profit)
    q.profit_percent = qmoney(b.profit_percent)
    q.tithe = qmoney(b.tithe)
    q.net_profit = qmoney(b.net_profit)
    q.discount_percent = qmoney(b.discount_percent)
    q.discount_amount = qmoney(b.discount_amount)
    q.total = qmoney(b.final_total)


def quotation_totals(q: Quotation) -> Dict[str, str]:
    """Stored snapshot keyed like FinancialBreakdown.as_payload()."""
    return {
        "gross_revenue": money_str(to_decimal(q.subtotal)),
        "product_cost": money_str(to_decimal(q.product_cost)),
        "total_costs": money_str(to_decimal(q.total_costs)),
        "invoice_percent": money_str(to_decimal(q.invoice_percent)),
        "invoice_amount": money_str(to_decimal(q.invoice_amount)),
        "total_with_invoice": money_str(to_decimal(q.total_with_invoice)),
        "company_profit": money_str(to_decimal(q.company_profit)),
        "profit_percent": money_str(to_decimal(q.profit_percent)),
        "tithe_percent": money_str(TITHE_RATE * HUNDRED),
        "tithe": money_str(to_decimal(q.tithe)),
        "net_profit": money_str(to_decimal(q.net_profit)),
        "discount_percent": money_str(to_decimal(q.discount_percent)),
        "discount_amount": money_str(to_decimal(q.discount_amount)),
        "final_total": money_str(to_decimal(q.total)),
        "total_without_invoice": money_str(to_decimal(q.total_without_invoice)),
    }


def to_summary(q: Quotation) -> QuotationSummary:
    return QuotationSummary(
        id=q.id,
        quotation_number=q.quotation_number,
        user_id=q.user_id,
        customer_name=q.customer.name if q.customer else "",
        status=q.status,
        total=to_decimal(q.total),
        company_profit=to_decimal(q.company_profit),
        net_profit=to_decimal(q.net_profit),
        admin_calculated=bool(q.admin_calculated),
        decided_at=q.updated_at or q.created_at,
    )


# -----------------------------
# Queries
# -----------------------------


def next_quotation_number(db: Session) -> str:
    """#NNN = count(existing) + 1, bumped past any number already taken."""
    n = (db.scalar(select(func.count()).select_from(Quotation)) or 0) + 1
    while db.scalar(
        select(Quotation.id).where(Quotation.quotation_number == f"#{n:03d}")
    ):
        n += 1
    return f"#{n:03d}"


def get_quotation(db: Session, quotation_id: str) -> Quotation:
    q = db.get(Quotation, quotation_id)
    if q is None:
        raise NotFoundError(f"quotations:{quotation_id}")
    return q


def list_in_range(
    db: Session, start: datetime, end: datetime, user_id: Optional[str] = None
) -> List[Quotation]:
    stmt = select(Quotation).where(
        Quotation.created_at >= start, Quotation.created_at <= end
    )
    if user_id is not None:
        stmt = stmt.where(Quotation.user_id == user_id)
    stmt = stmt.order_by(Quotation.created_at.desc())
    return list(db.scalars(stmt).unique())


# -----------------------------
# Commands
# -----------------------------


def create_quotation(
    db: Session,
    user: CurrentUser,
    data: QuotationCreateInputV1,
    *,
    engine: QuoteEngine = default_engine,
    now: Optional[datetime] = None,
) -> Quotation:
    """
    Persist a quotation. Totals are recomputed here from catalogue prices;
    whatever totals a client may have shown are never trusted.
    """
    now = now or _utcnow()
    if db.get(Customer, data.customer_id) is None:
        raise NotFoundError(f"customers:{data.customer_id}")
    qin = build_quote_input(db, data, allow_cost_override=user.is_admin)
    breakdown = engine.calculate(qin)

    valid_until = data.valid_until
    if valid_until is None:
        valid_dt = now + timedelta(days=settings.quotation_validity_days)
    else:
        valid_dt = datetime(valid_until.year, valid_until.month, valid_until.day)

    q = Quotation(
        quotation_number=next_quotation_number(db),
        customer_id=data.customer_id,
        user_id=user.id,
        branch=user.branch,
        status="pending",
        valid_until=valid_dt,
        notes=data.notes or None,
        shipping_included=data.shipping_included,
        warranty_text=data.warranty_text or settings.default_warranty_text,
        pdf_title=data.pdf_title or None,
        responsible_id=user.id,
        responsible_name=data.responsible_name or user.name,
        responsible_position=data.responsible_position
        or ("Administrador" if user.is_admin else "Funcionário"),
        created_at=now,
    )
    _apply_breakdown(q, breakdown)

    for pos, item in enumerate(qin.items):
        q.items.append(
            QuotationItem(
                product_id=item.product_id,
                position=pos,
                quantity=qarea(item.quantity),
                unit_price=qmoney(item.unit_sale_price),
                unit_cost=qmoney(item.unit_cost),
                subtotal=qmoney(item.line_revenue),
                total_cost=qmoney(item.line_cost),
            )
        )
    for pos, cost in enumerate(qin.costs):
        q.costs.append(_cost_row(cost, pos))

    db.add(q)
    db.commit()
    db.refresh(q)

    logger.info(
        "quotation_created",
        quotation_id=q.id,
        quotation_number=q.quotation_number,
        user_id=user.id,
        item_count=len(qin.items),
        cost_count=len(qin.costs),
    )
    return q


def _cost_row(cost: CostEntry, pos: int) -> QuotationCost:
    return QuotationCost(
        cost_id=cost.cost_id,
        position=pos,
        name=cost.name,
        calculation_type=cost.calculation_mode.value,
        unit_value=qmoney(cost.unit_value),
        quantity=qmoney(cost.quantity),
        percentage_value=qmoney(cost.percentage_value),
        total_value=qmoney(cost.total_value),
        supplier=cost.supplier,
        description=cost.description,
    )


def update_status(
    db: Session, quotation_id: str, status: str, *, now: Optional[datetime] = None
) -> Quotation:
    if status not in STATUSES:
        raise ValueError(f"invalid status '{status}', expected one of {STATUSES}")

    q = get_quotation(db, quotation_id)
    old = q.status
    q.status = status
    q.updated_at = now or _utcnow()
    db.commit()
    db.refresh(q)

    logger.info("quotation_status_changed", quotation_id=q.id, old=old, new=status)
    return q


def update_commission(db: Session, quotation_id: str, commission: Any) -> Quotation:
    pct = to_decimal(commission)
    if pct < ZERO or pct > HUNDRED:
        raise ValueError("commission must be a number between 0 and 100")

    q = get_quotation(db, quotation_id)
    q.commission = qmoney(pct)
    db.commit()
    db.refresh(q)
    return q


def delete_quotation(db: Session, quotation_id: str) -> None:
    q = get_quotation(db, quotation_id)
    # items/costs go with it (delete-orphan cascade)
    db.delete(q)
    db.commit()
    logger.info("quotation_deleted", quotation_id=quotation_id)


def duplicate_for_admin(
    db: Session,
    quotation_id: str,
    *,
    engine: QuoteEngine = default_engine,
    now: Optional[datetime] = None,
) -> Quotation:
    """
    Copy a salesperson's proposal into an admin-calculated version that
    references the original. Totals are recomputed from the stored lines.
    """
    src = get_quotation(db, quotation_id)
    now = now or _utcnow()
    qin = stored_quote_input(src)

    dup = Quotation(
        quotation_number=next_quotation_number(db),
        customer_id=src.customer_id,
        user_id=src.user_id,
        branch=src.branch,
        status=src.status,
        valid_until=src.valid_until,
        notes=src.notes,
        shipping_included=src.shipping_included,
        warranty_text=src.warranty_text,
        pdf_title=src.pdf_title,
        responsible_id=src.responsible_id,
        responsible_name=src.responsible_name,
        responsible_position=src.responsible_position,
        admin_calculated=True,
        original_quotation_id=src.id,
        commission=src.commission,
        created_at=now,
    )
    _apply_breakdown(dup, engine.calculate(qin))

    for i in src.items:
        dup.items.append(
            QuotationItem(
                product_id=i.product_id,
                position=i.position,
                quantity=i.quantity,
                unit_price=i.unit_price,
                unit_cost=i.unit_cost,
                subtotal=i.subtotal,
                total_cost=i.total_cost,
            )
        )
    for pos, cost in enumerate(qin.costs):
        dup.costs.append(_cost_row(cost, pos))

    db.add(dup)
    db.commit()
    db.refresh(dup)

    logger.info(
        "quotation_duplicated_for_admin",
        quotation_id=dup.id,
        original_quotation_id=src.id,
    )
    return dup
