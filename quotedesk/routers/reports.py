# quotedesk/routers/reports.py
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from quotedesk.auth.deps import get_current_user
from quotedesk.core.logging_config import logger
from quotedesk.db import get_db
from quotedesk.domain.auth import CurrentUser, Role
from quotedesk.engine.commission import (
    Salesperson,
    build_admin_report,
    build_salesperson_report,
)
from quotedesk.engine.numbers import money_str, to_decimal
from quotedesk.export.excel_export import export_commission_report
from quotedesk.repositories import quotations as repo
from quotedesk.repositories.catalog import users

router = APIRouter(prefix="/api/reports", tags=["reports"])


def month_range(month: Optional[str], today: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """'YYYY-MM' -> [first day 00:00, last day 23:59:59.999999]. None = current month."""
    if month:
        try:
            start = datetime.strptime(month, "%Y-%m")
        except ValueError:
            raise HTTPException(status_code=400, detail="month must be YYYY-MM")
    else:
        today = today or datetime.now()
        start = datetime(today.year, today.month, 1)

    if start.month == 12:
        nxt = datetime(start.year + 1, 1, 1)
    else:
        nxt = datetime(start.year, start.month + 1, 1)
    return start, nxt - timedelta(microseconds=1)


def _to_salesperson(u) -> Salesperson:
    return Salesperson(
        id=u.id,
        name=u.name,
        branch=u.branch or "",
        commission_percent=to_decimal(u.commission_percent),
    )


def _build_report(db: Session, user: CurrentUser, month: Optional[str]):
    start, end = month_range(month)
    if user.is_admin:
        rows = repo.list_in_range(db, start, end)
        salespeople = [
            _to_salesperson(u) for u in users.list(db) if Role.parse(u.role) != Role.ADMIN
        ]
        return build_admin_report([repo.to_summary(q) for q in rows], salespeople)

    rows = repo.list_in_range(db, start, end, user_id=user.id)
    me = Salesperson(
        id=user.id,
        name=user.name,
        branch=user.branch,
        commission_percent=user.commission_percent,
    )
    return build_salesperson_report(me, [repo.to_summary(q) for q in rows])


@router.get("/commissions")
def commissions(
    month: Optional[str] = Query(None, description="YYYY-MM; defaults to the current month"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    report = _build_report(db, user, month)
    logger.info("commission_report", role=user.role.value, month=month)
    return {
        "role": user.role.value,
        "report": jsonable_encoder(report, custom_encoder={Decimal: money_str}),
    }


@router.get("/commissions.xlsx")
def commissions_xlsx(
    month: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> StreamingResponse:
    report = _build_report(db, user, month)
    buf = export_commission_report(report)
    filename = f"comissoes_{month or 'mes_atual'}.xlsx"
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
