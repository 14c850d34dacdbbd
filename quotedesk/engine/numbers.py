from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any

D = Decimal

ZERO = D("0")
HUNDRED = D("100")
MONEY = D("0.01")
AREA = D("0.001")

# values of 10^13 or more are typing errors, not quotation figures
MAX_ADJUSTED_EXPONENT = 12


def _bounded(d: D) -> D:
    if not d.is_finite() or d.adjusted() > MAX_ADJUSTED_EXPONENT:
        return ZERO
    return d


def to_decimal(value: Any) -> D:
    """
    Forgiving numeric parse for data-entry values.

    Accepts Decimal/int/float/str/None. Text follows pt-BR entry: a comma is
    the decimal separator and dots group thousands ("12,5" or "1.234,56");
    without a comma a dot is the decimal point ("12.5"). A comma before a dot
    ("1,234.56") is rejected as ambiguous. Anything unparseable, NaN,
    infinite or of absurd magnitude becomes 0. Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, D):
        return _bounded(value)

    if isinstance(value, int):
        return _bounded(D(value))

    if isinstance(value, float):
        # via str() so 0.1 stays 0.1 and not its binary expansion
        value = str(value)

    s = str(value).strip().replace("R$", "").replace(" ", "")
    if not s:
        return ZERO

    if "," in s:
        if "." in s and s.rfind(".") > s.rfind(","):
            return ZERO
        s = s.replace(".", "").replace(",", ".")

    try:
        d = D(s)
    except (InvalidOperation, ValueError):
        return ZERO

    return _bounded(d)


def qmoney(x: D) -> D:
    # wide precision so large (but bounded) totals quantize without InvalidOperation
    with localcontext() as ctx:
        ctx.prec = 60
        return x.quantize(MONEY, rounding=ROUND_HALF_UP)


def qarea(x: D) -> D:
    """Areas keep three decimals, enough for centimetre-level measurements."""
    with localcontext() as ctx:
        ctx.prec = 60
        return x.quantize(AREA, rounding=ROUND_HALF_UP)


def money_str(x: D) -> str:
    """String-decimal serialization used at the persistence boundary: "1234.56"."""
    # + ZERO folds a negative zero ("-0.00") into "0.00"
    with localcontext() as ctx:
        ctx.prec = 60
        return str(qmoney(x) + ZERO)
