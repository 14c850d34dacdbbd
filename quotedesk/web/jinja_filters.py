from datetime import date, datetime

from quotedesk.engine.numbers import qmoney, to_decimal


def format_number_br(value, decimal_sep=",", thousand_sep=".") -> str:
    # 12345.67 -> 12.345,67
    d = qmoney(to_decimal(value))
    sign = "-" if d < 0 else ""
    whole, frac = f"{abs(d):.2f}".split(".")
    parts = []
    while whole:
        parts.append(whole[-3:])
        whole = whole[:-3]
    whole = thousand_sep.join(reversed(parts))
    return f"{sign}{whole}{decimal_sep}{frac}"


def format_brl(value) -> str:
    return f"R$ {format_number_br(value)}"


def format_area_m2(value) -> str:
    d = to_decimal(value)
    return f"{format_number_br(d)} m²"


def format_percent(value) -> str:
    return f"{format_number_br(value)}%"


def format_date_br(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    return str(value)


FILTERS = {
    "brl": format_brl,
    "m2": format_area_m2,
    "percent": format_percent,
    "date_br": format_date_br,
}

__all__ = ["FILTERS", "format_brl", "format_area_m2", "format_percent", "format_date_br"]
