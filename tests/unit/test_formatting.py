from datetime import date, datetime
from decimal import Decimal

from quotedesk.web.jinja_filters import (
    format_area_m2,
    format_brl,
    format_date_br,
    format_percent,
)


def test_format_brl():
    assert format_brl(Decimal("1234.56")) == "R$ 1.234,56"
    assert format_brl(Decimal("560")) == "R$ 560,00"
    assert format_brl(Decimal("1234567.891")) == "R$ 1.234.567,89"
    assert format_brl(Decimal("-20")) == "R$ -20,00"
    assert format_brl(None) == "R$ 0,00"


def test_format_area_and_percent():
    assert format_area_m2(Decimal("20")) == "20,00 m²"
    assert format_percent(Decimal("34.2857")) == "34,29%"


def test_format_date_br():
    assert format_date_br(date(2025, 3, 10)) == "10/03/2025"
    assert format_date_br(datetime(2025, 4, 9, 12, 0)) == "09/04/2025"
    assert format_date_br("2025-04-09") == "09/04/2025"
    assert format_date_br(None) == ""
