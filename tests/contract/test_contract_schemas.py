import json
from decimal import Decimal
from pathlib import Path

import jsonschema
import pytest

from quotedesk.domain.auth import Role
from quotedesk.engine.context import CostEntry, LineItem, QuoteInput
from quotedesk.engine.quote_engine import QuoteEngine
from quotedesk.explain.visibility_policy import filter_breakdown
from quotedesk.schemas.quotation_input_v1 import QuotationCalculateInputV1
from quotedesk.schemas.quotation_output_v1 import BreakdownOutputV1

ROOT = Path(__file__).resolve().parents[2]
SCHEMAS = ROOT / "quotedesk" / "schemas"

D = Decimal


def _load(p: Path):
    return json.loads(p.read_text(encoding="utf-8"))


@pytest.fixture
def breakdown():
    qin = QuoteInput.build(
        items=[LineItem("A", D("20"), D("10"), D("25")), LineItem("B", D("5"), D("8"), D("12"))],
        costs=[CostEntry(name="Frete", unit_value=D("50"), quantity=D("2"))],
        discount_percent="5",
    )
    return QuoteEngine().calculate(qin)


def test_breakdown_schema_is_valid_jsonschema():
    jsonschema.Draft202012Validator.check_schema(_load(SCHEMAS / "breakdown.v1.schema.json"))


def test_input_schema_is_valid_jsonschema():
    jsonschema.Draft202012Validator.check_schema(_load(SCHEMAS / "quotation_input.v1.schema.json"))


@pytest.mark.parametrize("role", [Role.ADMIN, Role.SALESPERSON])
def test_breakdown_output_matches_schema(breakdown, role):
    schema = _load(SCHEMAS / "breakdown.v1.schema.json")
    out = BreakdownOutputV1(
        role=role.value, totals=filter_breakdown(breakdown, role, D("5"))
    ).model_dump(mode="json")

    jsonschema.validate(out, schema)


def test_leaked_profit_field_breaks_salesperson_contract(breakdown):
    schema = _load(SCHEMAS / "breakdown.v1.schema.json")
    totals = filter_breakdown(breakdown, Role.SALESPERSON)
    totals["net_profit"] = breakdown.as_payload()["net_profit"]

    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate({"version": "v1", "role": "salesperson", "totals": totals}, schema)


def test_input_schema_agrees_with_pydantic_model():
    schema = _load(SCHEMAS / "quotation_input.v1.schema.json")
    payload = {
        "items": [{"productId": "p1", "quantity": "20", "unitPrice": 25}],
        "costs": [{"costId": None, "name": "Frete", "calculationType": "fixed", "unitValue": "50", "quantity": 2}],
        "discountPercent": "10",
    }

    jsonschema.validate(payload, schema)
    model = QuotationCalculateInputV1.model_validate(payload)
    assert model.items[0].product_id == "p1"
    assert model.costs[0].calculation_type == "fixed"
