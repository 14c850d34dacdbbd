from decimal import Decimal

import pytest

from quotedesk.domain.auth import CurrentUser, Role
from quotedesk.engine.breakdown import derive_breakdown
from quotedesk.explain.visibility_policy import VisibilityPolicy, filter_breakdown

D = Decimal

RESTRICTED = {"total_costs", "company_profit", "tithe", "net_profit", "invoice_amount"}


@pytest.fixture
def breakdown():
    return derive_breakdown(D("1000"), D("150"), D("50"), D("10"))


def test_salesperson_view_withholds_cost_and_profit(breakdown):
    view = filter_breakdown(breakdown, Role.SALESPERSON)

    assert not RESTRICTED & set(view)
    assert set(view) == {"gross_revenue", "discount_percent", "discount_amount", "final_total"}
    assert view["final_total"] == "900.00"


def test_admin_view_has_everything(breakdown):
    view = filter_breakdown(breakdown, Role.ADMIN)
    assert RESTRICTED <= set(view)
    assert view == breakdown.as_payload()


def test_salesperson_commission_from_final_total(breakdown):
    view = filter_breakdown(breakdown, Role.SALESPERSON, D("5"))
    assert view["commission_percent"] == "5.00"
    assert view["commission_amount"] == "45.00"


def test_zero_commission_is_not_reported(breakdown):
    view = filter_breakdown(breakdown, Role.SALESPERSON, D("0"))
    assert "commission_amount" not in view


def test_unknown_role_gets_least_privilege(breakdown):
    view = filter_breakdown(breakdown, "gerente")
    assert not RESTRICTED & set(view)


def test_legacy_role_names_are_salespeople():
    assert Role.parse("vendedor") == Role.SALESPERSON
    assert Role.parse("funcionario") == Role.SALESPERSON
    assert Role.parse("ADMIN") == Role.ADMIN
    user = CurrentUser(id="u", name="x", role=Role.parse("vendedor"))
    assert not user.is_admin


def test_line_item_costs_are_stripped_for_salesperson():
    item = {"product_name": "Grama", "unit_price": "25.00", "unit_cost": "10.00", "total_cost": "200.00"}
    policy = VisibilityPolicy()

    assert "unit_cost" not in policy.filter_line_item(item, Role.SALESPERSON)
    assert "total_cost" not in policy.filter_line_item(item, Role.SALESPERSON)
    assert policy.filter_line_item(item, Role.ADMIN) == item
