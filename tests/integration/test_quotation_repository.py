from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from quotedesk.models import Cost, QuotationCost, QuotationItem
from quotedesk.repositories import quotations as repo
from quotedesk.repositories.catalog import costs
from quotedesk.repositories.errors import CostInUseError, NotFoundError
from quotedesk.schemas.quotation_input_v1 import QuotationCreateInputV1

D = Decimal


def _create(db, user, payload, now):
    return repo.create_quotation(db, user, QuotationCreateInputV1(**payload), now=now)


def test_create_stores_recomputed_breakdown(db, seller, scenario_payload, as_current, fixed_now):
    q = _create(db, as_current(seller), scenario_payload, fixed_now)

    assert q.quotation_number == "#001"
    assert q.status == "pending"
    assert q.branch == "Matriz"
    assert q.subtotal == D("560.00")
    assert q.product_cost == D("240.00")
    assert q.total_costs == D("340.00")
    assert q.invoice_amount == D("28.00")
    assert q.company_profit == D("192.00")
    assert q.profit_percent == D("34.29")
    assert q.tithe == D("19.20")
    assert q.net_profit == D("172.80")
    assert q.total == D("560.00")

    assert q.valid_until == fixed_now + timedelta(days=30)
    assert q.warranty_text == "1 ano de garantia de fábrica"
    assert q.responsible_name == "Ana Vendas"
    assert [i.position for i in q.items] == [0, 1]
    assert q.costs[0].total_value == D("100.00")


def test_salesperson_cannot_override_unit_cost(db, seller, admin, scenario_payload, as_current, fixed_now):
    scenario_payload["items"][0]["unitCost"] = "1"

    as_seller = _create(db, as_current(seller), scenario_payload, fixed_now)
    assert as_seller.items[0].unit_cost == D("10.00")

    as_admin = _create(db, as_current(admin), scenario_payload, fixed_now)
    assert as_admin.items[0].unit_cost == D("1.00")
    assert as_admin.product_cost == D("60.00")


def test_sale_price_override_and_discount(db, seller, scenario_payload, as_current, fixed_now):
    scenario_payload["items"][0]["unitPrice"] = "30"
    scenario_payload["discountPercent"] = "10"

    q = _create(db, as_current(seller), scenario_payload, fixed_now)
    assert q.subtotal == D("660.00")
    assert q.discount_amount == D("66.00")
    assert q.total == D("594.00")


def test_unknown_product_or_customer(db, seller, scenario_payload, as_current, fixed_now):
    bad = dict(scenario_payload, items=[{"productId": "missing", "quantity": 1}])
    with pytest.raises(NotFoundError):
        _create(db, as_current(seller), bad, fixed_now)

    bad = dict(scenario_payload, customerId="missing")
    with pytest.raises(NotFoundError):
        _create(db, as_current(seller), bad, fixed_now)


def test_numbers_follow_count_and_skip_taken(db, seller, scenario_payload, as_current, fixed_now):
    user = as_current(seller)
    first = _create(db, user, scenario_payload, fixed_now)
    second = _create(db, user, scenario_payload, fixed_now)
    assert (first.quotation_number, second.quotation_number) == ("#001", "#002")

    repo.delete_quotation(db, first.id)
    # count+1 would be #002 again
    third = _create(db, user, scenario_payload, fixed_now)
    assert third.quotation_number == "#003"


def test_update_status(db, seller, scenario_payload, as_current, fixed_now):
    q = _create(db, as_current(seller), scenario_payload, fixed_now)

    with pytest.raises(ValueError):
        repo.update_status(db, q.id, "archived")

    decided = fixed_now + timedelta(days=2)
    q = repo.update_status(db, q.id, "approved", now=decided)
    assert q.status == "approved"
    assert q.updated_at == decided
    assert repo.to_summary(q).decided_at == decided


def test_update_commission_range(db, seller, scenario_payload, as_current, fixed_now):
    q = _create(db, as_current(seller), scenario_payload, fixed_now)

    with pytest.raises(ValueError):
        repo.update_commission(db, q.id, 150)
    with pytest.raises(ValueError):
        repo.update_commission(db, q.id, -1)

    assert repo.update_commission(db, q.id, "7,5").commission == D("7.50")


def test_delete_removes_items_and_costs(db, seller, scenario_payload, as_current, fixed_now):
    q = _create(db, as_current(seller), scenario_payload, fixed_now)
    repo.delete_quotation(db, q.id)

    assert db.query(QuotationItem).count() == 0
    assert db.query(QuotationCost).count() == 0
    with pytest.raises(NotFoundError):
        repo.get_quotation(db, q.id)


def test_duplicate_for_admin(db, seller, scenario_payload, as_current, fixed_now):
    src = _create(db, as_current(seller), scenario_payload, fixed_now)
    dup = repo.duplicate_for_admin(db, src.id, now=fixed_now)

    assert dup.id != src.id
    assert dup.quotation_number == "#002"
    assert dup.admin_calculated is True
    assert dup.original_quotation_id == src.id
    assert dup.total == src.total
    assert dup.net_profit == src.net_profit
    assert len(dup.items) == len(src.items)
    assert len(dup.costs) == len(src.costs)


def test_fractional_area_is_kept(db, seller, scenario_payload, as_current, fixed_now):
    scenario_payload["items"][0]["quantity"] = "12,345"
    src = _create(db, as_current(seller), scenario_payload, fixed_now)

    grass_line = src.items[0]
    assert grass_line.quantity == D("12.345")
    assert grass_line.subtotal == D("308.63")
    assert src.total == D("368.63")

    # the admin copy recomputes from stored lines and must land on the same figures
    dup = repo.duplicate_for_admin(db, src.id, now=fixed_now)
    assert dup.items[0].quantity == D("12.345")
    assert dup.total == src.total


def test_list_in_range(db, seller, other_seller, scenario_payload, as_current, fixed_now):
    march = _create(db, as_current(seller), scenario_payload, fixed_now)
    _create(db, as_current(seller), scenario_payload, datetime(2025, 4, 2, 8, 0))
    _create(db, as_current(other_seller), scenario_payload, fixed_now)

    start, end = datetime(2025, 3, 1), datetime(2025, 3, 31, 23, 59, 59)
    assert len(repo.list_in_range(db, start, end)) == 2
    mine = repo.list_in_range(db, start, end, user_id=seller.id)
    assert [q.id for q in mine] == [march.id]


def test_stored_totals_match_engine_payload_keys(db, seller, scenario_payload, as_current, fixed_now):
    from quotedesk.engine.quote_engine import default_engine

    q = _create(db, as_current(seller), scenario_payload, fixed_now)
    stored = repo.quotation_totals(q)
    fresh = default_engine.calculate(repo.stored_quote_input(q)).as_payload()

    assert stored == fresh


def test_cost_in_use_cannot_be_deleted(db, seller, scenario_payload, as_current, fixed_now):
    freight = costs.create(db, {"name": "Frete", "value": D("50"), "supplier": "Transportes SP"})
    spare = costs.create(db, {"name": "Cola", "value": D("15"), "supplier": "Adesivos BR"})

    scenario_payload["costs"][0]["costId"] = freight.id
    _create(db, as_current(seller), scenario_payload, fixed_now)

    with pytest.raises(CostInUseError):
        costs.delete(db, freight.id)

    costs.delete(db, spare.id)
    assert db.get(Cost, spare.id) is None
