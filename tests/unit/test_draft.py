from decimal import Decimal

from quotedesk.engine.context import CalculationMode, CostEntry, LineItem, QuoteInput
from quotedesk.engine.draft import QuoteDraft

D = Decimal


def test_each_edit_replaces_the_input_and_recomputes():
    draft = QuoteDraft()
    first = draft.input

    draft.add_item(LineItem("A", quantity=D("20"), unit_cost=D("10"), unit_sale_price=D("25")))
    assert draft.input is not first
    assert first.items == ()
    assert draft.breakdown.gross_revenue == D("500")

    draft.add_item(LineItem("B", quantity=D("5"), unit_cost=D("8"), unit_sale_price=D("12")))
    draft.add_cost(CostEntry(name="Frete", unit_value=D("50"), quantity=D("2")))
    assert draft.breakdown.total_costs == D("340")
    assert draft.breakdown.net_profit == D("172.8")


def test_update_item_coerces_text_and_recomputes():
    draft = QuoteDraft(QuoteInput.build(items=[LineItem("A", D("1"), D("1"), D("10"))]))

    b = draft.update_item(0, quantity="3,5")
    assert draft.input.items[0].quantity == D("3.5")
    assert b.gross_revenue == D("35")

    b = draft.update_item(0, unit_sale_price="garbage")
    assert b.gross_revenue == D("0")


def test_cost_total_follows_mode_changes():
    draft = QuoteDraft()
    draft.add_cost(CostEntry(name="Taxa", unit_value=D("200"), quantity=D("1")))
    assert draft.breakdown.total_costs == D("200")

    draft.update_cost(0, calculation_mode="percentage", percentage_value="10")
    assert draft.input.costs[0].calculation_mode == CalculationMode.PERCENTAGE
    assert draft.breakdown.total_costs == D("20")

    draft.remove_cost(0)
    assert draft.breakdown.total_costs == D("0")


def test_remove_item_and_discount():
    draft = QuoteDraft(
        QuoteInput.build(
            items=[LineItem("A", D("1"), D("0"), D("100")), LineItem("B", D("1"), D("0"), D("50"))]
        )
    )
    draft.set_discount("10")
    assert draft.breakdown.final_total == D("135")

    draft.remove_item(1)
    assert draft.breakdown.gross_revenue == D("100")
    assert draft.breakdown.final_total == D("90")
