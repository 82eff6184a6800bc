"""BDD tests for checkout."""

from ordering.catalogue.reader import CatalogReader
from ordering.order.checkout import checkout
from ordering.order.queries import get_order, list_orders
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/checkout.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer orders {quantity:d} units with voucher "{code}"'), target_fixture="order_id")
def _(attempt, user_id, customer, product_id, quantity, code):
    result = attempt(checkout, user_id, [{"product_id": product_id, "quantity": quantity}], customer, code)
    return result and result["order_id"]


@when(parsers.cfparse("the customer orders {quantity:d} units"), target_fixture="order_id")
def _(attempt, user_id, customer, product_id, quantity):
    result = attempt(checkout, user_id, [{"product_id": product_id, "quantity": quantity}], customer)
    return result and result["order_id"]


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order total is {total:g}"))
def _(order_id, total):
    assert get_order(order_id)["totals"]["total_amount"] == total


@then("the order has no voucher")
def _(order_id):
    totals = get_order(order_id)["totals"]
    assert totals["voucher_code"] is None
    assert totals["voucher_discount"] == 0


@then(parsers.cfparse("the product still has {stock:d} units in stock"))
def _(product_id, stock):
    assert CatalogReader().product(product_id).stock == stock


@then("no order was placed")
def _():
    assert list_orders() == []
