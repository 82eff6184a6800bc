"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.catalogue.reader import CatalogReader
from ordering.errors import OrderingError
from ordering.order.queries import get_order
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def user_id():
    return "user-1"


@pytest.fixture()
def outcome():
    """Container for the result or the error of the last When step."""
    return {"value": None, "exc": None}


@pytest.fixture()
def attempt(outcome):
    """Run an application call, capturing an ordering error instead of raising it."""

    def _attempt(action, *args, **kwargs):
        try:
            outcome["value"] = action(*args, **kwargs)
        except OrderingError as exc:
            outcome["exc"] = exc
        return outcome["value"]

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a product priced {price:g} with {stock:d} units in stock"),
    target_fixture="product_id",
)
def _(make_product, price, stock):
    return make_product(price=float(price), stock=stock)


@given("a pending order", target_fixture="order_id")
def _(place_order, user_id):
    order_id, _ = place_order(user_id=user_id, quantity=2, price=100.0, stock=5)
    return order_id


@given("a completed order", target_fixture="order_id")
def _(completed_order, user_id):
    order_id, _ = completed_order(user_id=user_id, quantity=2, price=100.0, stock=5)
    return order_id


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert get_order(order_id)["status"] == status


@then(parsers.cfparse('the return status is "{status}"'))
def _(order_id, status):
    assert get_order(order_id)["return_status"] == status


@then(parsers.cfparse('the request fails with "{kind}"'))
def _(outcome, kind):
    assert outcome["exc"] is not None, "Expected the request to fail"
    assert outcome["exc"].kind.value == kind


@then("the request succeeds")
def _(outcome):
    assert outcome["exc"] is None, f"Unexpected failure: {outcome['exc']}"


@then(parsers.cfparse("{stock:d} units remain in stock"))
def _(order_id, stock):
    product_id = get_order(order_id)["lines"][0]["product_id"]
    assert CatalogReader().product(product_id).stock == stock
