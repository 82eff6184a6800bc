import os

import pytest


@pytest.fixture(scope="session")
def _ordering_domain(request):
    """Initialize the ordering domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(scope="session", autouse=True)
def setup_db(_ordering_domain):
    from ordering.utils.db import drop_db, setup_db

    setup_db(_ordering_domain)

    yield

    drop_db(_ordering_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_ordering_domain, tmp_path, monkeypatch):
    """Push domain context before each test, cleanup after."""
    from ordering.channel import reset_channels

    monkeypatch.setenv("ORDERING_MEDIA_ROOT", str(tmp_path))
    reset_channels()

    ctx = _ordering_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()
    reset_channels()


# ---------------------------------------------------------------------------
# Catalogue and order factories
# ---------------------------------------------------------------------------
@pytest.fixture
def customer():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1-555-0100",
        "address": "123 Main St, Springfield",
    }


@pytest.fixture
def make_category():
    from ordering.catalogue.management import create_category

    def _make(name="Apparel", tax_rate=0.10):
        return create_category(name, tax_rate)

    return _make


@pytest.fixture
def make_product(make_category):
    from ordering.catalogue.management import add_product

    def _make(name="Shirt", price=200000.0, stock=10, category_id=None, tax_rate=0.10):
        if category_id is None:
            category_id = make_category(tax_rate=tax_rate)
        return add_product(name, price, category_id, stock=stock)

    return _make


@pytest.fixture
def place_order(make_product, customer):
    """Check out ``quantity`` units of a fresh product; returns (order_id, product_id)."""
    from ordering.order.checkout import checkout

    def _place(user_id="user-1", quantity=1, price=200000.0, stock=10, voucher_code=None):
        product_id = make_product(price=price, stock=stock)
        result = checkout(
            user_id,
            [{"product_id": product_id, "quantity": quantity}],
            customer,
            voucher_code=voucher_code,
        )
        return result["order_id"], product_id

    return _place


@pytest.fixture
def completed_order(place_order):
    """A COMPLETED order for user-1; returns (order_id, product_id)."""
    from ordering.order.status import transition_order_status

    def _complete(**kwargs):
        order_id, product_id = place_order(**kwargs)
        transition_order_status(order_id, "PAID")
        transition_order_status(order_id, "COMPLETED")
        return order_id, product_id

    return _complete


@pytest.fixture
def notifier():
    from ordering.channel import get_notification_sender

    return get_notification_sender()
