"""Integration tests for Order and Admin API endpoints via TestClient."""

import base64

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from ordering.api import admin_router, order_router, register_error_handlers
from ordering.catalogue.reader import CatalogReader
from ordering.order.order import Order
from protean import current_domain

CUSTOMER_HEADERS = {"X-User-Id": "user-1"}
ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture()
def client(_ordering_domain):
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with _ordering_domain.domain_context():
            return await call_next(request)

    app.include_router(order_router)
    app.include_router(admin_router)
    register_error_handlers(app)
    return TestClient(app)


def _checkout_body(product_id, quantity=1, **overrides):
    body = {
        "items": [{"product_id": product_id, "quantity": quantity}],
        "customer": {"name": "Jane Doe", "email": "jane@example.com", "address": "123 Main St"},
    }
    body.update(overrides)
    return body


def _place(client, make_product, **kwargs):
    product_id = make_product(price=100.0, stock=5)
    response = client.post("/orders", json=_checkout_body(product_id, **kwargs), headers=CUSTOMER_HEADERS)
    assert response.status_code == 201
    return response.json()["order_id"], product_id


def _complete(client, order_id):
    for status in ("PAID", "COMPLETED"):
        response = client.put(f"/admin/orders/{order_id}/status", json={"status": status}, headers=ADMIN_HEADERS)
        assert response.status_code == 200


class TestCheckoutAPI:
    def test_checkout_returns_201(self, client, make_product):
        order_id, _ = _place(client, make_product, voucher_code="SALE10")

        order = current_domain.repository_for(Order).get(order_id)
        assert order.totals.total_amount == 99.0

    def test_missing_identity_is_forbidden(self, client, make_product):
        product_id = make_product()

        response = client.post("/orders", json=_checkout_body(product_id))

        assert response.status_code == 403
        assert response.json()["error"]["kind"] == "FORBIDDEN"

    def test_unknown_product_is_404(self, client):
        response = client.post("/orders", json=_checkout_body("missing"), headers=CUSTOMER_HEADERS)

        assert response.status_code == 404
        assert response.json()["error"]["kind"] == "NOT_FOUND"

    def test_insufficient_stock_is_409_with_context(self, client, make_product):
        product_id = make_product(stock=1)

        response = client.post("/orders", json=_checkout_body(product_id, quantity=3), headers=CUSTOMER_HEADERS)

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["kind"] == "INSUFFICIENT_STOCK"
        assert error["context"]["requested"] == 3
        assert error["context"]["available"] == 1

    def test_empty_cart_is_400(self, client):
        response = client.post(
            "/orders",
            json={"items": [], "customer": {"name": "J", "email": "j@x.test", "address": "A"}},
            headers=CUSTOMER_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "VALIDATION"


class TestOrderReadAPI:
    def test_list_my_orders(self, client, make_product):
        order_id, _ = _place(client, make_product)

        response = client.get("/orders", headers=CUSTOMER_HEADERS)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [order_id]

    def test_order_detail(self, client, make_product):
        order_id, _ = _place(client, make_product)

        response = client.get(f"/orders/{order_id}", headers=CUSTOMER_HEADERS)

        assert response.status_code == 200
        assert response.json()["status"] == "PENDING"

    def test_other_users_order_is_forbidden(self, client, make_product):
        order_id, _ = _place(client, make_product)

        response = client.get(f"/orders/{order_id}", headers={"X-User-Id": "user-2"})

        assert response.status_code == 403

    def test_invoice(self, client, make_product):
        order_id, _ = _place(client, make_product, quantity=2)

        response = client.get(f"/orders/{order_id}/invoice", headers=CUSTOMER_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["summary"]["total"] == 220.0
        assert body["items"][0]["vat_amount"] == 20.0


class TestAdminStatusAPI:
    def test_admin_role_required(self, client, make_product):
        order_id, _ = _place(client, make_product)

        response = client.put(f"/admin/orders/{order_id}/status", json={"status": "PAID"}, headers=CUSTOMER_HEADERS)

        assert response.status_code == 403

    def test_transition(self, client, make_product):
        order_id, _ = _place(client, make_product)

        response = client.put(f"/admin/orders/{order_id}/status", json={"status": "paid"}, headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["status"] == "PAID"
        assert response.json()["allowed_statuses"] == ["COMPLETED"]

    @pytest.mark.parametrize(
        ("status", "code", "kind"),
        [("SHIPPED", 400, "INVALID_STATUS"), ("PENDING", 409, "NO_OP"), ("COMPLETED", 409, "ILLEGAL_TRANSITION")],
    )
    def test_rejected_transitions(self, client, make_product, status, code, kind):
        order_id, _ = _place(client, make_product)

        response = client.put(f"/admin/orders/{order_id}/status", json={"status": status}, headers=ADMIN_HEADERS)

        assert response.status_code == code
        assert response.json()["error"]["kind"] == kind

    def test_unknown_order_is_404(self, client):
        response = client.put("/admin/orders/missing/status", json={"status": "PAID"}, headers=ADMIN_HEADERS)

        assert response.status_code == 404

    def test_admin_listing_includes_allowed_statuses(self, client, make_product):
        _place(client, make_product)

        response = client.get("/admin/orders", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()[0]["allowed_statuses"] == ["PAID", "CANCELLED"]


class TestReturnsAPI:
    def test_full_return_flow(self, client, make_product, tmp_path):
        attachment = {"filename": "a.png", "content_type": "image/png", "data": base64.b64encode(b"png").decode()}
        order_id, product_id = _place(client, make_product, quantity=2)
        _complete(client, order_id)

        response = client.post(
            f"/orders/{order_id}/returns",
            json={"reason": "Broken", "media": [attachment]},
            headers=CUSTOMER_HEADERS,
        )
        assert response.status_code == 201
        assert response.json()["order_id"] == order_id

        listing = client.get("/admin/returns", headers=ADMIN_HEADERS).json()
        assert listing[0]["order_id"] == order_id
        assert (tmp_path / listing[0]["media"][0]).read_bytes() == b"png"

        response = client.put(f"/admin/orders/{order_id}/returns/approve", headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert CatalogReader().product(product_id).stock == 5

        response = client.put(f"/admin/orders/{order_id}/returns/approve", headers=ADMIN_HEADERS)
        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "WRONG_STATE"

    def test_return_on_pending_order_is_409(self, client, make_product):
        order_id, _ = _place(client, make_product)

        response = client.post(f"/orders/{order_id}/returns", json={"reason": "x"}, headers=CUSTOMER_HEADERS)

        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "INELIGIBLE_STATE"

    def test_invalid_base64_is_400(self, client, make_product):
        order_id, _ = _place(client, make_product)
        _complete(client, order_id)

        response = client.post(
            f"/orders/{order_id}/returns",
            json={"reason": "x", "media": [{"filename": "a.png", "data": "***"}]},
            headers=CUSTOMER_HEADERS,
        )

        assert response.status_code == 400

    def test_reject(self, client, make_product):
        order_id, _ = _place(client, make_product)
        _complete(client, order_id)
        client.post(f"/orders/{order_id}/returns", json={"reason": "x"}, headers=CUSTOMER_HEADERS)

        response = client.put(f"/admin/orders/{order_id}/returns/reject", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert current_domain.repository_for(Order).get(order_id).return_status == "REJECTED"


class TestVatReportAPI:
    def test_vat_report(self, client, make_product):
        order_id, _ = _place(client, make_product)
        _complete(client, order_id)

        response = client.get("/admin/reports/vat", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["total_vat"] == 10.0
