"""Tests for the Order status machine — allowed transitions, closure and timestamps."""

from datetime import UTC, datetime

import pytest
from ordering.errors import ErrorKind, IllegalTransition, InvalidStatus, NoOp
from ordering.order.events import OrderStatusChanged
from ordering.order.order import (
    Order,
    OrderStatus,
    allowed_next_statuses,
    parse_status,
)
from ordering.pricing import PriceLine, PricingEngine

_ALLOWED = {
    (OrderStatus.PENDING, OrderStatus.PAID),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.PAID, OrderStatus.COMPLETED),
}


def _make_order():
    pricing = PricingEngine().price([PriceLine(unit_price=50.0, quantity=2, tax_rate=0.1)])
    return Order.place(
        user_id="user-001",
        customer={"name": "Jane", "email": "jane@example.com", "address": "1 Main St"},
        pricing=pricing,
        lines=[
            {
                "product_id": "prod-001",
                "product_name": "Mug",
                "category_name": "Kitchen",
                "quantity": 2,
                "unit_price": 50.0,
                "tax_rate": 0.1,
            }
        ],
    )


def _order_at(status):
    order = _make_order()
    if status == OrderStatus.PAID:
        order.transition_to(OrderStatus.PAID)
    elif status == OrderStatus.COMPLETED:
        order.transition_to(OrderStatus.PAID)
        order.transition_to(OrderStatus.COMPLETED)
    elif status == OrderStatus.CANCELLED:
        order.transition_to(OrderStatus.CANCELLED)
    order._events.clear()
    return order


class TestAllowedTransitions:
    def test_pending_to_paid_stamps_paid_at(self):
        order = _order_at(OrderStatus.PENDING)
        order.transition_to("PAID")

        assert order.status == OrderStatus.PAID.value
        assert order.paid_at is not None

    def test_paid_to_completed_stamps_completed_at(self):
        order = _order_at(OrderStatus.PAID)
        order.transition_to("COMPLETED")

        assert order.status == OrderStatus.COMPLETED.value
        assert order.completed_at is not None

    def test_pending_to_cancelled_stamps_cancelled_at(self):
        order = _order_at(OrderStatus.PENDING)
        order.transition_to("CANCELLED")

        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_at is not None

    def test_requested_status_is_case_insensitive(self):
        order = _order_at(OrderStatus.PENDING)
        order.transition_to(" paid ")

        assert order.status == OrderStatus.PAID.value

    def test_transition_raises_status_changed_event(self):
        order = _order_at(OrderStatus.PENDING)
        order.transition_to("PAID")

        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "PENDING"
        assert event.new_status == "PAID"

    def test_existing_timestamp_is_not_overwritten(self):
        order = _order_at(OrderStatus.PENDING)
        earlier = datetime(2024, 1, 1, tzinfo=UTC)
        order.paid_at = earlier

        order.transition_to("PAID")

        assert order.paid_at == earlier


class TestTransitionClosure:
    @pytest.mark.parametrize("current", list(OrderStatus))
    @pytest.mark.parametrize("requested", list(OrderStatus))
    def test_every_disallowed_pair_is_rejected(self, current, requested):
        if current == requested or (current, requested) in _ALLOWED:
            return

        order = _order_at(current)
        with pytest.raises(IllegalTransition) as exc:
            order.transition_to(requested)

        assert exc.value.kind == ErrorKind.ILLEGAL_TRANSITION
        assert exc.value.context["current_status"] == current
        assert exc.value.context["requested_status"] == requested
        assert order.status == current.value
        assert order._events == []

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_same_status_is_a_no_op(self, status):
        order = _order_at(status)
        with pytest.raises(NoOp):
            order.transition_to(status.value)

    def test_unknown_status_is_invalid(self):
        order = _order_at(OrderStatus.PENDING)
        with pytest.raises(InvalidStatus) as exc:
            order.transition_to("SHIPPED")

        assert exc.value.kind == ErrorKind.INVALID_STATUS
        assert order.status == OrderStatus.PENDING.value


class TestAllowedNextStatuses:
    def test_table(self):
        assert allowed_next_statuses("PENDING") == ["PAID", "CANCELLED"]
        assert allowed_next_statuses("PAID") == ["COMPLETED"]
        assert allowed_next_statuses("COMPLETED") == []
        assert allowed_next_statuses("CANCELLED") == []

    def test_parse_status_rejects_blank(self):
        with pytest.raises(InvalidStatus):
            parse_status("")
