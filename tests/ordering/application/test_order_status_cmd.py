"""Application tests for admin status transitions."""

import pytest
from ordering.errors import IllegalTransition, InvalidStatus, NoOp, NotFound
from ordering.order.order import Order
from ordering.order.status import transition_order_status
from protean import current_domain


class TestTransitionOrderStatus:
    def test_pending_to_paid(self, place_order):
        order_id, _ = place_order()

        updated = transition_order_status(order_id, "paid")

        assert updated["status"] == "PAID"
        assert updated["paid_at"] is not None
        assert updated["allowed_statuses"] == ["COMPLETED"]

    def test_full_lifecycle_stamps_each_timestamp_once(self, place_order):
        order_id, _ = place_order()
        transition_order_status(order_id, "PAID")
        paid_at = current_domain.repository_for(Order).get(order_id).paid_at

        transition_order_status(order_id, "COMPLETED")

        order = current_domain.repository_for(Order).get(order_id)
        assert order.paid_at == paid_at
        assert order.completed_at is not None
        assert order.cancelled_at is None

    def test_missing_order_is_checked_before_status(self):
        with pytest.raises(NotFound):
            transition_order_status("missing", "bogus")

    def test_unknown_status(self, place_order):
        order_id, _ = place_order()

        with pytest.raises(InvalidStatus):
            transition_order_status(order_id, "SHIPPED")

    def test_same_status(self, place_order):
        order_id, _ = place_order()

        with pytest.raises(NoOp):
            transition_order_status(order_id, "PENDING")

    @pytest.mark.parametrize(
        "path",
        [["COMPLETED"], ["PAID", "PAID"], ["PAID", "COMPLETED", "PAID"], ["CANCELLED", "PAID"]],
    )
    def test_illegal_transition_leaves_status_unchanged(self, place_order, path):
        order_id, _ = place_order()
        *setup, illegal = path
        for status in setup:
            transition_order_status(order_id, status)
        before = current_domain.repository_for(Order).get(order_id).status

        with pytest.raises((IllegalTransition, NoOp)):
            transition_order_status(order_id, illegal)

        assert current_domain.repository_for(Order).get(order_id).status == before
