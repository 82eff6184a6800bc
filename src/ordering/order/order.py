"""Order aggregate — the persisted result of a checkout.

The customer block, the monetary totals and every line are snapshots taken
at checkout time. They are never recomputed from live catalogue data, so an
invoice stays stable after a product is repriced or its category's VAT rate
changes.

State Machine:
    PENDING → PAID → COMPLETED
    PENDING → CANCELLED

Return status (independent of the order status):
    NONE → REQUESTED → APPROVED | REJECTED
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering import errors
from ordering.domain import ordering
from ordering.order.events import (
    OrderPlaced,
    OrderStatusChanged,
    ReturnApproved,
    ReturnRejected,
    ReturnRequested,
)
from ordering.pricing import round2


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ReturnStatus(Enum):
    NONE = "NONE"
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CustomerType(Enum):
    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Timestamp stamped the first time a status is reached
_STATUS_TIMESTAMPS = {
    OrderStatus.PAID: "paid_at",
    OrderStatus.COMPLETED: "completed_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


def parse_status(value) -> OrderStatus:
    """Resolve a requested status case-insensitively, or raise InvalidStatus."""
    if isinstance(value, OrderStatus):
        return value
    normalized = str(value or "").strip().upper()
    try:
        return OrderStatus(normalized)
    except ValueError:
        raise errors.InvalidStatus(
            f"Unknown order status: {value}",
            requested_status=value,
            valid_statuses=[s.value for s in OrderStatus],
        ) from None


def allowed_next_statuses(status) -> list[str]:
    """Statuses an order in ``status`` may move to, in lifecycle order."""
    current = parse_status(status)
    allowed = _VALID_TRANSITIONS[current]
    return [s.value for s in OrderStatus if s in allowed]


def as_utc(value: datetime) -> datetime:
    # SQL providers may hand back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class CustomerSnapshot:
    """Who the order is for, as entered at checkout.

    Not re-derived from the user profile later: editing a profile never
    rewrites past orders.
    """

    name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone = String(max_length=50)
    address = Text(required=True)
    customer_type = String(choices=CustomerType, default=CustomerType.INDIVIDUAL.value)
    company_name = String(max_length=255)
    tax_code = String(max_length=50)
    note = Text()


@ordering.value_object(part_of="Order")
class OrderTotals:
    """Monetary snapshot fixed when the order is placed."""

    subtotal = Float(required=True, min_value=0.0)
    voucher_code = String(max_length=50)
    voucher_type = String(max_length=20)
    voucher_discount = Float(default=0.0, min_value=0.0)
    total_vat = Float(required=True, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)

    @property
    def final_subtotal(self):
        return round2(self.subtotal - (self.voucher_discount or 0.0))

    @invariant.post
    def total_must_equal_discounted_subtotal_plus_vat(self):
        expected = round2(self.final_subtotal + self.total_vat)
        if self.total_amount != expected:
            raise ValidationError(
                {"total_amount": [f"Total {self.total_amount} does not match subtotal, discount and VAT ({expected})"]}
            )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """One product sold on an order, with its price and VAT frozen at checkout."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    category_name = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    tax_rate = Float(required=True, min_value=0.0)
    tax_amount = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)
    size = String(max_length=50)
    color = String(max_length=50)

    def to_dict(self):
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "category_name": self.category_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "line_total": self.line_total,
            "size": self.size,
            "color": self.color,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    user_id = Identifier(required=True)
    customer = ValueObject(CustomerSnapshot)
    totals = ValueObject(OrderTotals)
    lines = HasMany(OrderLine)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    return_status = String(choices=ReturnStatus, default=ReturnStatus.NONE.value)
    order_date = DateTime()
    paid_at = DateTime()
    completed_at = DateTime()
    cancelled_at = DateTime()
    refunded_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, customer, pricing, lines):
        """Build a PENDING order from a priced cart.

        Args:
            user_id: The owner of the order.
            customer: Dict with the customer snapshot fields.
            pricing: The ``PricingResult`` for ``lines``.
            lines: List of dicts with product_id, product_name,
                category_name, quantity, unit_price, tax_rate and
                optional size/color. Same order as ``pricing.lines``.
        """
        now = datetime.now(UTC)

        order_lines = [
            OrderLine(
                product_id=line["product_id"],
                product_name=line["product_name"],
                category_name=line.get("category_name"),
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                tax_rate=line["tax_rate"],
                tax_amount=priced.tax_amount,
                line_total=priced.line_total,
                size=line.get("size"),
                color=line.get("color"),
            )
            for line, priced in zip(lines, pricing.lines, strict=True)
        ]

        order = cls(
            user_id=user_id,
            customer=CustomerSnapshot(**customer),
            totals=OrderTotals(
                subtotal=pricing.subtotal,
                voucher_code=pricing.voucher.code if pricing.voucher else None,
                voucher_type=pricing.voucher.type.value if pricing.voucher else None,
                voucher_discount=pricing.voucher_discount,
                total_vat=pricing.total_vat,
                total_amount=pricing.total_amount,
            ),
            lines=order_lines,
            status=OrderStatus.PENDING.value,
            return_status=ReturnStatus.NONE.value,
            order_date=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                customer=json.dumps(order.customer_dict()),
                lines=json.dumps([line.to_dict() for line in order.lines]),
                subtotal=order.totals.subtotal,
                voucher_code=order.totals.voucher_code,
                voucher_discount=order.totals.voucher_discount,
                total_vat=order.totals.total_vat,
                total_amount=order.totals.total_amount,
                placed_at=now,
            )
        )
        return order

    def customer_dict(self):
        c = self.customer
        return {
            "name": c.name,
            "email": c.email,
            "phone": c.phone,
            "address": c.address,
            "customer_type": c.customer_type,
            "company_name": c.company_name,
            "tax_code": c.tax_code,
            "note": c.note,
        }

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _stamp(self, field_name, now):
        # First write wins
        if getattr(self, field_name) is None:
            setattr(self, field_name, now)

    def transition_to(self, requested, now=None):
        """Move to ``requested`` if the transition table allows it."""
        target = parse_status(requested)
        current = OrderStatus(self.status)

        if target == current:
            raise errors.NoOp(
                f"Order is already {current.value}",
                order_id=str(self.id),
                current_status=current,
                requested_status=target,
            )
        if target not in _VALID_TRANSITIONS[current]:
            raise errors.IllegalTransition(
                f"Cannot transition from {current.value} to {target.value}",
                order_id=str(self.id),
                current_status=current,
                requested_status=target,
                allowed=allowed_next_statuses(current),
            )

        now = now or datetime.now(UTC)
        self.status = target.value
        self._stamp(_STATUS_TIMESTAMPS[target], now)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Returns
    # -------------------------------------------------------------------
    def return_deadline(self, window_days):
        started = self.completed_at or self.order_date
        return as_utc(started) + timedelta(days=window_days)

    def check_return_eligibility(self, user_id, reason, now, window_days):
        """Raise the first rule a return request would break.

        Returns the trimmed reason when the order is eligible.
        """
        if str(self.user_id) != str(user_id):
            raise errors.Forbidden(
                "Order belongs to another user",
                order_id=str(self.id),
                user_id=str(user_id),
            )
        if OrderStatus(self.status) != OrderStatus.COMPLETED:
            raise errors.IneligibleState(
                "Only completed orders can be returned",
                order_id=str(self.id),
                current_status=self.status,
                required_status=OrderStatus.COMPLETED,
            )
        if ReturnStatus(self.return_status) != ReturnStatus.NONE:
            raise errors.AlreadyProcessed(
                "A return has already been requested for this order",
                order_id=str(self.id),
                return_status=self.return_status,
            )

        deadline = self.return_deadline(window_days)
        if as_utc(now) > deadline:
            raise errors.WindowExpired(
                f"Return window of {window_days} days has expired",
                order_id=str(self.id),
                deadline=deadline.isoformat(),
            )

        reason = str(reason or "").strip()
        if not reason:
            raise errors.ValidationError("A return reason is required", field="reason")
        return reason

    def request_return(self, return_request_id, user_id, reason, media, now, window_days):
        reason = self.check_return_eligibility(user_id, reason, now, window_days)

        self.return_status = ReturnStatus.REQUESTED.value
        self.updated_at = now

        self.raise_(
            ReturnRequested(
                order_id=str(self.id),
                return_request_id=str(return_request_id),
                user_id=str(user_id),
                reason=reason,
                media=json.dumps(list(media)),
                requested_at=now,
            )
        )
        return reason

    def _assert_return_requested(self):
        if ReturnStatus(self.return_status) != ReturnStatus.REQUESTED:
            raise errors.WrongState(
                "No pending return request for this order",
                order_id=str(self.id),
                return_status=self.return_status,
                required_status=ReturnStatus.REQUESTED,
            )

    def approve_return(self, now=None):
        """Approve the pending return: the order is cancelled and refunded.

        Stock is restored by the caller through the InventoryLedger in the
        same unit of work.
        """
        self._assert_return_requested()
        now = now or datetime.now(UTC)

        previous_status = self.status
        self.return_status = ReturnStatus.APPROVED.value
        self._stamp("refunded_at", now)
        self.status = OrderStatus.CANCELLED.value
        self._stamp("cancelled_at", now)
        self.updated_at = now

        self.raise_(
            ReturnApproved(
                order_id=str(self.id),
                refunded_amount=self.totals.total_amount,
                refunded_at=now,
            )
        )
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous_status,
                new_status=OrderStatus.CANCELLED.value,
                changed_at=now,
            )
        )

    def reject_return(self, now=None):
        self._assert_return_requested()
        now = now or datetime.now(UTC)

        self.return_status = ReturnStatus.REJECTED.value
        self.updated_at = now

        self.raise_(ReturnRejected(order_id=str(self.id), rejected_at=now))
