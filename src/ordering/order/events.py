"""Domain events for the Order and ReturnRequest aggregates.

Events are versioned, immutable facts. Structured payloads (customer block,
lines) travel as JSON text so the events stay flat and serializable.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A checkout committed: the order, its lines and the stock decrements."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    customer = Text(required=True)  # JSON: customer snapshot dict
    lines = Text(required=True)  # JSON: list of line snapshot dicts
    subtotal = Float(required=True)
    voucher_code = String(max_length=50)
    voucher_discount = Float(default=0.0)
    total_vat = Float(required=True)
    total_amount = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnRequested:
    """A customer asked to return a completed order."""

    __version__ = 1

    order_id = Identifier(required=True)
    return_request_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = Text(required=True)
    media = Text()  # JSON: list of storage references
    requested_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnApproved:
    """An admin approved the return; the order is cancelled and refunded."""

    __version__ = 1

    order_id = Identifier(required=True)
    refunded_amount = Float(required=True)
    refunded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnRejected:
    __version__ = 1

    order_id = Identifier(required=True)
    rejected_at = DateTime(required=True)
