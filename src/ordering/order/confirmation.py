"""Order confirmation — notifies the customer once a checkout has committed.

Reacts to OrderPlaced and hands the confirmation to the configured
NotificationSender. Delivery is best-effort: a failure is logged and never
reaches the checkout that raised the event.
"""

import json

import structlog
from protean.utils.mixins import handle

from ordering.channel import get_notification_sender
from ordering.domain import ordering
from ordering.order.events import OrderPlaced
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def build_confirmation(event: OrderPlaced) -> dict:
    voucher = None
    if event.voucher_code:
        voucher = {"code": event.voucher_code, "discount": event.voucher_discount}

    return {
        "order_id": str(event.order_id),
        "customer": json.loads(event.customer),
        "lines": json.loads(event.lines),
        "totals": {
            "subtotal": event.subtotal,
            "voucher_discount": event.voucher_discount,
            "total_vat": event.total_vat,
            "total_amount": event.total_amount,
        },
        "voucher": voucher,
    }


@ordering.event_handler(part_of=Order)
class OrderConfirmationHandler:
    """Sends the order confirmation after the order is committed."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        try:
            result = get_notification_sender().send(build_confirmation(event))
        except Exception as e:
            logger.error(
                "Order confirmation dispatch failed",
                order_id=str(event.order_id),
                error=str(e),
            )
            return

        if not result.get("success"):
            logger.warning(
                "Order confirmation was not delivered",
                order_id=str(event.order_id),
                error=result.get("error", "Unknown dispatch error"),
            )
            return

        logger.info("Order confirmation sent", order_id=str(event.order_id))
