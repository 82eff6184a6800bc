"""Admin status transitions — command and handler.

The transition table lives on the Order aggregate; this is the only entry
point that changes ``Order.status`` apart from return approval.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.queries import order_to_dict

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class TransitionOrderStatus:
    order_id = Identifier(required=True)
    status = String(max_length=255)  # validated against the transition table


@ordering.command_handler(part_of=Order)
class TransitionOrderStatusHandler:
    @handle(TransitionOrderStatus)
    def transition_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.by_id(command.order_id)
        previous = order.status
        order.transition_to(command.status)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
        )
        return order


def transition_order_status(order_id, new_status) -> dict:
    """Apply an admin status change and return the updated order."""
    order = current_domain.process(
        TransitionOrderStatus(order_id=str(order_id), status=str(new_status or "")),
        asynchronous=False,
    )
    return order_to_dict(order)
