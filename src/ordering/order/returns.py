"""Order returns — commands, handlers and the workflow entry points.

Handles the return lifecycle: submission by the customer, then approval or
rejection by an admin. Approval cancels the order, stamps the refund and
puts every line's quantity back into stock in a single Unit of Work.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer, Text
from protean.utils.globals import current_domain

from ordering import errors
from ordering.channel import get_media_store
from ordering.domain import ordering
from ordering.inventory.ledger import InventoryLedger
from ordering.order.order import Order
from ordering.order.return_request import ReturnRequest
from ordering.settings import return_window_days

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class SubmitReturnRequest:
    """Request a return of a completed order, providing a reason."""

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = Text()
    media = Text()  # JSON: list of storage references
    requested_at = DateTime(required=True)
    window_days = Integer(required=True, min_value=0)


@ordering.command(part_of="Order")
class ApproveReturn:
    """Approve a pending return request."""

    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class RejectReturn:
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class ManageReturnsHandler:
    @handle(SubmitReturnRequest)
    def submit_return_request(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.by_id(command.order_id)
        media = json.loads(command.media) if command.media else []

        request_id = str(uuid4())
        reason = order.request_return(
            return_request_id=request_id,
            user_id=command.user_id,
            reason=command.reason,
            media=media,
            now=command.requested_at,
            window_days=command.window_days,
        )
        return_request = ReturnRequest.create(
            request_id=request_id,
            order_id=order.id,
            user_id=command.user_id,
            reason=reason,
            media=media,
            created_at=command.requested_at,
        )

        current_domain.repository_for(ReturnRequest).add(return_request)
        repo.add(order)
        return {"return_request_id": request_id, "order_id": str(order.id)}

    @handle(ApproveReturn)
    def approve_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.by_id(command.order_id)
        order.approve_return()

        ledger = InventoryLedger()
        for line in order.lines:
            if not ledger.increment(line.product_id, line.quantity, reason="return_approved"):
                raise errors.InternalError(
                    "Could not restore stock for returned line",
                    order_id=str(order.id),
                    product_id=str(line.product_id),
                    quantity=line.quantity,
                )

        repo.add(order)
        return {"order_id": str(order.id)}

    @handle(RejectReturn)
    def reject_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.by_id(command.order_id)
        order.reject_return()
        repo.add(order)
        return {"order_id": str(order.id)}


# ---------------------------------------------------------------------------
# Workflow entry points
# ---------------------------------------------------------------------------
def submit_return_request(order_id, user_id, reason, media_files=(), now=None) -> dict:
    """Submit a return for a completed order.

    Eligibility is checked before any media is written; the handler checks
    again inside the Unit of Work. Saved media is discarded if the request
    is not persisted.
    """
    now = now or datetime.now(UTC)
    window_days = return_window_days()

    order = current_domain.repository_for(Order).by_id(order_id)
    reason = order.check_return_eligibility(user_id, reason, now, window_days)

    media_files = list(media_files or [])
    store = get_media_store()
    refs = store.save(media_files) if media_files else []

    try:
        result = current_domain.process(
            SubmitReturnRequest(
                order_id=str(order_id),
                user_id=str(user_id),
                reason=reason,
                media=json.dumps(refs),
                requested_at=now,
                window_days=window_days,
            ),
            asynchronous=False,
        )
    except Exception:
        if refs:
            store.discard(refs)
        raise

    logger.info(
        "Return requested",
        order_id=str(order_id),
        user_id=str(user_id),
        return_request_id=result["return_request_id"],
        media_count=len(refs),
    )
    return result


def approve_return(order_id) -> dict:
    result = current_domain.process(ApproveReturn(order_id=str(order_id)), asynchronous=False)
    logger.info("Return approved", order_id=str(order_id))
    return result


def reject_return(order_id) -> dict:
    result = current_domain.process(RejectReturn(order_id=str(order_id)), asynchronous=False)
    logger.info("Return rejected", order_id=str(order_id))
    return result


def list_return_requests() -> list[dict]:
    """All return requests with their order's summary, newest first."""
    order_repo = current_domain.repository_for(Order)
    entries = []
    for request in current_domain.repository_for(ReturnRequest).newest_first():
        order = order_repo.by_id(request.order_id)
        entries.append(
            {
                "id": str(request.id),
                "order_id": str(request.order_id),
                "user_id": str(request.user_id),
                "reason": request.reason,
                "media": request.media_refs,
                "created_at": request.created_at,
                "return_status": order.return_status,
                "order_status": order.status,
                "customer_name": order.customer.name,
                "order_date": order.order_date,
                "total_amount": order.totals.total_amount,
            }
        )
    return entries
