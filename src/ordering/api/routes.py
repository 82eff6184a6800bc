"""FastAPI routes for the Ordering domain — customer orders and admin actions."""

import base64
import binascii

from fastapi import APIRouter, Depends

from ordering import errors
from ordering.api.auth import AuthContext, admin_context, auth_context
from ordering.api.schemas import (
    CheckoutRequest,
    InvoiceResponse,
    OrderIdResponse,
    OrderResponse,
    ReturnRequestBody,
    ReturnRequestEntry,
    ReturnRequestResponse,
    UpdateStatusRequest,
    VatReportResponse,
)
from ordering.channel.media_port import MediaFile
from ordering.order.checkout import checkout
from ordering.order.queries import get_invoice_data, get_order, list_orders, list_orders_for_user
from ordering.order.returns import approve_return, list_return_requests, reject_return, submit_return_request
from ordering.order.status import transition_order_status
from ordering.reports.vat import vat_report


def _load_owned_order(order_id: str, auth: AuthContext) -> dict:
    order = get_order(order_id)
    if order["user_id"] != auth.user_id and not auth.is_admin:
        raise errors.Forbidden("Order belongs to another user", order_id=order_id)
    return order


def _decode_media(body: ReturnRequestBody) -> list[MediaFile]:
    files = []
    for attachment in body.media:
        try:
            content = base64.b64decode(attachment.data, validate=True)
        except (binascii.Error, ValueError):
            raise errors.ValidationError(
                "Attachment is not valid base64",
                field="media",
                filename=attachment.filename,
            ) from None
        files.append(MediaFile(filename=attachment.filename, content=content, content_type=attachment.content_type))
    return files


# ---------------------------------------------------------------------------
# Customer Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: CheckoutRequest, auth: AuthContext = Depends(auth_context)) -> OrderIdResponse:
    result = checkout(
        user_id=auth.user_id,
        items=[item.model_dump() for item in body.items],
        customer=body.customer.model_dump(),
        voucher_code=body.voucher_code,
    )
    return OrderIdResponse(order_id=result["order_id"])


@order_router.get("", response_model=list[OrderResponse])
async def my_orders(auth: AuthContext = Depends(auth_context)) -> list[dict]:
    return list_orders_for_user(auth.user_id)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, auth: AuthContext = Depends(auth_context)) -> dict:
    return _load_owned_order(order_id, auth)


@order_router.get("/{order_id}/invoice", response_model=InvoiceResponse)
async def order_invoice(order_id: str, auth: AuthContext = Depends(auth_context)) -> dict:
    _load_owned_order(order_id, auth)
    return get_invoice_data(order_id)


@order_router.post("/{order_id}/returns", status_code=201, response_model=ReturnRequestResponse)
async def request_return(
    order_id: str,
    body: ReturnRequestBody,
    auth: AuthContext = Depends(auth_context),
) -> ReturnRequestResponse:
    result = submit_return_request(
        order_id=order_id,
        user_id=auth.user_id,
        reason=body.reason,
        media_files=_decode_media(body),
    )
    return ReturnRequestResponse(**result)


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(admin_context)])


@admin_router.get("/orders", response_model=list[OrderResponse])
async def all_orders() -> list[dict]:
    return list_orders()


@admin_router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateStatusRequest) -> dict:
    return transition_order_status(order_id, body.status)


@admin_router.get("/returns", response_model=list[ReturnRequestEntry])
async def return_requests() -> list[dict]:
    return list_return_requests()


@admin_router.put("/orders/{order_id}/returns/approve", response_model=OrderIdResponse)
async def approve_order_return(order_id: str) -> OrderIdResponse:
    return OrderIdResponse(**approve_return(order_id))


@admin_router.put("/orders/{order_id}/returns/reject", response_model=OrderIdResponse)
async def reject_order_return(order_id: str) -> OrderIdResponse:
    return OrderIdResponse(**reject_return(order_id))


@admin_router.get("/reports/vat", response_model=VatReportResponse)
async def vat_summary() -> dict:
    return vat_report()
