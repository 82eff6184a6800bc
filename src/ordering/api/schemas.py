"""Pydantic request/response schemas for the Ordering API.

These are the HTTP contract. They are kept separate from the Protean commands
so the wire format can evolve without touching the domain.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Checkout ---


class CheckoutItem(BaseModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    size: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=50)


class CustomerInfo(BaseModel):
    name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=254)
    phone: str | None = Field(None, max_length=50)
    address: str
    customer_type: str | None = Field(None, max_length=20)
    company_name: str | None = Field(None, max_length=255)
    tax_code: str | None = Field(None, max_length=50)
    note: str | None = None


class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_id": "prod-001", "quantity": 2, "size": "M", "color": "Black"},
                        {"product_id": "prod-002", "quantity": 1},
                    ],
                    "customer": {
                        "name": "Jane Doe",
                        "email": "jane@example.com",
                        "phone": "+1-555-0100",
                        "address": "123 Main St, Springfield",
                    },
                    "voucher_code": "SALE10",
                }
            ]
        }
    }

    items: list[CheckoutItem] = Field(..., min_length=1)
    customer: CustomerInfo
    voucher_code: str | None = None


class OrderIdResponse(BaseModel):
    order_id: str


# --- Orders ---


class OrderLineResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    category_name: str | None = None
    quantity: int
    unit_price: float
    tax_rate: float
    tax_amount: float
    line_total: float
    size: str | None = None
    color: str | None = None


class OrderTotalsResponse(BaseModel):
    subtotal: float
    voucher_code: str | None = None
    voucher_discount: float
    final_subtotal: float
    total_vat: float
    total_amount: float


class OrderResponse(BaseModel):
    id: str
    user_id: str
    status: str
    return_status: str
    allowed_statuses: list[str]
    customer: CustomerInfo
    totals: OrderTotalsResponse
    lines: list[OrderLineResponse]
    order_date: datetime | None = None
    paid_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    refunded_at: datetime | None = None


class UpdateStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "PAID"}]}}

    status: str = Field(..., max_length=255)


# --- Invoice ---


class InvoiceCustomer(BaseModel):
    name: str
    email: str
    phone: str | None = None
    address: str
    customer_type: str | None = None
    company_name: str | None = None
    tax_code: str | None = None


class InvoiceItem(BaseModel):
    product_id: str
    name: str
    quantity: int
    price: float
    vat_rate: float
    vat_amount: float
    total: float
    size: str | None = None
    color: str | None = None


class InvoiceSummary(BaseModel):
    subtotal: float
    voucher_discount: float
    final_subtotal: float
    total_vat: float
    total: float


class InvoiceVoucher(BaseModel):
    code: str
    discount: float
    type: str


class InvoiceResponse(BaseModel):
    order_id: str
    order_date: datetime | None = None
    status: str
    customer: InvoiceCustomer
    items: list[InvoiceItem]
    summary: InvoiceSummary
    voucher: InvoiceVoucher | None = None
    note: str | None = None


# --- Returns ---


class MediaAttachment(BaseModel):
    filename: str = Field(..., max_length=255)
    content_type: str | None = Field(None, max_length=100)
    data: str  # base64-encoded file content


class ReturnRequestBody(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "reason": "Item arrived damaged",
                    "media": [{"filename": "photo.jpg", "content_type": "image/jpeg", "data": "aGVsbG8="}],
                }
            ]
        }
    }

    reason: str = ""
    media: list[MediaAttachment] = Field(default_factory=list)


class ReturnRequestResponse(BaseModel):
    return_request_id: str
    order_id: str


class ReturnRequestEntry(BaseModel):
    id: str
    order_id: str
    user_id: str
    reason: str
    media: list[str]
    created_at: datetime | None = None
    return_status: str
    order_status: str
    customer_name: str
    order_date: datetime | None = None
    total_amount: float


# --- Reports ---


class MonthlyVat(BaseModel):
    month: str
    total_vat: float


class CategoryVat(BaseModel):
    category: str
    total_vat: float


class VatReportResponse(BaseModel):
    total_vat: float
    order_count: int
    by_month: list[MonthlyVat]
    by_category: list[CategoryVat]
