"""Checkout — turns a submitted cart into a persisted, priced order.

``checkout()`` validates the request up front, then processes ``PlaceOrder``.
The handler runs inside one Unit of Work: product lookups, pricing, the
order with its lines, and every stock decrement either all commit or all
roll back. The confirmation notification reacts to ``OrderPlaced`` after
commit (see ``ordering.order.confirmation``).
"""

import json

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering import errors
from ordering.catalogue.reader import CatalogReader
from ordering.domain import ordering
from ordering.inventory.ledger import InventoryLedger
from ordering.order.order import CustomerType, Order
from ordering.pricing import PriceLine, PricingEngine, voucher_rules
from ordering.settings import voucher_table

logger = structlog.get_logger(__name__)

_CUSTOMER_FIELDS = ("name", "email", "phone", "address", "customer_type", "company_name", "tax_code", "note")
_REQUIRED_CUSTOMER_FIELDS = ("name", "email", "address")

# Length limits of the CustomerSnapshot and OrderLine fields
_CUSTOMER_FIELD_LIMITS = {"name": 255, "email": 254, "phone": 50, "company_name": 255, "tax_code": 50}
_ITEM_FIELD_LIMITS = {"size": 50, "color": 50}


@ordering.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity, size?, color?}
    customer = Text(required=True)  # JSON: customer snapshot dict
    voucher_code = String(max_length=50)


def pricing_engine() -> PricingEngine:
    return PricingEngine(voucher_rules(voucher_table()))


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        customer = json.loads(command.customer) if isinstance(command.customer, str) else command.customer

        # Live reads inside the unit of work
        reader = CatalogReader()
        lines = []
        for item in items:
            product = reader.product(item["product_id"])
            if product.stock < item["quantity"]:
                raise errors.InsufficientStock(product.product_id, item["quantity"], product.stock)
            lines.append(
                {
                    "product_id": product.product_id,
                    "product_name": product.name,
                    "category_name": product.category_name,
                    "quantity": item["quantity"],
                    "unit_price": product.price,
                    "tax_rate": product.tax_rate,
                    "size": item.get("size"),
                    "color": item.get("color"),
                }
            )

        price_lines = [PriceLine(line["unit_price"], line["quantity"], line["tax_rate"]) for line in lines]
        pricing = pricing_engine().price(price_lines, voucher_code=command.voucher_code)

        order = Order.place(user_id=command.user_id, customer=customer, pricing=pricing, lines=lines)

        # The authoritative stock guard: a lost race aborts the whole checkout
        ledger = InventoryLedger()
        for line in order.lines:
            if not ledger.decrement(line.product_id, line.quantity):
                raise errors.InsufficientStock(str(line.product_id), line.quantity)

        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            user_id=str(command.user_id),
            line_count=len(lines),
            total_amount=order.totals.total_amount,
            voucher_code=order.totals.voucher_code,
        )
        return str(order.id)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------
def _validate_items(items) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise errors.ValidationError("Order must contain at least one item", field="items")

    normalized = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not item.get("product_id"):
            raise errors.ValidationError("Each item needs a product_id", field="items", index=index)

        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise errors.ValidationError(
                "Item quantity must be a positive integer",
                field="items",
                index=index,
                quantity=quantity,
            )

        for name, limit in _ITEM_FIELD_LIMITS.items():
            value = item.get(name)
            if value is not None and len(str(value)) > limit:
                raise errors.ValidationError(
                    f"Item {name} must be at most {limit} characters",
                    field=name,
                    index=index,
                    max_length=limit,
                )

        normalized.append(
            {
                "product_id": str(item["product_id"]),
                "quantity": quantity,
                "size": item.get("size"),
                "color": item.get("color"),
            }
        )
    return normalized


def _validate_customer(customer) -> dict:
    if not isinstance(customer, dict):
        raise errors.ValidationError("Customer information is required", field="customer")

    missing = [name for name in _REQUIRED_CUSTOMER_FIELDS if not str(customer.get(name) or "").strip()]
    if missing:
        raise errors.ValidationError(
            "Customer name, email and address are required",
            field="customer",
            missing=missing,
        )

    snapshot = {
        name: str(customer[name]).strip()
        for name in _CUSTOMER_FIELDS
        if customer.get(name) is not None and str(customer[name]).strip()
    }

    for name, limit in _CUSTOMER_FIELD_LIMITS.items():
        if len(snapshot.get(name, "")) > limit:
            raise errors.ValidationError(
                f"Customer {name} must be at most {limit} characters",
                field=name,
                max_length=limit,
            )

    customer_type = snapshot.get("customer_type", CustomerType.INDIVIDUAL.value).upper()
    if customer_type not in {t.value for t in CustomerType}:
        raise errors.ValidationError("Unknown customer type", field="customer_type", customer_type=customer_type)
    snapshot["customer_type"] = customer_type

    return snapshot


def _recognized_voucher(voucher_code) -> str | None:
    # Unknown codes of any length count as no voucher
    if not voucher_code:
        return None
    code = str(voucher_code).strip().upper()
    return code if code in pricing_engine().vouchers else None


def checkout(user_id, items, customer, voucher_code=None) -> dict:
    """Place an order for ``user_id``. Returns ``{"order_id": ...}``.

    Raises ValidationError before any storage is touched; NotFound and
    InsufficientStock after a full rollback. InternalError when concurrent
    stock writers keep winning past the handler's retries.
    """
    if not user_id:
        raise errors.ValidationError("A user is required to check out", field="user_id")
    items = _validate_items(items)
    customer = _validate_customer(customer)

    try:
        order_id = current_domain.process(
            PlaceOrder(
                user_id=str(user_id),
                items=json.dumps(items),
                customer=json.dumps(customer),
                voucher_code=_recognized_voucher(voucher_code),
            ),
            asynchronous=False,
        )
    except ExpectedVersionError as exc:
        product_ids = sorted({item["product_id"] for item in items})
        logger.error("Checkout lost repeated stock conflicts", user_id=str(user_id), product_ids=product_ids)
        raise errors.InternalError(
            "Stock changed concurrently, please retry the checkout",
            product_ids=product_ids,
        ) from exc
    return {"order_id": order_id}
