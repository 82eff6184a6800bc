"""Read side of the Order aggregate: order views and invoice data.

Everything here is built from the snapshots stored on the order. Nothing is
recomputed from live product or category data.
"""

from protean.utils.globals import current_domain

from ordering.order.order import Order, allowed_next_statuses


def order_to_dict(order: Order) -> dict:
    totals = order.totals
    return {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "status": order.status,
        "return_status": order.return_status,
        "allowed_statuses": allowed_next_statuses(order.status),
        "customer": order.customer_dict(),
        "totals": {
            "subtotal": totals.subtotal,
            "voucher_code": totals.voucher_code,
            "voucher_discount": totals.voucher_discount,
            "final_subtotal": totals.final_subtotal,
            "total_vat": totals.total_vat,
            "total_amount": totals.total_amount,
        },
        "lines": [line.to_dict() for line in order.lines],
        "order_date": order.order_date,
        "paid_at": order.paid_at,
        "completed_at": order.completed_at,
        "cancelled_at": order.cancelled_at,
        "refunded_at": order.refunded_at,
    }


def get_order(order_id) -> dict:
    return order_to_dict(current_domain.repository_for(Order).by_id(order_id))


def list_orders_for_user(user_id) -> list[dict]:
    return [order_to_dict(order) for order in current_domain.repository_for(Order).for_user(user_id)]


def list_orders() -> list[dict]:
    """Admin listing of every order, newest first."""
    return [order_to_dict(order) for order in current_domain.repository_for(Order).newest_first()]


def get_invoice_data(order_id) -> dict:
    """The invoice snapshot for an order, exactly as captured at checkout."""
    order = current_domain.repository_for(Order).by_id(order_id)
    totals = order.totals
    customer = order.customer

    voucher = None
    if totals.voucher_code:
        voucher = {
            "code": totals.voucher_code,
            "discount": totals.voucher_discount,
            "type": totals.voucher_type or "discount",
        }

    return {
        "order_id": str(order.id),
        "order_date": order.order_date,
        "status": order.status,
        "customer": {
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "address": customer.address,
            "customer_type": customer.customer_type,
            "company_name": customer.company_name,
            "tax_code": customer.tax_code,
        },
        "items": [
            {
                "product_id": str(line.product_id),
                "name": line.product_name,
                "quantity": line.quantity,
                "price": line.unit_price,
                "vat_rate": line.tax_rate,
                "vat_amount": line.tax_amount,
                "total": line.line_total,
                "size": line.size,
                "color": line.color,
            }
            for line in order.lines
        ],
        "summary": {
            "subtotal": totals.subtotal,
            "voucher_discount": totals.voucher_discount,
            "final_subtotal": totals.final_subtotal,
            "total_vat": totals.total_vat,
            "total": totals.total_amount,
        },
        "voucher": voucher,
        "note": customer.note,
    }
