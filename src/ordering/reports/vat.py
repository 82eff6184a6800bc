"""VAT report — tax collected on settled orders.

Counts orders that are PAID or COMPLETED and were never refunded. Amounts
come from the per-line tax snapshots, grouped by the month the order was
paid and by the category recorded on each line.
"""

from collections import defaultdict

from protean.utils.globals import current_domain

from ordering.order.order import Order, as_utc
from ordering.pricing import round2

UNCATEGORIZED = "Uncategorized"


def vat_report() -> dict:
    orders = current_domain.repository_for(Order).settled()

    total = 0.0
    by_month = defaultdict(float)
    by_category = defaultdict(float)

    for order in orders:
        month = as_utc(order.paid_at or order.order_date).strftime("%Y-%m")
        for line in order.lines:
            total += line.tax_amount
            by_month[month] += line.tax_amount
            by_category[line.category_name or UNCATEGORIZED] += line.tax_amount

    return {
        "total_vat": round2(total),
        "order_count": len(orders),
        "by_month": [{"month": month, "total_vat": round2(vat)} for month, vat in sorted(by_month.items())],
        "by_category": [
            {"category": category, "total_vat": round2(vat)}
            for category, vat in sorted(by_category.items(), key=lambda item: (-item[1], item[0]))
        ],
    }
