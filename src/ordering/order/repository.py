"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.errors import NotFound
from ordering.order.order import Order

# Upper bound for list reads
LIST_LIMIT = 1000


@ordering.repository(part_of=Order)
class OrderRepository:
    def by_id(self, order_id) -> Order:
        """Load an order or raise ``NotFound``."""
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            raise NotFound("Order", str(order_id)) from None

    def for_user(self, user_id, limit=LIST_LIMIT) -> list[Order]:
        """A user's orders, newest first."""
        return self._dao.query.filter(user_id=str(user_id)).order_by("-order_date").limit(limit).all().items

    def newest_first(self, limit=LIST_LIMIT) -> list[Order]:
        return self._dao.query.order_by("-order_date").limit(limit).all().items

    def settled(self, limit=LIST_LIMIT) -> list[Order]:
        """Orders that count towards VAT: paid or completed, never refunded."""
        orders = self._dao.query.filter(status__in=["PAID", "COMPLETED"]).limit(limit).all().items
        return [order for order in orders if order.refunded_at is None]
