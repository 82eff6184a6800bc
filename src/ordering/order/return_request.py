"""ReturnRequest aggregate — a customer's append-only request to return an order.

At most one request per order is ever active. That is gated by
``Order.return_status``, not by a uniqueness constraint here.
"""

import json

from protean.fields import DateTime, Identifier, Text

from ordering.domain import ordering


@ordering.aggregate
class ReturnRequest:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = Text(required=True)
    media = Text()  # JSON: list of storage references
    created_at = DateTime(required=True)

    @classmethod
    def create(cls, request_id, order_id, user_id, reason, media, created_at):
        return cls(
            id=str(request_id),
            order_id=str(order_id),
            user_id=str(user_id),
            reason=reason,
            media=json.dumps(list(media)),
            created_at=created_at,
        )

    @property
    def media_refs(self) -> list[str]:
        return json.loads(self.media) if self.media else []


@ordering.repository(part_of=ReturnRequest)
class ReturnRequestRepository:
    def newest_first(self, limit=1000) -> list[ReturnRequest]:
        return self._dao.query.order_by("-created_at").limit(limit).all().items

    def for_order(self, order_id) -> list[ReturnRequest]:
        return self._dao.query.filter(order_id=str(order_id)).order_by("-created_at").all().items
