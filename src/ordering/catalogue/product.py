"""Product aggregate — live price, stock and category reference.

``stock`` is never assigned directly by application code. The only writers
are ``withdraw_stock`` and ``restore_stock``, and the only caller of those is
the InventoryLedger, which runs them inside the caller's Unit of Work.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.catalogue.events import ProductRepriced, StockDecremented, StockRestored
from ordering.domain import ordering


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    category_id = Identifier(required=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, price, category_id, stock=0):
        now = datetime.now(UTC)
        return cls(
            name=name,
            price=price,
            stock=stock,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )

    def reprice(self, new_price):
        if new_price < 0:
            raise ValidationError({"price": ["Price must be 0 or greater"]})

        previous_price = self.price
        now = datetime.now(UTC)
        self.price = new_price
        self.updated_at = now

        self.raise_(
            ProductRepriced(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=new_price,
                changed_at=now,
            )
        )

    def withdraw_stock(self, quantity) -> bool:
        """Take ``quantity`` units out of stock if enough are on hand."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if self.stock < quantity:
            return False

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous - quantity
        self.updated_at = now

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                occurred_at=now,
            )
        )
        return True

    def restore_stock(self, quantity, reason=None):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous + quantity
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                reason=reason,
                occurred_at=now,
            )
        )
