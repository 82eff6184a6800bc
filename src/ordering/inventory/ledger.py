"""InventoryLedger — the only write path for ``Product.stock``.

The ledger works inside the caller's Unit of Work and never opens one of its
own. Each adjustment is a check-then-write on a single loaded Product; the
aggregate version is checked when the Unit of Work commits, so a concurrent
writer that loaded the same product earlier fails instead of overwriting.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product

logger = structlog.get_logger(__name__)


class InventoryLedger:
    def __init__(self):
        # Products already loaded in this unit of work. Repeated adjustments
        # to the same product must see each other.
        self._loaded = {}

    def _product(self, product_id):
        product_id = str(product_id)
        if product_id not in self._loaded:
            try:
                self._loaded[product_id] = current_domain.repository_for(Product).get(product_id)
            except ObjectNotFoundError:
                return None
        return self._loaded[product_id]

    def decrement(self, product_id, quantity: int) -> bool:
        """Withdraw ``quantity`` units if enough stock is on hand.

        Returns ``False`` (never raises) when stock is short or the product
        does not exist; the caller decides whether that is fatal.
        """
        product = self._product(product_id)
        if product is None:
            logger.warning("Stock decrement for unknown product", product_id=str(product_id), quantity=quantity)
            return False

        if not product.withdraw_stock(quantity):
            logger.info(
                "Stock decrement refused, insufficient stock",
                product_id=str(product_id),
                quantity=quantity,
                available=product.stock,
            )
            return False

        current_domain.repository_for(Product).add(product)
        logger.info("Stock decremented", product_id=str(product_id), quantity=quantity, remaining=product.stock)
        return True

    def increment(self, product_id, quantity: int, reason=None) -> bool:
        product = self._product(product_id)
        if product is None:
            logger.warning("Stock increment for unknown product", product_id=str(product_id), quantity=quantity)
            return False

        product.restore_stock(quantity, reason=reason)
        current_domain.repository_for(Product).add(product)
        logger.info("Stock restored", product_id=str(product_id), quantity=quantity, stock=product.stock)
        return True
