"""Domain events for catalogue records and stock movements."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Category")
class CategoryTaxRateChanged:
    """A category's VAT rate changed. Existing order lines keep their snapshot."""

    __version__ = 1

    category_id = Identifier(required=True)
    previous_rate = Float(required=True)
    new_rate = Float(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Product")
class ProductRepriced:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockDecremented:
    """Stock was withdrawn for a checkout."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    occurred_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockRestored:
    """Stock was put back, e.g. on return approval."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    reason = String(max_length=100)
    occurred_at = DateTime(required=True)
