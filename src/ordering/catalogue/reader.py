"""Read access to live product and category data."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.category import Category
from ordering.catalogue.product import Product
from ordering.errors import NotFound


@dataclass(frozen=True)
class ProductSnapshot:
    product_id: str
    name: str
    price: float
    stock: int
    tax_rate: float
    category_name: str | None = None


class CatalogReader:
    """Loads a product together with its category's current tax rate."""

    def product(self, product_id) -> ProductSnapshot:
        try:
            product = current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            raise NotFound("Product", product_id) from None

        tax_rate = 0.0
        category_name = None
        if product.category_id:
            try:
                category = current_domain.repository_for(Category).get(str(product.category_id))
            except ObjectNotFoundError:
                category = None
            if category is not None:
                tax_rate = category.tax_rate
                category_name = category.name

        return ProductSnapshot(
            product_id=str(product.id),
            name=product.name,
            price=product.price,
            stock=product.stock,
            tax_rate=tax_rate,
            category_name=category_name,
        )
