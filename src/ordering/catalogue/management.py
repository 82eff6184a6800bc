"""Catalogue upkeep — commands and handlers.

Only what seeding and repricing need: create a category, change its VAT
rate, add a product with its opening stock, reprice a product. After
creation, stock moves only through the InventoryLedger.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.catalogue.category import Category
from ordering.catalogue.product import Product
from ordering.domain import ordering


@ordering.command(part_of="Category")
class CreateCategory:
    name = String(required=True, max_length=100)
    tax_rate = Float(required=True, min_value=0.0, max_value=1.0)


@ordering.command(part_of="Category")
class ChangeCategoryTaxRate:
    category_id = Identifier(required=True)
    tax_rate = Float(required=True, min_value=0.0, max_value=1.0)


@ordering.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    category_id = Identifier(required=True)


@ordering.command(part_of="Product")
class RepriceProduct:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)


@ordering.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        category = Category.create(name=command.name, tax_rate=command.tax_rate)
        current_domain.repository_for(Category).add(category)
        return str(category.id)

    @handle(ChangeCategoryTaxRate)
    def change_tax_rate(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.change_tax_rate(command.tax_rate)
        repo.add(category)


@ordering.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        # Category must exist
        current_domain.repository_for(Category).get(command.category_id)

        product = Product.create(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            category_id=command.category_id,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(RepriceProduct)
    def reprice_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.reprice(command.price)
        repo.add(product)


def create_category(name, tax_rate) -> str:
    return current_domain.process(CreateCategory(name=name, tax_rate=tax_rate), asynchronous=False)


def change_category_tax_rate(category_id, tax_rate):
    current_domain.process(ChangeCategoryTaxRate(category_id=category_id, tax_rate=tax_rate), asynchronous=False)


def add_product(name, price, category_id, stock=0) -> str:
    return current_domain.process(
        AddProduct(name=name, price=price, stock=stock, category_id=category_id),
        asynchronous=False,
    )


def reprice_product(product_id, price):
    current_domain.process(RepriceProduct(product_id=product_id, price=price), asynchronous=False)
