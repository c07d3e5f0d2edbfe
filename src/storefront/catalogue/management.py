"""Catalogue management: commands and handlers for categories and products."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=50)


@storefront.command(part_of="Category")
class DeactivateCategory:
    category_id: Identifier(required=True)


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=100)
    description: String(required=True, max_length=2000)
    price: Float(required=True, min_value=0.0)
    stock: Integer(required=True, min_value=0)
    category_id: Identifier(required=True)
    images: Text()


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    name: String(max_length=100)
    description: String(max_length=2000)
    price: Float(min_value=0.0)
    category_id: Identifier()


@storefront.command(part_of="Product")
class RestockProduct:
    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


def _active_category(category_id):
    category = current_domain.repository_for(Category).get(category_id)
    if not category.is_active:
        raise ValidationError({"category_id": ["Category is not active"]})
    return category


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        name = command.name.strip()
        existing = repo._dao.query.filter(name__iexact=name).all().items
        if existing:
            raise ValidationError({"name": [f"Category '{name}' already exists"]})

        category = Category.create(name=name)
        repo.add(category)
        return str(category.id)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        repo.add(category)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        _active_category(command.category_id)

        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            stock=command.stock,
            category_id=command.category_id,
            images=json.loads(command.images) if command.images else None,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        if command.category_id:
            _active_category(command.category_id)

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            category_id=command.category_id,
        )
        repo.add(product)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restock(command.quantity)
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.delete()
        repo.add(product)
