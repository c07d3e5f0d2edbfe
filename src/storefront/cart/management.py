"""Cart management: commands and handler.

Ownership is checked here: a caller can only touch their own entries.
"""

from enum import Enum

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from shared.errors import NotFound, PermissionDenied
from storefront.cart.cart_entry import CartEntry
from storefront.catalogue.product import Product
from storefront.domain import storefront


class QuantityChange(Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


@storefront.command(part_of="CartEntry")
class AddToCart:
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    quantity: Integer(default=1, min_value=1)


@storefront.command(part_of="CartEntry")
class ChangeCartQuantity:
    user_id: Identifier(required=True)
    cart_entry_id: Identifier(required=True)
    change: String(required=True, choices=QuantityChange)


@storefront.command(part_of="CartEntry")
class RemoveFromCart:
    user_id: Identifier(required=True)
    cart_entry_id: Identifier(required=True)


def _available_product(product_id) -> Product:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFound("Product not found") from None
    if not product.is_available:
        raise ValidationError({"product_id": ["Product is no longer available"]})
    return product


def _owned_entry(cart_entry_id, user_id) -> CartEntry:
    try:
        entry = current_domain.repository_for(CartEntry).get(cart_entry_id)
    except ObjectNotFoundError:
        raise NotFound("Cart item not found") from None
    if not entry.belongs_to(user_id):
        raise PermissionDenied()
    return entry


@storefront.command_handler(part_of=CartEntry)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = _available_product(command.product_id)
        repo = current_domain.repository_for(CartEntry)

        existing = repo._dao.query.filter(user_id=command.user_id, product_id=command.product_id).all().items
        if existing:
            entry = existing[0]
            entry.change_quantity(entry.quantity + command.quantity, stock=product.stock)
            entry.refresh_snapshot(product)
        else:
            if command.quantity > product.stock:
                raise ValidationError({"quantity": [f"Only {product.stock} units available"]})
            entry = CartEntry.create(user_id=command.user_id, product=product, quantity=command.quantity)

        repo.add(entry)
        return str(entry.id)

    @handle(ChangeCartQuantity)
    def change_quantity(self, command):
        repo = current_domain.repository_for(CartEntry)
        entry = _owned_entry(command.cart_entry_id, command.user_id)

        if command.change == QuantityChange.DECREASE.value:
            if entry.quantity <= 1:
                repo._dao.delete(entry)
                return None
            entry.change_quantity(entry.quantity - 1)
        else:
            product = _available_product(entry.product_id)
            entry.change_quantity(entry.quantity + 1, stock=product.stock)

        repo.add(entry)
        return str(entry.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        entry = _owned_entry(command.cart_entry_id, command.user_id)
        current_domain.repository_for(CartEntry)._dao.delete(entry)
