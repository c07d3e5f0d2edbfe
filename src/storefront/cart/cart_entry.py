"""CartEntry aggregate: one product a customer intends to buy.

Each entry is its own aggregate so that order placement can consume exactly
the entries listed in an order request and leave the rest of the cart alone.
"""

from datetime import datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="CartEntry")
class ProductAddedToCart:
    __version__ = 1

    cart_entry_id: Identifier(required=True)
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    quantity: Integer(required=True)


@storefront.event(part_of="CartEntry")
class CartQuantityChanged:
    __version__ = 1

    cart_entry_id: Identifier(required=True)
    user_id: Identifier(required=True)
    quantity: Integer(required=True)


@storefront.aggregate
class CartEntry:
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    product_name: String(max_length=100)
    price: Float(min_value=0.0)
    quantity: Integer(required=True, min_value=1)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @classmethod
    def create(cls, user_id, product, quantity):
        now = datetime.now()
        entry = cls(
            user_id=user_id,
            product_id=product.id,
            product_name=product.name,
            price=product.price,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        entry.raise_(
            ProductAddedToCart(
                cart_entry_id=entry.id,
                user_id=user_id,
                product_id=product.id,
                quantity=quantity,
            )
        )
        return entry

    def belongs_to(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def change_quantity(self, quantity, stock=None):
        """Set a new quantity, refusing more units than ``stock`` when given."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if stock is not None and quantity > stock:
            raise ValidationError({"quantity": [f"Only {stock} units available"]})

        self.quantity = quantity
        self.updated_at = datetime.now()
        self.raise_(CartQuantityChanged(cart_entry_id=self.id, user_id=self.user_id, quantity=quantity))

    def refresh_snapshot(self, product):
        self.product_name = product.name
        self.price = product.price
