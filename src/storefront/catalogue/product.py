"""Product aggregate root with its image gallery."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
)

from storefront.domain import storefront


def to_price(value) -> float:
    """Round a price to cents, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@storefront.entity(part_of="Product")
class ProductImage:
    """Hosted image of a product; ``public_id`` is the id at the image host."""

    public_id: String(required=True, max_length=255)
    url: String(required=True, max_length=500)


@storefront.aggregate
class Product:
    """A product offered in the storefront.

    ``stock`` is the number of units that can still be ordered and ``sold``
    the number already ordered. Order placement moves units from one to the
    other through :meth:`reserve`.
    """

    name: String(required=True, max_length=100)
    description: String(required=True, max_length=2000)
    price: Float(required=True, min_value=0.0)
    stock: Integer(required=True, min_value=0)
    sold: Integer(default=0, min_value=0)
    category_id: Identifier(required=True)
    images: HasMany(ProductImage)
    is_active: Boolean(default=True)
    is_deleted: Boolean(default=False)
    deleted_at: DateTime()
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def stock_and_sold_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})
        if self.sold is not None and self.sold < 0:
            raise ValidationError({"sold": ["Sold count cannot be negative"]})

    @invariant.post
    def deleted_products_cannot_be_active(self):
        if self.is_deleted and self.is_active:
            raise ValidationError({"is_active": ["A deleted product cannot be active"]})

    @classmethod
    def create(cls, name, description, price, stock, category_id, images=None):
        from storefront.catalogue.events import ProductCreated

        now = datetime.now()
        product = cls(
            name=name.strip(),
            description=description.strip(),
            price=to_price(price),
            stock=stock,
            category_id=category_id,
            images=[ProductImage(public_id=image["public_id"], url=image["url"]) for image in images or []],
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                name=product.name,
                category_id=category_id,
                price=product.price,
                stock=stock,
                created_at=now,
            )
        )
        return product

    @property
    def is_available(self) -> bool:
        """Whether the product can be put in a cart or ordered at all."""
        return bool(self.is_active) and not self.is_deleted

    @property
    def image_url(self) -> str | None:
        return self.images[0].url if self.images else None

    def can_supply(self, quantity: int) -> bool:
        return self.is_available and self.stock >= quantity

    def reserve(self, quantity: int):
        """Take ``quantity`` units out of stock and count them as sold."""
        from storefront.catalogue.events import StockReserved

        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})
        if self.stock < quantity:
            raise ValidationError({"stock": [f"Only {self.stock} units available"]})

        with atomic_change(self):
            self.stock -= quantity
            self.sold += quantity
        self.updated_at = datetime.now()

        self.raise_(
            StockReserved(
                product_id=self.id,
                quantity=quantity,
                stock=self.stock,
                sold=self.sold,
            )
        )

    def restock(self, quantity: int):
        from storefront.catalogue.events import ProductRestocked

        if quantity <= 0:
            raise ValidationError({"quantity": ["Restock quantity must be a positive integer"]})

        self.stock += quantity
        self.updated_at = datetime.now()
        self.raise_(ProductRestocked(product_id=self.id, quantity=quantity, stock=self.stock))

    def update_details(self, name=None, description=None, price=None, category_id=None):
        from storefront.catalogue.events import ProductDetailsUpdated

        if name is not None:
            self.name = name.strip()
        if description is not None:
            self.description = description.strip()
        if price is not None:
            self.price = to_price(price)
        if category_id is not None:
            self.category_id = category_id
        self.updated_at = datetime.now()

        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                name=self.name,
                price=self.price,
                category_id=self.category_id,
            )
        )

    def deactivate(self):
        from storefront.catalogue.events import ProductDeactivated

        if not self.is_active:
            return
        self.is_active = False
        self.updated_at = datetime.now()
        self.raise_(ProductDeactivated(product_id=self.id))

    def delete(self):
        from storefront.catalogue.events import ProductDeleted

        if self.is_deleted:
            raise ValidationError({"is_deleted": ["Product is already deleted"]})

        now = datetime.now()
        with atomic_change(self):
            self.is_active = False
            self.is_deleted = True
            self.deleted_at = now
        self.updated_at = now
        self.raise_(ProductDeleted(product_id=self.id, deleted_at=now))
