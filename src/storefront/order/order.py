"""Order aggregate: the record of one successful checkout.

An order is created exactly once, inside the unit of work that reserved the
stock for all of its items, and is not modified by the checkout workflow
afterwards.
"""

import secrets
import string
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront

_ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


class OrderStatus(Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


def generate_order_number(now: datetime | None = None) -> str:
    """``ORD-<YYYYMMDD>-<6 uppercase alphanumerics>``."""
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(_ORDER_NUMBER_ALPHABET) for _ in range(6))
    return f"ORD-{now:%Y%m%d}-{suffix}"


@storefront.value_object(part_of="Order")
class PaymentInfo:
    """Payment details as declared by the client at checkout."""

    amount_paid: Float(required=True, min_value=0.0)
    type_payment: String(required=True, max_length=50)
    account_number: String(required=True, max_length=50)
    account_name: String(required=True, max_length=100)
    payment_date: DateTime()


@storefront.entity(part_of="Order")
class OrderItem:
    """Snapshot of a product as it was ordered."""

    product_id: Identifier(required=True)
    name: String(required=True, max_length=100)
    quantity: Integer(required=True, min_value=1)
    image: String(max_length=500)
    price: Float(required=True, min_value=0.0)
    category: String(max_length=50)

    @property
    def subtotal(self) -> float:
        return round(self.quantity * self.price, 2)


@storefront.aggregate
class Order:
    order_number: String(required=True, max_length=30)
    user_id: Identifier(required=True)
    items: HasMany(OrderItem)
    payment_info: ValueObject(PaymentInfo)
    shipping_info: Identifier()
    explanation: String(max_length=500)
    items_total: Float(default=0.0, min_value=0.0)
    total_amount: Float(required=True, min_value=0.0)
    order_status: String(choices=OrderStatus, default=OrderStatus.PROCESSING.value)
    payment_status: String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @classmethod
    def place(cls, user_id, items, payment_info, total_amount, shipping_info=None, explanation=None):
        """Create an order from reserved line items.

        ``items`` are dicts with ``product_id``, ``name``, ``quantity``,
        ``image``, ``price`` and ``category``.
        """
        from storefront.order.events import OrderPlaced

        now = datetime.now()
        order_items = [OrderItem(**item) for item in items]
        items_total = round(sum(item.subtotal for item in order_items), 2)
        payment_status = (
            PaymentStatus.PAID.value if payment_info.amount_paid >= total_amount else PaymentStatus.UNPAID.value
        )

        order = cls(
            order_number=generate_order_number(),
            user_id=user_id,
            items=order_items,
            payment_info=payment_info,
            shipping_info=shipping_info,
            explanation=explanation,
            items_total=items_total,
            total_amount=round(total_amount, 2),
            payment_status=payment_status,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                user_id=user_id,
                total_amount=order.total_amount,
                items_total=items_total,
                item_count=len(order_items),
                placed_at=now,
            )
        )
        return order

    @property
    def item_count(self) -> int:
        return len(self.items)
