"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was committed together with the stock it reserved."""

    __version__ = 1

    order_id: Identifier(required=True)
    order_number: String(required=True)
    user_id: Identifier(required=True)
    total_amount: Float(required=True)
    items_total: Float(required=True)
    item_count: Integer(required=True)
    placed_at: DateTime(required=True)
