"""Domain events for the Category and Product aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryCreated:
    """A new category was added to the catalogue."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)


@storefront.event(part_of="Category")
class CategoryDeactivated:
    __version__ = 1

    category_id: Identifier(required=True)


@storefront.event(part_of="Product")
class ProductCreated:
    """A product was listed with its initial stock."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    category_id: Identifier(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    price: Float(required=True)
    category_id: Identifier(required=True)


@storefront.event(part_of="Product")
class ProductRestocked:
    """Units were added to a product's stock."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    stock: Integer(required=True)


@storefront.event(part_of="Product")
class StockReserved:
    """Units were taken out of stock for an order being placed."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    stock: Integer(required=True)
    sold: Integer(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id: Identifier(required=True)


@storefront.event(part_of="Product")
class ProductDeleted:
    """A product was soft deleted; it stays stored but is never offered again."""

    __version__ = 1

    product_id: Identifier(required=True)
    deleted_at: DateTime(required=True)
