"""Cart view: the caller's entries joined with live product data."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from shared.logging import get_logger
from storefront.cart.cart_entry import CartEntry
from storefront.catalogue.product import Product

logger = get_logger(__name__)


def _live_product(product_id) -> Product | None:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return None


def cart_view(user_id: str, max_entries: int = 50) -> dict:
    """Build ``{cartCount, cartTotal, cart}`` for ``user_id``.

    Entries whose product is gone, inactive or out of stock are hidden.
    Quantities above the current stock are lowered to the stock and the
    correction is saved.
    """
    repo = current_domain.repository_for(CartEntry)
    entries = repo._dao.query.filter(user_id=user_id).order_by("created_at").all().items

    visible = []
    for entry in entries:
        product = _live_product(entry.product_id)
        if product is None or not product.is_available or product.stock <= 0:
            continue
        visible.append((entry, product))

    if len(visible) > max_entries:
        logger.warning("Cart size exceeds maximum limit", user_id=user_id, cart_size=len(visible), limit=max_entries)
        visible = visible[:max_entries]

    adjusted = 0
    for entry, product in visible:
        if entry.quantity > product.stock:
            entry.change_quantity(product.stock)
            repo.add(entry)
            adjusted += 1
    if adjusted:
        logger.info("Adjusted cart quantities to match available stock", user_id=user_id, item_count=adjusted)

    cart = [
        {
            "id": str(entry.id),
            "productId": str(product.id),
            "productName": product.name,
            "price": product.price,
            "quantity": entry.quantity,
            "stock": product.stock,
            "subtotal": round(entry.quantity * product.price, 2),
            "imageUrl": product.image_url or "",
        }
        for entry, product in visible
    ]
    return {
        "cartCount": len(cart),
        "cartTotal": round(sum(item["subtotal"] for item in cart), 2),
        "cart": cart,
    }
