"""Storefront bounded context: catalogue, cart, orders and checkout.

Order placement reserves stock for every line item inside one unit of work
and either commits the order (consuming the cart entries) or aborts with the
list of unavailable products.
"""

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
