"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared
across users. State tracks ids returned by creation endpoints so
follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for one simulated shopper."""

    headers: dict = field(default_factory=dict)
    product_ids: list[str] = field(default_factory=list)
    cart: list[dict] = field(default_factory=list)
    address_id: str | None = None
    order_numbers: list[str] = field(default_factory=list)


@dataclass
class CatalogueState:
    """Tracks state for a simulated catalogue administrator."""

    headers: dict = field(default_factory=dict)
    category_ids: list[str] = field(default_factory=list)
    product_ids: list[str] = field(default_factory=list)
