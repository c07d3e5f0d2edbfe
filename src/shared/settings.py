"""Application settings read from the environment.

Protean infrastructure (databases, brokers, event store) is configured per
domain in ``domain.toml``. Everything the HTTP layer and the checkout
workflow need on top of that lives here.
"""

import os
from dataclasses import dataclass, field


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


@dataclass(frozen=True)
class RateLimitPolicy:
    """At most ``limit`` requests per ``window_seconds`` for one caller."""

    name: str
    limit: int
    window_seconds: float


def _default_policies() -> dict[str, RateLimitPolicy]:
    return {
        "CRITICAL_ENDPOINTS": RateLimitPolicy(
            name="CRITICAL_ENDPOINTS",
            limit=_env_int("STOREFRONT_RATE_CRITICAL", 10),
            window_seconds=60.0,
        ),
        "AUTHENTICATED_API": RateLimitPolicy(
            name="AUTHENTICATED_API",
            limit=_env_int("STOREFRONT_RATE_AUTHENTICATED", 60),
            window_seconds=60.0,
        ),
        "PUBLIC_API": RateLimitPolicy(
            name="PUBLIC_API",
            limit=_env_int("STOREFRONT_RATE_PUBLIC", 120),
            window_seconds=60.0,
        ),
    }


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    db_connect_timeout: float = 5.0
    transaction_timeout: float = 10.0
    cache_ttl: float = 120.0
    products_page_size: int = 10
    orders_page_size: int = 2
    max_cart_entries: int = 50
    support_email: str = "support@storefront.example"
    rate_limits: dict[str, RateLimitPolicy] = field(default_factory=_default_policies)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=(os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower(),
            db_connect_timeout=_env_float("STOREFRONT_DB_CONNECT_TIMEOUT", 5.0),
            transaction_timeout=_env_float("STOREFRONT_TRANSACTION_TIMEOUT", 10.0),
            cache_ttl=_env_float("STOREFRONT_CACHE_TTL", 120.0),
            products_page_size=_env_int("STOREFRONT_PRODUCTS_PAGE_SIZE", 10),
            orders_page_size=_env_int("STOREFRONT_ORDERS_PAGE_SIZE", 2),
            max_cart_entries=_env_int("STOREFRONT_MAX_CART_ENTRIES", 50),
            support_email=os.getenv("STOREFRONT_SUPPORT_EMAIL", "support@storefront.example"),
        )

    def policy(self, name: str) -> RateLimitPolicy:
        return self.rate_limits[name]
