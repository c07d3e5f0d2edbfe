"""Cache adapters for the storefront API.

The application owns one ``Caches`` bundle (built at startup and kept on
``app.state``) with a namespace per kind of data: product listings and
per-user carts.
"""

import os
from dataclasses import dataclass
from urllib.parse import urlencode

from shared.cache.port import Cache

PRODUCTS_PATTERN = r"^products:"
CART_PATTERN = r"^cart:"


@dataclass
class Caches:
    products: Cache
    cart: Cache


def cache_key(prefix: str, params: dict | None = None) -> str:
    """Deterministic key: ``prefix:k1=v1&k2=v2`` with keys sorted and empty values dropped."""
    if not params:
        return f"{prefix}:"
    cleaned = sorted((str(k), str(v)) for k, v in params.items() if v not in (None, ""))
    return f"{prefix}:{urlencode(cleaned)}"


def build_caches(default_ttl: float = 120.0) -> Caches:
    """Build the cache bundle selected by ``STOREFRONT_CACHE_ADAPTER`` (default: memory)."""
    adapter = os.environ.get("STOREFRONT_CACHE_ADAPTER", "memory")
    if adapter == "memory":
        from shared.cache.memory_adapter import InMemoryCache

        return Caches(
            products=InMemoryCache("products", default_ttl=default_ttl),
            cart=InMemoryCache("cart", default_ttl=default_ttl),
        )
    raise ValueError(f"Unknown cache adapter: {adapter}")


__all__ = ["CART_PATTERN", "PRODUCTS_PATTERN", "Cache", "Caches", "build_caches", "cache_key"]
