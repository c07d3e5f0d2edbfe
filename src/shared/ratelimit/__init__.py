"""Rate limiting for the storefront API.

Policies (limit and window) come from ``Settings.rate_limits``; the limiter
instance is owned by the application and lives on ``app.state``.
"""

import os

from shared.ratelimit.port import RateLimitDecision, RateLimiter


def build_rate_limiter() -> RateLimiter:
    """Build the limiter selected by ``STOREFRONT_RATELIMIT_ADAPTER`` (default: memory)."""
    adapter = os.environ.get("STOREFRONT_RATELIMIT_ADAPTER", "memory")
    if adapter == "memory":
        from shared.ratelimit.memory_adapter import InMemoryRateLimiter

        return InMemoryRateLimiter()
    raise ValueError(f"Unknown rate limiter adapter: {adapter}")


__all__ = ["RateLimitDecision", "RateLimiter", "build_rate_limiter"]
