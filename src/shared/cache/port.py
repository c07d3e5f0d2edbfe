"""Cache port: key/value store consulted and invalidated by the API layer."""

from abc import ABC, abstractmethod
from typing import Any


class Cache(ABC):
    """Abstract cache interface.

    Values are whatever JSON-ready structures the caller stores; the cache
    never derives data on its own.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the cached value or ``None`` on a miss or expired entry."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds (adapter default when omitted)."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop one key. Returns whether it was present."""
        ...

    @abstractmethod
    async def invalidate_pattern(self, pattern: str) -> int:
        """Drop every key matching the regular expression ``pattern``. Returns the count."""
        ...
