"""In-process TTL cache.

Entries live in a dict guarded by an asyncio lock; expiry is checked lazily
on read and swept when the cache grows past ``max_entries``.
"""

import asyncio
import re
import time
from typing import Any

from shared.cache.port import Cache


class InMemoryCache(Cache):
    def __init__(self, name: str, default_ttl: float = 120.0, max_entries: int = 1000, clock=time.monotonic):
        self.name = name
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        async with self._lock:
            if len(self._entries) >= self.max_entries:
                self._sweep()
            if len(self._entries) >= self.max_entries:
                # Still full of live entries: evict the one closest to expiry
                oldest = min(self._entries, key=lambda k: self._entries[k][0])
                del self._entries[oldest]
            self._entries[key] = (self._clock() + (ttl if ttl is not None else self.default_ttl), value)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def invalidate_pattern(self, pattern: str) -> int:
        regex = re.compile(pattern)
        async with self._lock:
            doomed = [key for key in self._entries if regex.search(key)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def _sweep(self) -> None:
        now = self._clock()
        for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
