"""Sliding-window rate limiter kept in process memory."""

import asyncio
import math
import time
from collections import deque

from shared.ratelimit.port import RateLimitDecision, RateLimiter
from shared.settings import RateLimitPolicy


class InMemoryRateLimiter(RateLimiter):
    """Remembers request timestamps per (policy, key) pair.

    Rejected requests are not counted, so a caller that keeps retrying
    regains access once its oldest accepted request leaves the window.
    Pairs whose window holds no requests are dropped: on their next check,
    and by a sweep over all pairs at most every ``sweep_interval`` seconds.
    """

    def __init__(self, clock=time.monotonic, sweep_interval: float = 60.0):
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._hits: dict[tuple[str, str], tuple[float, deque[float]]] = {}
        self._last_sweep = clock()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._hits)

    async def check(self, key: str, policy: RateLimitPolicy) -> RateLimitDecision:
        now = self._clock()
        slot = (policy.name, key)
        async with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            hits = self._live_hits(slot, now)
            if policy.limit <= 0:
                retry_after = max(1, math.ceil(policy.window_seconds))
                return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

            if hits is not None and len(hits) >= policy.limit:
                retry_after = max(1, math.ceil(hits[0] + policy.window_seconds - now))
                return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

            if hits is None:
                hits = deque()
                self._hits[slot] = (policy.window_seconds, hits)
            hits.append(now)
            return RateLimitDecision(allowed=True, remaining=policy.limit - len(hits))

    def _live_hits(self, slot, now) -> deque[float] | None:
        """Hits of ``slot`` still inside its window; the slot is dropped when none are."""
        entry = self._hits.get(slot)
        if entry is None:
            return None
        window_seconds, hits = entry
        while hits and hits[0] <= now - window_seconds:
            hits.popleft()
        if not hits:
            del self._hits[slot]
            return None
        return hits

    def _sweep(self, now) -> None:
        for slot in list(self._hits):
            self._live_hits(slot, now)
        self._last_sweep = now

    def reset(self) -> None:
        self._hits.clear()
