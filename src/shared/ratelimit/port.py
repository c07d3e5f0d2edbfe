"""Rate limiter port."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shared.settings import RateLimitPolicy


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0


class RateLimiter(ABC):
    @abstractmethod
    async def check(self, key: str, policy: RateLimitPolicy) -> RateLimitDecision:
        """Count one request for ``key`` under ``policy`` and decide whether it may proceed."""
        ...
