"""Authentication port: resolves the caller of a request."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from fastapi import Request


@dataclass(frozen=True)
class Caller:
    user_id: str
    email: str | None = None
    role: str = "user"


class Authenticator(ABC):
    @abstractmethod
    async def authenticate(self, request: Request) -> Caller | None:
        """Return the authenticated caller, or ``None`` when the request carries no identity."""
        ...
