"""FastAPI dependencies shared by every router.

Collaborators (settings, authenticator, rate limiter, write lock) are
created once by the application and read from ``app.state``.
"""

import asyncio

from fastapi import Depends, Request

from shared.auth import Caller
from shared.errors import AuthenticationError, PermissionDenied, RateLimitExceeded
from shared.logging import bind_caller, get_logger
from shared.settings import Settings

logger = get_logger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_write_lock(request: Request) -> asyncio.Lock:
    return request.app.state.write_lock


async def current_caller(request: Request) -> Caller:
    caller = await request.app.state.authenticator.authenticate(request)
    if caller is None:
        raise AuthenticationError()
    bind_caller(caller.user_id)
    return caller


async def optional_caller(request: Request) -> Caller | None:
    return await request.app.state.authenticator.authenticate(request)


def require_admin(caller: Caller = Depends(current_caller)) -> Caller:
    if caller.role != "admin":
        raise PermissionDenied("Admin access required")
    return caller


def _client_key(request: Request, caller: Caller | None) -> str:
    if caller is not None:
        return caller.email or caller.user_id
    return request.client.host if request.client else "anonymous"


def rate_limit(policy_name: str, prefix: str, message: str | None = None, authenticated: bool = True):
    """Dependency factory: count the request under ``policy_name`` and reject it when over the limit.

    With ``authenticated=True`` the dependency also requires a caller and
    returns it.
    """

    async def dependency(request: Request) -> Caller | None:
        caller = await current_caller(request) if authenticated else await optional_caller(request)
        policy = request.app.state.settings.policy(policy_name)
        decision = await request.app.state.rate_limiter.check(f"{prefix}:{_client_key(request, caller)}", policy)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                policy=policy_name,
                prefix=prefix,
                retry_after=decision.retry_after,
            )
            raise RateLimitExceeded(decision.retry_after, message)
        return caller

    return dependency
