"""Request correlation ids.

Each request gets an id that is echoed in the JSON body (``requestId``),
in the ``X-Request-Id`` response header and in every log line emitted while
the request is being handled.
"""

import secrets
import string
import time

from fastapi import Request

from shared.logging import bind_request, clear_context

REQUEST_ID_HEADER = "X-Request-Id"

_ALPHABET = string.ascii_lowercase + string.digits


def new_request_id(prefix: str = "req") -> str:
    """``<prefix>-<epoch millis>-<5 random base36 chars>``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(5))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def _prefix_for(path: str) -> str:
    if path.startswith("/orders"):
        return "order"
    if path.startswith("/cart"):
        return "cart"
    return "req"


async def request_id_middleware(request: Request, call_next):
    """Attach a request id to the request, the log context and the response."""
    request_id = new_request_id(_prefix_for(request.url.path))
    request.state.request_id = request_id
    bind_request(request_id, route=request.url.path, method=request.method)
    try:
        response = await call_next(request)
    finally:
        clear_context()
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
