"""Header based authenticator.

Session handling happens in front of this service: the gateway forwards the
authenticated user as ``X-User-Id`` (plus optional ``X-User-Email`` and
``X-User-Role``).
"""

from fastapi import Request

from shared.auth.port import Authenticator, Caller

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"
USER_ROLE_HEADER = "X-User-Role"


class HeaderAuthenticator(Authenticator):
    async def authenticate(self, request: Request) -> Caller | None:
        user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
        if not user_id:
            return None
        return Caller(
            user_id=user_id,
            email=request.headers.get(USER_EMAIL_HEADER) or None,
            role=request.headers.get(USER_ROLE_HEADER) or "user",
        )
