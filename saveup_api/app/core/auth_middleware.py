"""
Bearer-token authentication for the SaveUp API.

Authentication runs as Starlette ``AuthenticationMiddleware`` so that
it happens before routing: a non-public request without a valid token
is answered with 401 before any handler (and therefore any store
call) runs, even when the path matches no route.
"""

import logging
from typing import Optional, Tuple

from starlette.authentication import AuthCredentials, AuthenticationBackend, BaseUser
from starlette.authentication import AuthenticationError as StarletteAuthenticationError
from starlette.requests import HTTPConnection
from starlette.responses import JSONResponse

from .access_control import authenticate_authorization, is_public_endpoint
from .errors import AuthenticationError
from ..schemas.auth import Principal
from ..schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


class PrincipalUser(BaseUser):
    """Starlette user wrapping the authenticated ``Principal``."""

    def __init__(self, principal: Principal):
        self.principal = principal

    @property
    def identity(self) -> str:
        return str(self.principal.user_id)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.principal.username


class BearerAuthBackend(AuthenticationBackend):
    """Authenticate every non-public request from its bearer token."""

    def __init__(self, secret: Optional[str] = None):
        self.secret = secret

    async def authenticate(self, conn: HTTPConnection) -> Optional[Tuple[AuthCredentials, BaseUser]]:
        if conn.scope["type"] != "http":
            return None
        method = conn.scope.get("method", "GET")
        if method == "OPTIONS" or is_public_endpoint(method, conn.url.path):
            return None
        principal = authenticate_authorization(conn.headers.get("Authorization"), secret=self.secret)
        logger.debug("Authenticated user %s for %s %s", principal.user_id, method, conn.url.path)
        return AuthCredentials(["authenticated"]), PrincipalUser(principal)


def on_auth_error(conn: HTTPConnection, exc: StarletteAuthenticationError) -> JSONResponse:
    """Render authentication failures as 401 ``ErrorResponse`` bodies."""
    logger.warning("Authentication failed for %s %s: %s", conn.scope.get("method"), conn.url.path, exc)
    if isinstance(exc, AuthenticationError):
        body = ErrorResponse(error=exc.message, code=exc.code)
    else:
        body = ErrorResponse(error=str(exc) or "Authentication required", code=AuthenticationError.code)
    return JSONResponse(status_code=401, content=body.model_dump())
