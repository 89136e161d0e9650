"""Authentication dependencies for FastAPI endpoints"""
from fastapi import Depends, Request

from .access_control import authorize_path_user
from .errors import MissingCredentialError
from ..schemas.auth import Principal


def get_current_principal(request: Request) -> Principal:
    """Return the principal attached by ``BearerAuthBackend``.

    Public routes are not authenticated by the middleware, so a handler
    that needs an identity on such a route still fails with 401.
    """
    user = request.user
    principal = getattr(user, "principal", None)
    if not getattr(user, "is_authenticated", False) or principal is None:
        raise MissingCredentialError()
    return principal


def require_path_user(user_id: str, principal: Principal = Depends(get_current_principal)) -> int:
    """Authorize ``/users/{user_id}/...`` routes and return the user id."""
    return authorize_path_user(principal, user_id)
