"""
Access control primitives.

Authentication turns an ``Authorization`` header into a ``Principal``.
Authorization comes in two flavours:

* path identity: routes of the form ``/api/users/{userId}/...`` compare
  the principal with the user id embedded in the path;
* resource ownership: routes addressing a resource by its own id
  (``/api/portfolios/{id}``) load the resource first and compare the
  principal with the stored owner.

A fixed allow-list of ``{method, path}`` pairs bypasses authentication
altogether.
"""

from typing import FrozenSet, Optional, Tuple

from .errors import AuthorizationError, InvalidCredentialError, MissingCredentialError, ValidationError
from .security import decode_access_token
from ..schemas.auth import Principal

PUBLIC_ENDPOINTS: FrozenSet[Tuple[str, str]] = frozenset(
    {
        ("POST", "/api/users"),
        ("POST", "/api/users/login"),
        ("GET", "/api/achievements"),
        ("GET", "/api/rewards"),
        ("GET", "/api/education/modules"),
        ("GET", "/api/seasonal-challenges"),
        ("GET", "/api/teams"),
        ("GET", "/api/communities"),
        ("GET", "/api/group-goals"),
        ("GET", "/health"),
    }
)

BEARER_PREFIX = "Bearer "


def is_public_endpoint(method: str, path: str) -> bool:
    """Exact match of ``method``/``path`` against the public allow-list."""
    return (method.upper(), path) in PUBLIC_ENDPOINTS


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token part of a ``Bearer <token>`` header.

    Raises ``MissingCredentialError`` when the header is absent, uses
    another scheme or carries an empty token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingCredentialError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingCredentialError()
    return token


def authenticate_authorization(authorization: Optional[str], secret: Optional[str] = None) -> Principal:
    """Authenticate an ``Authorization`` header value."""
    token = extract_bearer_token(authorization)
    principal = decode_access_token(token, secret=secret)
    if principal is None:
        raise InvalidCredentialError()
    return principal


def authorize_path_user(principal: Principal, raw_user_id: str) -> int:
    """Check that the user id embedded in the path is the principal's.

    Returns the parsed user id.  A segment that is not a base-10 integer
    is a ``ValidationError`` (400), a different user an
    ``AuthorizationError`` (403).
    """
    raw = str(raw_user_id)
    if not (raw.isascii() and raw.isdigit()):
        raise ValidationError("Invalid user ID in path.")
    path_user_id = int(raw)
    if principal.user_id != path_user_id:
        raise AuthorizationError("Access denied. You can only access your own data.")
    return path_user_id


def authorize_ownership(principal: Principal, owner_user_id: Optional[int]) -> None:
    """Check that the principal owns a resource already loaded by the caller."""
    if owner_user_id is None or principal.user_id != owner_user_id:
        raise AuthorizationError("Access denied. You can only modify your own resources.")
