"""
Error taxonomy shared by the store, services and HTTP layer.

Every error the API reports deliberately derives from ``SaveUpError``
and carries the HTTP status and machine-readable code it maps to.
Handlers registered in ``main.create_app`` turn these exceptions into
``ErrorResponse`` bodies.  Anything that is not a ``SaveUpError`` is
reported as a generic 500 without leaking its message.
"""

from starlette.authentication import AuthenticationError as StarletteAuthenticationError


class SaveUpError(Exception):
    """Base class for errors with a well-defined HTTP mapping."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class AuthenticationError(SaveUpError, StarletteAuthenticationError):
    """Missing, malformed, invalid or expired credential."""

    status_code = 401
    code = "AUTHENTICATION_ERROR"


class MissingCredentialError(AuthenticationError):
    def __init__(self, message: str = "Authentication required. Please provide a valid Bearer token."):
        super().__init__(message)


class InvalidCredentialError(AuthenticationError):
    def __init__(self, message: str = "Invalid or expired token. Please login again."):
        super().__init__(message)


class AuthorizationError(SaveUpError):
    """Authenticated principal may not touch the addressed resource."""

    status_code = 403
    code = "AUTHORIZATION_ERROR"


class ValidationError(SaveUpError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(SaveUpError):
    status_code = 404
    code = "NOT_FOUND"


class InternalError(SaveUpError):
    status_code = 500
    code = "INTERNAL_ERROR"
