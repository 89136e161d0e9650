"""
Main entrypoint for the SaveUp API.

This module assembles the FastAPI application: logging, the store,
authentication and CORS middleware, the API routers and the error
handlers.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``, e.g.::

    uvicorn saveup_api.app.main:app --reload

Middleware order matters: CORS is the outermost layer so preflight
requests (always answered 200) and error responses carry CORS headers;
authentication runs inside it but still before routing, so a request
without a valid token is rejected before any handler (or store) is
reached.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.authentication import AuthenticationMiddleware

from .api.router import router as api_router
from .core.auth_middleware import BearerAuthBackend, on_auth_error
from .core.config import settings
from .core.cors import PreflightCORSMiddleware
from .core.errors import InternalError, NotFoundError, SaveUpError, ValidationError
from .core.logging_config import setup_logging
from .schemas.error import ErrorResponse
from .schemas.health import HealthResponse
from .store import ResourceStore, build_store

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message, code=code).model_dump())


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in {"body", "path", "query"})
    return f"Invalid value for '{location}': {first.get('msg')}" if location else str(first.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to an ``ErrorResponse`` body."""

    @app.exception_handler(SaveUpError)
    async def saveup_error_handler(request: Request, exc: SaveUpError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.message, exc.code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # 404/405 from the router mean no route matches this method and path.
        if exc.status_code in (404, 405):
            return _error_response(404, "Endpoint not found", NotFoundError.code)
        return _error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, _validation_message(exc), ValidationError.code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = InternalError()
        return _error_response(error.status_code, error.message, error.code)


def create_app(store: Optional[ResourceStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store : Optional[ResourceStore]
        Store to serve requests from.  When omitted the store is built
        from ``settings.storage_backend``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that the setup below
    # can log.
    setup_logging(settings.log_level, settings.log_file or None)
    if settings.uses_default_secret:
        logger.warning("JWT_SECRET is not set; tokens are signed with the default development secret")

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.state.store = store if store is not None else build_store(settings)

    app.add_middleware(AuthenticationMiddleware, backend=BearerAuthBackend(), on_error=on_auth_error)
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", storage=app.state.store.name)

    @app.options("/{path:path}", include_in_schema=False)
    async def options_handler(path: str) -> Response:
        return Response(status_code=200)

    # Register startup event to prepare the store (applies migrations
    # for the SQLite strategy).
    @app.on_event("startup")
    async def startup_event() -> None:
        app.state.store.initialize()
        logger.info("Store ready: %s", app.state.store.name)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
