"""
Shared dependencies for the API routers.

The store lives on ``app.state.store`` and reaches the handlers only
through these dependencies, so tests can build an application around
any store they like.
"""

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Query, Request
from pydantic import BaseModel

from ..services import FinanceService, GamificationService, ResourceService, SocialService, UserService
from ..store import ResourceStore


def get_store(request: Request) -> ResourceStore:
    return request.app.state.store


def get_user_service(store: ResourceStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_resource_service(store: ResourceStore = Depends(get_store)) -> ResourceService:
    return ResourceService(store)


def get_gamification_service(store: ResourceStore = Depends(get_store)) -> GamificationService:
    return GamificationService(store)


def get_social_service(store: ResourceStore = Depends(get_store)) -> SocialService:
    return SocialService(store)


def get_finance_service(store: ResourceStore = Depends(get_store)) -> FinanceService:
    return FinanceService(store)


def body_fields(body: Optional[BaseModel]) -> Dict[str, Any]:
    """Keys the client actually sent.  A missing body counts as ``{}``."""
    if body is None:
        return {}
    return body.model_dump(exclude_unset=True)


def parse_limit(raw: Optional[str], default: int) -> int:
    """Positive integer from a query string, or ``default``."""
    if raw is not None and raw.isascii() and raw.isdigit() and int(raw) > 0:
        return int(raw)
    return default


def limit_param(default: int) -> Callable[..., int]:
    """Dependency reading ``?limit=`` with a per-route default."""

    def dependency(limit: Optional[str] = Query(None)) -> int:
        return parse_limit(limit, default)

    return dependency


def flag_param(name: str) -> Callable[..., bool]:
    """Dependency for ``?<name>=true`` style flags."""

    def dependency(request: Request) -> bool:
        return request.query_params.get(name) == "true"

    return dependency
