"""
User endpoints.

Registration and login are public.  Reading and updating a profile is
only allowed for the user the path names.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from ...core.auth_deps import require_path_user
from ...schemas.user import LoginRequest, LoginResponse, UserCreate, UserRead, UserUpdate
from ...services import UserService
from ..deps import body_fields, get_user_service

router = APIRouter()


@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserRead)
async def register_user(
    body: Optional[UserCreate] = None,
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Create an account.  The response never contains the password hash."""
    return await service.register(body_fields(body))


@router.post("/users/login", response_model=LoginResponse)
async def login(
    body: Optional[LoginRequest] = None,
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Exchange e-mail and password for ``{user, token}``.

    Missing fields answer 400, wrong credentials 401.
    """
    return await service.login(body_fields(body))


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(
    owner_id: int = Depends(require_path_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    return await service.get_user(owner_id)


@router.put("/users/{user_id}", response_model=UserRead)
async def update_user(
    owner_id: int = Depends(require_path_user),
    body: Optional[UserUpdate] = None,
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Partially update the profile.  A ``password`` key sets a new password."""
    return await service.update_user(owner_id, body_fields(body))
