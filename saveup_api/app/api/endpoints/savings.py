"""
Savings endpoints: transactions, savings challenges, the activity feed
and badges.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status

from ...core.auth_deps import get_current_principal, require_path_user
from ...schemas.actions import BadgeUpdate, SuccessResponse
from ...schemas.auth import Principal
from ...schemas.resources import (
    ActivityCreate,
    ActivityRead,
    BadgeRead,
    ChallengeCreate,
    ChallengeRead,
    ChallengeUpdate,
    TransactionCreate,
    TransactionRead,
)
from ...services import GamificationService, ResourceService
from ..deps import body_fields, get_gamification_service, get_resource_service, limit_param

router = APIRouter()


@router.post("/transactions", status_code=status.HTTP_201_CREATED, response_model=TransactionRead)
async def create_transaction(
    body: Optional[TransactionCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("transactions", body_fields(body), principal.user_id)


@router.get("/users/{user_id}/transactions", response_model=List[TransactionRead])
async def list_transactions(
    owner_id: int = Depends(require_path_user),
    limit: int = Depends(limit_param(20)),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    """Most recent transactions first, 20 unless ``?limit=`` says otherwise."""
    return await service.list_for_owner("transactions", owner_id, limit=limit)


@router.post("/challenges", status_code=status.HTTP_201_CREATED, response_model=ChallengeRead)
async def create_challenge(
    body: Optional[ChallengeCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("challenges", body_fields(body), principal.user_id)


@router.get("/users/{user_id}/challenges", response_model=List[ChallengeRead])
async def list_challenges(
    owner_id: int = Depends(require_path_user),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("challenges", owner_id)


@router.get("/challenges/{challenge_id}", response_model=ChallengeRead)
async def get_challenge(
    challenge_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.get_owned("challenges", challenge_id, principal, "Challenge")


@router.put("/challenges/{challenge_id}", response_model=ChallengeRead)
async def update_challenge(
    challenge_id: int,
    body: Optional[ChallengeUpdate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.update_owned("challenges", challenge_id, body_fields(body), principal, "Challenge")


@router.post("/activities", status_code=status.HTTP_201_CREATED, response_model=ActivityRead)
async def create_activity(
    body: Optional[ActivityCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("activities", body_fields(body), principal.user_id)


@router.get("/users/{user_id}/activities", response_model=List[ActivityRead])
async def list_activities(
    owner_id: int = Depends(require_path_user),
    limit: int = Depends(limit_param(10)),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("activities", owner_id, limit=limit)


@router.get("/users/{user_id}/badges", response_model=List[BadgeRead])
async def list_badges(
    owner_id: int = Depends(require_path_user),
    service: GamificationService = Depends(get_gamification_service),
) -> List[Dict[str, Any]]:
    return await service.list_badges(owner_id)


@router.put("/users/{user_id}/badges/{badge_id}", response_model=SuccessResponse)
async def update_badge(
    badge_id: str,
    owner_id: int = Depends(require_path_user),
    body: Optional[BadgeUpdate] = None,
    service: GamificationService = Depends(get_gamification_service),
) -> Dict[str, bool]:
    """Set ``earned`` on one of the user's badges.  Always ``{success: true}``."""
    body = body or BadgeUpdate()
    return await service.set_badge_earned(owner_id, badge_id, body.earned)
