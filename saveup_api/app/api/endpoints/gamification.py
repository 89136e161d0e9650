"""
Gamification endpoints: streaks, seasonal challenges, achievements and
the reward store.

The seasonal challenge, achievement and reward catalogues can be read
without a token.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...core.auth_deps import get_current_principal, require_path_user
from ...schemas.actions import AchievementAward, ProgressUpdate, RewardRedeem
from ...schemas.auth import Principal
from ...schemas.resources import (
    AchievementRead,
    ChallengeParticipantRead,
    RewardRead,
    SeasonalChallengeCreate,
    SeasonalChallengeRead,
    StreakRead,
    StreakUpdate,
    UserAchievementRead,
    UserRewardRead,
)
from ...services import GamificationService, ResourceService
from ..deps import body_fields, flag_param, get_gamification_service, get_resource_service

router = APIRouter()


# --- Streaks ------------------------------------------------------------


@router.get("/users/{user_id}/streaks", response_model=List[StreakRead])
async def list_streaks(
    owner_id: int = Depends(require_path_user),
    service: GamificationService = Depends(get_gamification_service),
) -> List[Dict[str, Any]]:
    return await service.list_streaks(owner_id)


@router.put("/users/{user_id}/streaks/{streak_type}", response_model=StreakRead)
async def update_streak(
    streak_type: str,
    owner_id: int = Depends(require_path_user),
    body: Optional[StreakUpdate] = None,
    service: GamificationService = Depends(get_gamification_service),
) -> Dict[str, Any]:
    """Create or update the user's streak of the given type."""
    return await service.upsert_streak(owner_id, streak_type, body_fields(body))


# --- Seasonal challenges ------------------------------------------------


@router.post("/seasonal-challenges", status_code=status.HTTP_201_CREATED, response_model=SeasonalChallengeRead)
async def create_seasonal_challenge(
    body: Optional[SeasonalChallengeCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: GamificationService = Depends(get_gamification_service),
) -> Dict[str, Any]:
    return await service.create_seasonal_challenge(body_fields(body), principal.user_id)


@router.get("/seasonal-challenges", response_model=List[SeasonalChallengeRead])
async def list_seasonal_challenges(
    active_only: bool = Depends(flag_param("active")),
    service: GamificationService = Depends(get_gamification_service),
) -> List[Dict[str, Any]]:
    """All seasonal challenges, or only active ones with ``?active=true``."""
    return await service.list_seasonal_challenges(active_only)


@router.post(
    "/seasonal-challenges/{challenge_id}/join",
    status_code=status.HTTP_201_CREATED,
    response_model=ChallengeParticipantRead,
)
async def join_seasonal_challenge(
    challenge_id: int,
    principal: Principal = Depends(get_current_principal),
    service: GamificationService = Depends(get_gamification_service),
) -> Dict[str, Any]:
    return await service.join_seasonal_challenge(challenge_id, principal.user_id)


@router.get("/users/{user_id}/seasonal-challenges", response_model=List[ChallengeParticipantRead])
async def list_seasonal_participations(
    owner_id: int = Depends(require_path_user),
    service: GamificationService = Depends(get_gamification_service),
) -> List[Dict[str, Any]]:
    return await service.list_participations(owner_id)


@router.put("/seasonal-challenges/{challenge_id}/progress", response_model=ChallengeParticipantRead)
async def update_seasonal_progress(
    challenge_id: int,
    body: Optional[ProgressUpdate] = None,
    principal: Principal = Depends(get_current_principal),
    service: GamificationService = Depends(get_gamification_service),
) -> Dict[str, Any]:
    body = body or ProgressUpdate()
    return await service.update_progress(challenge_id, principal.user_id, body.progress)


# --- Achievements -------------------------------------------------------


@router.get("/achievements", response_model=List[AchievementRead])
async def list_achievements(
    category: Optional[str] = Query(None),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_catalog("achievements", {"category": category})


@router.get("/users/{user_id}/achievements", response_model=List[UserAchievementRead])
async def list_user_achievements(
    owner_id: int = Depends(require_path_user),
    service: GamificationService = Depends(get_gamification_service),
) -> List[Dict[str, Any]]:
    return await service.list_user_achievements(owner_id)


@router.post("/users/{user_id}/achievements", status_code=status.HTTP_201_CREATED, response_model=UserAchievementRead)
async def award_achievement(
    owner_id: int = Depends(require_path_user),
    body: Optional[AchievementAward] = None,
    service: GamificationService = Depends(get_gamification_service),
) -> Dict[str, Any]:
    body = body or AchievementAward()
    return await service.award_achievement(owner_id, body.achievementId)


# --- Rewards ------------------------------------------------------------


@router.get("/rewards", response_model=List[RewardRead])
async def list_rewards(
    category: Optional[str] = Query(None),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_catalog("rewards", {"category": category})


@router.get("/users/{user_id}/rewards", response_model=List[UserRewardRead])
async def list_user_rewards(
    owner_id: int = Depends(require_path_user),
    service: GamificationService = Depends(get_gamification_service),
) -> List[Dict[str, Any]]:
    return await service.list_user_rewards(owner_id)


@router.post("/users/{user_id}/rewards/redeem", status_code=status.HTTP_201_CREATED, response_model=UserRewardRead)
async def redeem_reward(
    owner_id: int = Depends(require_path_user),
    body: Optional[RewardRedeem] = None,
    service: GamificationService = Depends(get_gamification_service),
) -> Dict[str, Any]:
    return await service.redeem_reward(owner_id, body_fields(body))
