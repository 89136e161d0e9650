"""
Social endpoints: teams, communities, group goals, mentorships and
savings stories.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...core.auth_deps import get_current_principal, require_path_user
from ...schemas.actions import GroupGoalJoin, StoryInteractionCreate
from ...schemas.auth import Principal
from ...schemas.resources import (
    CommunityCreate,
    CommunityMemberRead,
    CommunityRead,
    GroupGoalCreate,
    GroupGoalMemberRead,
    GroupGoalRead,
    MentorshipCreate,
    MentorshipRead,
    StoryCreate,
    StoryInteractionRead,
    StoryRead,
    TeamCreate,
    TeamMemberRead,
    TeamRead,
)
from ...services import SocialService
from ..deps import body_fields, flag_param, get_social_service, limit_param

router = APIRouter()


# --- Teams --------------------------------------------------------------


@router.post("/teams", status_code=status.HTTP_201_CREATED, response_model=TeamRead)
async def create_team(
    body: Optional[TeamCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    """Create a team captained by the caller."""
    return await service.create_team(body_fields(body), principal.user_id)


@router.get("/teams", response_model=List[TeamRead])
async def list_teams(
    team_type: Optional[str] = Query(None, alias="type"),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    return await service.list_teams(team_type)


@router.post("/teams/{team_id}/join", status_code=status.HTTP_201_CREATED, response_model=TeamMemberRead)
async def join_team(
    team_id: int,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    return await service.join_team(team_id, principal.user_id)


@router.get("/users/{user_id}/teams", response_model=List[TeamRead])
async def list_user_teams(
    owner_id: int = Depends(require_path_user),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    """Teams of the user, each with the user's ``role`` in it."""
    return await service.list_user_teams(owner_id)


# --- Communities --------------------------------------------------------


@router.post("/communities", status_code=status.HTTP_201_CREATED, response_model=CommunityRead)
async def create_community(
    body: Optional[CommunityCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    return await service.create_community(body_fields(body), principal.user_id)


@router.get("/communities", response_model=List[CommunityRead])
async def list_communities(
    category: Optional[str] = Query(None),
    public_only: bool = Depends(flag_param("public")),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    return await service.list_communities(category, public_only)


@router.post(
    "/communities/{community_id}/join",
    status_code=status.HTTP_201_CREATED,
    response_model=CommunityMemberRead,
)
async def join_community(
    community_id: int,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    return await service.join_community(community_id, principal.user_id)


# --- Group goals --------------------------------------------------------


@router.post("/group-goals", status_code=status.HTTP_201_CREATED, response_model=GroupGoalRead)
async def create_group_goal(
    body: Optional[GroupGoalCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    return await service.create_group_goal(body_fields(body), principal.user_id)


@router.get("/group-goals", response_model=List[GroupGoalRead])
async def list_group_goals(
    category: Optional[str] = Query(None),
    public_only: bool = Depends(flag_param("public")),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    return await service.list_group_goals(category, public_only)


@router.post("/group-goals/{goal_id}/join", status_code=status.HTTP_201_CREATED, response_model=GroupGoalMemberRead)
async def join_group_goal(
    goal_id: int,
    body: Optional[GroupGoalJoin] = None,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    body = body or GroupGoalJoin()
    return await service.join_group_goal(goal_id, principal.user_id, body.contributedAmount)


@router.get("/users/{user_id}/group-goals", response_model=List[GroupGoalRead])
async def list_user_group_goals(
    owner_id: int = Depends(require_path_user),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    return await service.list_user_group_goals(owner_id)


# --- Mentorships --------------------------------------------------------


@router.post("/mentorships", status_code=status.HTTP_201_CREATED, response_model=MentorshipRead)
async def create_mentorship(
    body: Optional[MentorshipCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    """Offer to mentor ``menteeId``.  The mentorship starts as ``pending``."""
    return await service.create_mentorship(body_fields(body), principal.user_id)


@router.get("/mentorships", response_model=List[MentorshipRead])
async def list_mentorships(
    mentorship_status: Optional[str] = Query(None, alias="status"),
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    return await service.list_mentorships(mentorship_status)


@router.get("/users/{user_id}/mentorships", response_model=List[MentorshipRead])
async def list_user_mentorships(
    owner_id: int = Depends(require_path_user),
    role: Optional[str] = Query(None),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    return await service.list_user_mentorships(owner_id, role)


@router.post("/mentorships/{mentorship_id}/accept", response_model=MentorshipRead)
async def accept_mentorship(
    mentorship_id: int,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    return await service.accept_mentorship(mentorship_id, principal.user_id)


# --- Savings stories ----------------------------------------------------


@router.post("/stories", status_code=status.HTTP_201_CREATED, response_model=StoryRead)
async def create_story(
    body: Optional[StoryCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    return await service.create_story(body_fields(body), principal.user_id)


@router.get("/stories", response_model=List[StoryRead])
async def list_stories(
    limit: int = Depends(limit_param(20)),
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    """Public stories feed, newest first."""
    return await service.list_public_stories(limit)


@router.get("/users/{user_id}/stories", response_model=List[StoryRead])
async def list_user_stories(
    owner_id: int = Depends(require_path_user),
    service: SocialService = Depends(get_social_service),
) -> List[Dict[str, Any]]:
    return await service.list_user_stories(owner_id)


@router.post(
    "/stories/{story_id}/interactions",
    status_code=status.HTTP_201_CREATED,
    response_model=StoryInteractionRead,
)
async def interact_with_story(
    story_id: int,
    body: Optional[StoryInteractionCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: SocialService = Depends(get_social_service),
) -> Dict[str, Any]:
    """Like, comment on or share a story."""
    return await service.interact_with_story(story_id, principal.user_id, body_fields(body))
