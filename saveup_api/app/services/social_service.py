"""
Business logic for the social features.

Teams, communities and group goals are groups a user creates and
others join; the creator is recorded as the first member.
Mentorships pair a mentor with a mentee and start out pending until
the mentee accepts.  Savings stories form a public feed whose like,
comment and share counters are kept on the story itself.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import AuthorizationError, NotFoundError, ValidationError
from ..store import ResourceStore

logger = logging.getLogger(__name__)

# Interaction type -> counter field on ``savings_stories``.
STORY_COUNTERS = {"like": "likes", "comment": "comments", "share": "shares"}


class SocialService:
    def __init__(self, store: ResourceStore):
        self.store = store

    def _load(self, entity_name: str, record_id: int, label: str) -> Dict[str, Any]:
        record = self.store.get(entity_name, record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    async def create_team(self, data: Mapping[str, Any], captain_id: int) -> Dict[str, Any]:
        """Create a team with ``captain_id`` as captain and first member."""
        team = self.store.create("teams", {**data, "captainId": captain_id, "memberCount": 1})
        self.store.create("team_members", {"teamId": team["id"], "userId": captain_id, "role": "captain"})
        logger.info("User %s created team %s", captain_id, team["id"])
        return team

    async def list_teams(self, team_type: Optional[str] = None) -> List[Dict[str, Any]]:
        filters: Dict[str, Any] = {"isActive": True}
        if team_type:
            filters["type"] = team_type
        return self.store.find("teams", filters)

    async def join_team(self, team_id: int, user_id: int) -> Dict[str, Any]:
        team = self._load("teams", team_id, "Team")
        if not team["isActive"]:
            raise ValidationError("Team is no longer active")
        if self.store.find_one("team_members", {"teamId": team_id, "userId": user_id}):
            raise ValidationError("Already a member of this team")
        if team["maxMembers"] is not None and team["memberCount"] >= team["maxMembers"]:
            raise ValidationError("Team is full")
        membership = self.store.create("team_members", {"teamId": team_id, "userId": user_id})
        self.store.update("teams", team_id, {"memberCount": team["memberCount"] + 1})
        return membership

    async def list_user_teams(self, user_id: int) -> List[Dict[str, Any]]:
        """Teams the user belongs to, as captain or member."""
        teams = []
        for membership in self.store.find("team_members", {"userId": user_id}):
            team = self.store.get("teams", membership["teamId"])
            if team is not None and team["isActive"]:
                teams.append({**team, "role": membership["role"]})
        return teams

    # ------------------------------------------------------------------
    # Communities
    # ------------------------------------------------------------------

    async def create_community(self, data: Mapping[str, Any], creator_id: int) -> Dict[str, Any]:
        community = self.store.create("communities", {**data, "createdBy": creator_id, "memberCount": 1})
        self.store.create("community_members", {"communityId": community["id"], "userId": creator_id, "role": "admin"})
        return community

    async def list_communities(self, category: Optional[str] = None, public_only: bool = False) -> List[Dict[str, Any]]:
        filters: Dict[str, Any] = {}
        if category:
            filters["category"] = category
        if public_only:
            filters["isPublic"] = True
        return self.store.find("communities", filters)

    async def join_community(self, community_id: int, user_id: int) -> Dict[str, Any]:
        community = self._load("communities", community_id, "Community")
        if self.store.find_one("community_members", {"communityId": community_id, "userId": user_id}):
            raise ValidationError("Already a member of this community")
        membership = self.store.create("community_members", {"communityId": community_id, "userId": user_id})
        self.store.update("communities", community_id, {"memberCount": community["memberCount"] + 1})
        return membership

    # ------------------------------------------------------------------
    # Group goals
    # ------------------------------------------------------------------

    async def create_group_goal(self, data: Mapping[str, Any], creator_id: int) -> Dict[str, Any]:
        goal = self.store.create("group_goals", {**data, "createdBy": creator_id})
        self.store.create("group_goal_members", {"goalId": goal["id"], "userId": creator_id})
        return goal

    async def list_group_goals(self, category: Optional[str] = None, public_only: bool = False) -> List[Dict[str, Any]]:
        filters: Dict[str, Any] = {"isActive": True}
        if category:
            filters["category"] = category
        if public_only:
            filters["isPublic"] = True
        return self.store.find("group_goals", filters)

    async def join_group_goal(self, goal_id: int, user_id: int, contributed_amount: Any = None) -> Dict[str, Any]:
        """Join a group goal, optionally with an initial contribution.

        The contribution is added to the goal's ``currentAmount``.
        """
        goal = self._load("group_goals", goal_id, "Group goal")
        if not goal["isActive"]:
            raise ValidationError("Group goal is no longer active")
        if self.store.find_one("group_goal_members", {"goalId": goal_id, "userId": user_id}):
            raise ValidationError("Already a member of this group goal")
        members = self.store.find("group_goal_members", {"goalId": goal_id})
        if goal["memberLimit"] is not None and len(members) >= goal["memberLimit"]:
            raise ValidationError("Group goal is full")
        membership = self.store.create(
            "group_goal_members",
            {"goalId": goal_id, "userId": user_id, "contributedAmount": contributed_amount},
        )
        if contributed_amount is not None:
            total = Decimal(goal["currentAmount"] or "0") + Decimal(membership["contributedAmount"])
            self.store.update("group_goals", goal_id, {"currentAmount": total})
        return membership

    async def list_user_group_goals(self, user_id: int) -> List[Dict[str, Any]]:
        goals = []
        for membership in self.store.find("group_goal_members", {"userId": user_id}):
            goal = self.store.get("group_goals", membership["goalId"])
            if goal is not None and goal["isActive"]:
                goals.append({**goal, "contributedAmount": membership["contributedAmount"]})
        return goals

    # ------------------------------------------------------------------
    # Mentorships
    # ------------------------------------------------------------------

    async def create_mentorship(self, data: Mapping[str, Any], mentor_id: int) -> Dict[str, Any]:
        """Offer mentorship to ``menteeId``.  The pairing starts out pending."""
        mentee_id = data.get("menteeId")
        if mentee_id is not None and str(mentee_id) == str(mentor_id):
            raise ValidationError("You cannot mentor yourself")
        return self.store.create("mentorships", {**data, "mentorId": mentor_id, "status": "pending"})

    async def list_mentorships(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = {"status": status} if status else {}
        return self.store.find("mentorships", filters, order_by="startedAt")

    async def list_user_mentorships(self, user_id: int, role: Optional[str] = None) -> List[Dict[str, Any]]:
        """Mentorships where the user is mentor, mentee or (no role) either."""
        if role == "mentor":
            return self.store.find("mentorships", {"mentorId": user_id}, order_by="startedAt")
        if role == "mentee":
            return self.store.find("mentorships", {"menteeId": user_id}, order_by="startedAt")
        rows = {row["id"]: row for row in self.store.find("mentorships", {"mentorId": user_id})}
        rows.update({row["id"]: row for row in self.store.find("mentorships", {"menteeId": user_id})})
        return sorted(rows.values(), key=lambda row: (row["startedAt"] or "", row["id"]), reverse=True)

    async def accept_mentorship(self, mentorship_id: int, user_id: int) -> Dict[str, Any]:
        """Accept a pending mentorship.  Only the mentee may accept."""
        mentorship = self.store.get("mentorships", mentorship_id)
        if mentorship is None or mentorship["menteeId"] != user_id:
            raise NotFoundError("Mentorship not found or unauthorized")
        if mentorship["status"] != "pending":
            return mentorship
        return self.store.update("mentorships", mentorship_id, {"status": "active"})

    # ------------------------------------------------------------------
    # Savings stories
    # ------------------------------------------------------------------

    async def create_story(self, data: Mapping[str, Any], user_id: int) -> Dict[str, Any]:
        values = {key: value for key, value in data.items() if key not in STORY_COUNTERS.values()}
        return self.store.create("savings_stories", {**values, "userId": user_id})

    async def list_public_stories(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.store.find("savings_stories", {"isPublic": True}, order_by="createdAt", limit=limit)

    async def list_user_stories(self, user_id: int) -> List[Dict[str, Any]]:
        return self.store.get_by_owner("savings_stories", user_id)

    async def interact_with_story(self, story_id: int, user_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Like, comment on or share a story and bump its counter.

        Private stories only accept interactions from their author.
        """
        story = self._load("savings_stories", story_id, "Story")
        if not story["isPublic"] and story["userId"] != user_id:
            raise AuthorizationError("Access denied. This story is private.")
        interaction_type = data.get("type")
        counter = STORY_COUNTERS.get(interaction_type)
        if counter is None:
            raise ValidationError("Interaction type must be one of: like, comment, share")
        if interaction_type == "comment" and not data.get("comment"):
            raise ValidationError("Comment text is required")
        if interaction_type == "like" and self.store.find_one(
            "story_interactions", {"storyId": story_id, "userId": user_id, "type": "like"}
        ):
            raise ValidationError("Story already liked")
        interaction = self.store.create(
            "story_interactions",
            {"storyId": story_id, "userId": user_id, "type": interaction_type, "comment": data.get("comment")},
        )
        self.store.update("savings_stories", story_id, {counter: (story[counter] or 0) + 1})
        return interaction
