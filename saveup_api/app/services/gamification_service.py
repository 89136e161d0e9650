"""
Business logic for the gamification features.

Covers badges, per-type savings streaks, seasonal challenges and their
participants, the achievement tree and the reward store.  Catalogue
entities (achievements, rewards) are shared by all users; everything
else is scoped to the authenticated user by the endpoints.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import NotFoundError, ValidationError
from ..store import ResourceStore, parse_decimal, parse_int, utcnow

logger = logging.getLogger(__name__)


def _as_int(value: Any, name: str) -> int:
    if value is None:
        raise ValidationError(f"{name} is required")
    return parse_int(value, name)


class GamificationService:
    def __init__(self, store: ResourceStore):
        self.store = store

    # ------------------------------------------------------------------
    # Badges
    # ------------------------------------------------------------------

    async def list_badges(self, user_id: int) -> List[Dict[str, Any]]:
        return self.store.get_by_owner("user_badges", user_id)

    async def set_badge_earned(self, user_id: int, badge_id: str, earned: Any) -> Dict[str, bool]:
        """Mark one of the user's badges as earned or not.

        Unknown badges are ignored; the call always reports success.
        """
        if not isinstance(earned, bool):
            raise ValidationError("Field 'earned' must be true or false")
        self.store.update_where(
            "user_badges",
            {"userId": user_id, "badgeId": badge_id},
            {"earned": earned, "earnedAt": utcnow() if earned else None},
        )
        return {"success": True}

    # ------------------------------------------------------------------
    # Streaks
    # ------------------------------------------------------------------

    async def list_streaks(self, user_id: int) -> List[Dict[str, Any]]:
        return self.store.get_by_owner("streaks", user_id)

    async def upsert_streak(self, user_id: int, streak_type: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Create or update the user's streak of ``streak_type``.

        ``longestStreak`` follows ``currentStreak`` upwards.
        """
        values = {key: value for key, value in updates.items() if key not in {"id", "userId", "type"}}
        existing = self.store.find_one("streaks", {"userId": user_id, "type": streak_type})
        current = values.get("currentStreak")
        if current is not None:
            longest = values.get("longestStreak")
            if longest is None:
                longest = existing["longestStreak"] if existing else 0
            values["longestStreak"] = max(_as_int(longest or 0, "longestStreak"), _as_int(current, "currentStreak"))
        if existing is None:
            return self.store.create("streaks", {**values, "userId": user_id, "type": streak_type})
        return self.store.update("streaks", existing["id"], values)

    # ------------------------------------------------------------------
    # Seasonal challenges
    # ------------------------------------------------------------------

    async def create_seasonal_challenge(self, data: Mapping[str, Any], creator_id: int) -> Dict[str, Any]:
        return self.store.create("seasonal_challenges", {**data, "createdBy": creator_id})

    async def list_seasonal_challenges(self, active_only: bool = False) -> List[Dict[str, Any]]:
        filters = {"isActive": True} if active_only else {}
        return self.store.find("seasonal_challenges", filters, order_by="startDate")

    async def join_seasonal_challenge(self, challenge_id: int, user_id: int) -> Dict[str, Any]:
        challenge = self.store.get("seasonal_challenges", challenge_id)
        if challenge is None:
            raise NotFoundError("Seasonal challenge not found")
        if not challenge["isActive"]:
            raise ValidationError("Seasonal challenge is no longer active")
        if self.store.find_one("challenge_participants", {"challengeId": challenge_id, "userId": user_id}):
            raise ValidationError("Already joined this challenge")
        limit = challenge.get("participantLimit")
        if limit is not None and len(self.store.find("challenge_participants", {"challengeId": challenge_id})) >= limit:
            raise ValidationError("Seasonal challenge is full")
        logger.info("User %s joined seasonal challenge %s", user_id, challenge_id)
        return self.store.create("challenge_participants", {"challengeId": challenge_id, "userId": user_id})

    async def list_participations(self, user_id: int) -> List[Dict[str, Any]]:
        return self.store.get_by_owner("challenge_participants", user_id)

    async def update_progress(self, challenge_id: int, user_id: int, progress: Any) -> Dict[str, Any]:
        """Record the user's progress in a joined challenge.

        The participation is marked completed once the progress reaches
        the challenge's target amount.
        """
        if progress is None:
            raise ValidationError("progress is required")
        amount = parse_decimal(progress, "progress")
        participation = self.store.find_one("challenge_participants", {"challengeId": challenge_id, "userId": user_id})
        if participation is None:
            raise NotFoundError("Challenge participation not found")
        values: Dict[str, Any] = {"currentProgress": amount}
        challenge = self.store.get("seasonal_challenges", challenge_id)
        target = challenge.get("targetAmount") if challenge else None
        if (
            target is not None
            and not participation["isCompleted"]
            and amount >= Decimal(target)
        ):
            values.update(isCompleted=True, completedAt=utcnow())
        return self.store.update("challenge_participants", participation["id"], values)

    # ------------------------------------------------------------------
    # Achievements
    # ------------------------------------------------------------------

    async def list_user_achievements(self, user_id: int) -> List[Dict[str, Any]]:
        return self.store.get_by_owner("user_achievements", user_id)

    async def award_achievement(self, user_id: int, achievement_id: Any) -> Dict[str, Any]:
        """Unlock and complete an achievement for the user."""
        achievement_id = _as_int(achievement_id, "achievementId")
        if self.store.get("achievements", achievement_id) is None:
            raise NotFoundError("Achievement not found")
        now = utcnow()
        values = {
            "progress": "100.00",
            "isUnlocked": True,
            "unlockedAt": now,
            "isCompleted": True,
            "completedAt": now,
        }
        existing = self.store.find_one("user_achievements", {"userId": user_id, "achievementId": achievement_id})
        if existing is not None:
            if existing["isCompleted"]:
                return existing
            return self.store.update("user_achievements", existing["id"], values)
        logger.info("Awarding achievement %s to user %s", achievement_id, user_id)
        return self.store.create("user_achievements", {**values, "userId": user_id, "achievementId": achievement_id})

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------

    async def list_user_rewards(self, user_id: int) -> List[Dict[str, Any]]:
        return self.store.get_by_owner("user_rewards", user_id)

    async def redeem_reward(self, user_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Redeem a reward from the store.

        The redemption gets a random code and expires ``validityDays``
        after redemption.  Points and coins default to the reward's
        cost when the payload omits them.
        """
        reward_id = _as_int(data.get("rewardId"), "rewardId")
        reward = self.store.get("rewards", reward_id)
        if reward is None or not reward["isActive"]:
            raise NotFoundError("Reward not found")
        stock: Optional[int] = reward.get("stockQuantity")
        if stock is not None:
            if stock <= 0:
                raise ValidationError("Reward is out of stock")
            self.store.update("rewards", reward_id, {"stockQuantity": stock - 1})
        points = data.get("pointsSpent")
        coins = data.get("coinsSpent")
        expires = datetime.now(timezone.utc) + timedelta(days=reward.get("validityDays") or 30)
        redemption = self.store.create(
            "user_rewards",
            {
                "userId": user_id,
                "rewardId": reward_id,
                "pointsSpent": points if points is not None else reward["pointsCost"],
                "coinsSpent": coins if coins is not None else reward.get("coinsCost") or 0,
                "redemptionCode": secrets.token_hex(6).upper(),
                "expiresAt": expires.isoformat(),
            },
        )
        logger.info("User %s redeemed reward %s", user_id, reward_id)
        return redemption
