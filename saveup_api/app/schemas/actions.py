"""
Bodies of the action endpoints (joining, awarding, redeeming, ...).

These payloads are not records of a single entity, so they are
declared by hand.  Missing values are left to the services, which
answer with the same "<field> is required" messages for direct callers.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, StrictStr

from .resources import Amount


class ActionBody(BaseModel):
    model_config = ConfigDict(extra="ignore")


class BadgeUpdate(ActionBody):
    earned: StrictBool = False


class ProgressUpdate(ActionBody):
    progress: Optional[Amount] = None


class AchievementAward(ActionBody):
    achievementId: Optional[StrictInt] = None


class RewardRedeem(ActionBody):
    rewardId: Optional[StrictInt] = None
    pointsSpent: Optional[StrictInt] = None
    coinsSpent: Optional[StrictInt] = None


class GroupGoalJoin(ActionBody):
    contributedAmount: Optional[Amount] = None


class StoryInteractionCreate(ActionBody):
    type: Optional[StrictStr] = None
    comment: Optional[StrictStr] = None


class EducationProgressUpdate(ActionBody):
    moduleId: Optional[StrictInt] = None
    progress: Optional[Amount] = None


class QuizAttemptCreate(ActionBody):
    # Question id -> index of the chosen option.
    answers: Optional[Dict[str, StrictInt]] = None
    timeSpent: Optional[StrictInt] = None


class BillSplitJoin(ActionBody):
    shareAmount: Optional[Amount] = None


class SuccessResponse(BaseModel):
    success: bool
