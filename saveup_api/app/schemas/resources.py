"""
Request and response models for the registry entities.

The models are generated from ``store.entities`` so a field declared
there is typed the same way at the edge of the API.  Request bodies use
strict types: a string where a number is expected (or ``"false"`` where
a boolean is expected) is rejected with 400 before any service runs.
Every body field is optional; required fields are enforced by the store
with a message naming the field.

Decimal amounts travel as strings in responses, already rounded to the
field's scale by the store.
"""

from decimal import Decimal
from typing import Annotated, Any, Dict, Iterable, Optional, Type

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    StrictBool,
    StrictInt,
    StrictStr,
    create_model,
)

from ..store.entities import BOOL, DECIMAL, INT, JSON, TEXT, TIMESTAMP, get_entity


def _not_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("Input should be a decimal amount")
    return value


def _finite(value: Decimal) -> Decimal:
    if not value.is_finite():
        raise ValueError("Input should be a finite number")
    return value


# JSON number or numeric string, never a boolean, NaN or infinity.
Amount = Annotated[Decimal, BeforeValidator(_not_bool), AfterValidator(_finite)]

_BODY_TYPES: Dict[str, Any] = {
    INT: StrictInt,
    TEXT: StrictStr,
    TIMESTAMP: StrictStr,
    BOOL: StrictBool,
    DECIMAL: Amount,
    JSON: Any,
}

_READ_TYPES: Dict[str, Any] = {
    INT: int,
    TEXT: str,
    TIMESTAMP: str,
    BOOL: bool,
    DECIMAL: str,
    JSON: Any,
}


def body_schema(entity_name: str, model_name: str, exclude: Iterable[str] = ()) -> Type[BaseModel]:
    """Request body model for ``entity_name``.

    The owner field and creation timestamps are left out; unknown keys
    are ignored.
    """
    entity = get_entity(entity_name)
    skipped = set(exclude) | {entity.owner_field}
    fields = {
        f.name: (Optional[_BODY_TYPES[f.kind]], None)
        for f in entity.fields
        if f.name not in skipped and not f.auto_now
    }
    return create_model(model_name, __config__=ConfigDict(extra="ignore"), **fields)


def read_schema(
    entity_name: str,
    model_name: str,
    exclude: Iterable[str] = (),
    extra: str = "allow",
) -> Type[BaseModel]:
    """Response model for a stored ``entity_name`` record.

    With ``extra="allow"`` values joined in by a service (a member's
    ``role``, say) are passed through.
    """
    entity = get_entity(entity_name)
    skipped = set(exclude)
    fields: Dict[str, Any] = {"id": (int, ...)}
    fields.update(
        {f.name: (Optional[_READ_TYPES[f.kind]], None) for f in entity.fields if f.name not in skipped}
    )
    return create_model(model_name, __config__=ConfigDict(extra=extra), **fields)


# --- Savings ------------------------------------------------------------

TransactionCreate = body_schema("transactions", "TransactionCreate")
TransactionRead = read_schema("transactions", "TransactionRead")

ChallengeCreate = body_schema("challenges", "ChallengeCreate")
ChallengeUpdate = body_schema("challenges", "ChallengeUpdate")
ChallengeRead = read_schema("challenges", "ChallengeRead")

ActivityCreate = body_schema("activities", "ActivityCreate")
ActivityRead = read_schema("activities", "ActivityRead")

BadgeRead = read_schema("user_badges", "BadgeRead")

# --- Investments --------------------------------------------------------

PortfolioCreate = body_schema("portfolios", "PortfolioCreate")
PortfolioUpdate = body_schema("portfolios", "PortfolioUpdate")
PortfolioRead = read_schema("portfolios", "PortfolioRead")

SipPlanCreate = body_schema("sip_plans", "SipPlanCreate")
SipPlanUpdate = body_schema("sip_plans", "SipPlanUpdate")
SipPlanRead = read_schema("sip_plans", "SipPlanRead")

InvestmentCreate = body_schema("investments", "InvestmentCreate")
InvestmentRead = read_schema("investments", "InvestmentRead")

InvestmentGoalCreate = body_schema("investment_goals", "InvestmentGoalCreate")
InvestmentGoalUpdate = body_schema("investment_goals", "InvestmentGoalUpdate")
InvestmentGoalRead = read_schema("investment_goals", "InvestmentGoalRead")

# --- Gamification -------------------------------------------------------

StreakUpdate = body_schema("streaks", "StreakUpdate", exclude=("type",))
StreakRead = read_schema("streaks", "StreakRead")

SeasonalChallengeCreate = body_schema("seasonal_challenges", "SeasonalChallengeCreate")
SeasonalChallengeRead = read_schema("seasonal_challenges", "SeasonalChallengeRead")
ChallengeParticipantRead = read_schema("challenge_participants", "ChallengeParticipantRead")

AchievementRead = read_schema("achievements", "AchievementRead")
UserAchievementRead = read_schema("user_achievements", "UserAchievementRead")

RewardRead = read_schema("rewards", "RewardRead")
UserRewardRead = read_schema("user_rewards", "UserRewardRead")

# --- Social -------------------------------------------------------------

TeamCreate = body_schema("teams", "TeamCreate", exclude=("memberCount",))
TeamRead = read_schema("teams", "TeamRead")
TeamMemberRead = read_schema("team_members", "TeamMemberRead")

CommunityCreate = body_schema("communities", "CommunityCreate", exclude=("memberCount",))
CommunityRead = read_schema("communities", "CommunityRead")
CommunityMemberRead = read_schema("community_members", "CommunityMemberRead")

GroupGoalCreate = body_schema("group_goals", "GroupGoalCreate")
GroupGoalRead = read_schema("group_goals", "GroupGoalRead")
GroupGoalMemberRead = read_schema("group_goal_members", "GroupGoalMemberRead")

MentorshipCreate = body_schema("mentorships", "MentorshipCreate", exclude=("status",))
MentorshipRead = read_schema("mentorships", "MentorshipRead")

StoryCreate = body_schema("savings_stories", "StoryCreate", exclude=("likes", "comments", "shares"))
StoryRead = read_schema("savings_stories", "StoryRead")
StoryInteractionRead = read_schema("story_interactions", "StoryInteractionRead")

# --- Insights and education ---------------------------------------------

BudgetCreate = body_schema("budgets", "BudgetCreate")
BudgetUpdate = body_schema("budgets", "BudgetUpdate")
BudgetRead = read_schema("budgets", "BudgetRead")

FinancialHealthUpdate = body_schema("financial_health", "FinancialHealthUpdate")
FinancialHealthRead = read_schema("financial_health", "FinancialHealthRead")

EducationModuleRead = read_schema("education_modules", "EducationModuleRead")
EducationProgressRead = read_schema("user_education", "EducationProgressRead")
QuizQuestionRead = read_schema(
    "quiz_questions", "QuizQuestionRead", exclude=("correctAnswer", "explanation"), extra="ignore"
)
QuizAttemptRead = read_schema("quiz_attempts", "QuizAttemptRead")

# --- Banking ------------------------------------------------------------

BankAccountCreate = body_schema("bank_accounts", "BankAccountCreate")
BankAccountRead = read_schema("bank_accounts", "BankAccountRead")

BillSplitCreate = body_schema("bill_splits", "BillSplitCreate")
BillSplitRead = read_schema("bill_splits", "BillSplitRead")
BillSplitMemberRead = read_schema("bill_split_members", "BillSplitMemberRead")

ScheduledPaymentCreate = body_schema("scheduled_payments", "ScheduledPaymentCreate")
ScheduledPaymentRead = read_schema("scheduled_payments", "ScheduledPaymentRead")
