"""
Entity registry.

Every business entity is declared once here: its table, its fields
with their kinds and defaults, and how it is owned, ordered and
filtered.  Both store strategies and the SQLite migrations are driven
by these declarations, so the in-process fallback and the durable
store always agree on the shape of a record.

Records exchanged with clients use the camelCase field names; the
SQLite columns use the snake_case form of the same names.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

INT = "int"
TEXT = "text"
DECIMAL = "decimal"
BOOL = "bool"
JSON = "json"
TIMESTAMP = "timestamp"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_column(name: str) -> str:
    """``totalSavings`` -> ``total_savings``"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclass(frozen=True)
class EntityField:
    name: str
    kind: str = TEXT
    default: Any = None
    required: bool = False
    # Stamped with the current time when the record is created.
    auto_now: bool = False
    unique: bool = False
    # Decimal places kept for ``DECIMAL`` fields.
    scale: int = 2

    @property
    def column(self) -> str:
        return to_column(self.name)


@dataclass(frozen=True)
class Entity:
    name: str
    fields: Tuple[EntityField, ...]
    # Field holding the owning user id; ``None`` for shared catalogues.
    owner_field: Optional[str] = "userId"
    # Default "most recent first" ordering for owner listings.
    order_field: Optional[str] = None
    # Owner listings only return rows where this flag is true.
    active_field: Optional[str] = None
    # Refreshed on every update.
    touch_field: Optional[str] = None
    _by_name: Dict[str, EntityField] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        self._by_name.update({f.name: f for f in self.fields})

    @property
    def table(self) -> str:
        return self.name

    def has_field(self, name: str) -> bool:
        return name in self._by_name

    def get_field(self, name: str) -> EntityField:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"{self.name} has no field {name!r}") from None

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)


def _f(name: str, kind: str = TEXT, default: Any = None, **kwargs: Any) -> EntityField:
    return EntityField(name, kind, default, **kwargs)


def _req(name: str, kind: str = TEXT, **kwargs: Any) -> EntityField:
    return EntityField(name, kind, required=True, **kwargs)


def _now(name: str) -> EntityField:
    return EntityField(name, TIMESTAMP, auto_now=True)


ENTITIES: Tuple[Entity, ...] = (
    Entity(
        "users",
        (
            _req("email", unique=True),
            _req("username", unique=True),
            _req("name"),
            _req("passwordHash"),
            _f("upiId"),
            _f("totalSavings", DECIMAL, "0.00"),
            _f("todayRoundUp", DECIMAL, "0.00"),
            _f("currentStreak", INT, 0),
            _now("memberSince"),
            _f("profilePicture"),
            _now("createdAt"),
            _now("updatedAt"),
        ),
        owner_field="id",
        touch_field="updatedAt",
    ),
    Entity(
        "transactions",
        (
            _req("userId", INT),
            _req("type"),
            _req("amount", DECIMAL),
            _f("originalAmount", DECIMAL),
            _f("roundUpAmount", DECIMAL),
            _f("payee"),
            _f("upiId"),
            _f("note"),
            _f("status", TEXT, "completed"),
            _now("createdAt"),
        ),
        order_field="createdAt",
    ),
    Entity(
        "challenges",
        (
            _req("userId", INT),
            _req("title"),
            _f("description"),
            _req("targetAmount", DECIMAL),
            _f("currentAmount", DECIMAL, "0.00"),
            _f("deadline", TIMESTAMP),
            _f("status", TEXT, "active"),
            _f("category"),
            _f("isTemplate", BOOL, False),
            _now("createdAt"),
            _f("completedAt", TIMESTAMP),
        ),
    ),
    Entity(
        "activities",
        (
            _req("userId", INT),
            _req("type"),
            _f("amount", DECIMAL),
            _f("description"),
            _f("icon"),
            _f("metadata", JSON),
            _now("createdAt"),
        ),
        order_field="createdAt",
    ),
    Entity(
        "user_badges",
        (
            _req("userId", INT),
            _req("badgeId"),
            _req("badgeName"),
            _f("badgeIcon"),
            _f("badgeColor"),
            _f("earned", BOOL, False),
            _f("earnedAt", TIMESTAMP),
        ),
    ),
    Entity(
        "portfolios",
        (
            _req("userId", INT),
            _req("name"),
            _req("type"),
            _f("totalInvested", DECIMAL, "0.00"),
            _f("currentValue", DECIMAL, "0.00"),
            _f("returns", DECIMAL, "0.00"),
            _f("returnsPercentage", DECIMAL, "0.00"),
            _f("isActive", BOOL, True),
            _now("createdAt"),
            _now("updatedAt"),
        ),
        active_field="isActive",
        touch_field="updatedAt",
    ),
    Entity(
        "sip_plans",
        (
            _req("userId", INT),
            _req("portfolioId", INT),
            _req("name"),
            _req("monthlyAmount", DECIMAL),
            _req("startDate", TIMESTAMP),
            _f("endDate", TIMESTAMP),
            _req("nextPaymentDate", TIMESTAMP),
            _f("isActive", BOOL, True),
            _f("autoInvestRoundups", BOOL, False),
            _now("createdAt"),
        ),
        active_field="isActive",
    ),
    Entity(
        "investments",
        (
            _req("userId", INT),
            _req("portfolioId", INT),
            _req("type"),
            _req("amount", DECIMAL),
            _f("units", DECIMAL, scale=8),
            _f("pricePerUnit", DECIMAL, scale=4),
            _now("transactionDate"),
            _f("status", TEXT, "completed"),
            _now("createdAt"),
        ),
        order_field="transactionDate",
    ),
    Entity(
        "investment_goals",
        (
            _req("userId", INT),
            _f("portfolioId", INT),
            _req("title"),
            _f("description"),
            _req("targetAmount", DECIMAL),
            _f("currentAmount", DECIMAL, "0.00"),
            _f("targetDate", TIMESTAMP),
            _f("category"),
            _f("isActive", BOOL, True),
            _now("createdAt"),
            _f("completedAt", TIMESTAMP),
        ),
        active_field="isActive",
    ),
    Entity(
        "streaks",
        (
            _req("userId", INT),
            _req("type"),
            _f("currentStreak", INT, 0),
            _f("longestStreak", INT, 0),
            _f("lastActivityDate", TIMESTAMP),
            _f("streakMultiplier", DECIMAL, "1.00"),
            _f("totalRewardsEarned", DECIMAL, "0.00"),
            _now("createdAt"),
            _now("updatedAt"),
        ),
        touch_field="updatedAt",
    ),
    Entity(
        "seasonal_challenges",
        (
            _req("title"),
            _f("description"),
            _req("type"),
            _f("targetAmount", DECIMAL),
            _f("targetCount", INT),
            _req("startDate", TIMESTAMP),
            _req("endDate", TIMESTAMP),
            _f("rewardPoints", INT, 0),
            _f("rewardBadges", JSON),
            _f("participantLimit", INT),
            _f("isActive", BOOL, True),
            _f("createdBy", INT),
            _now("createdAt"),
        ),
        owner_field="createdBy",
        active_field="isActive",
    ),
    Entity(
        "challenge_participants",
        (
            _req("challengeId", INT),
            _req("userId", INT),
            _f("currentProgress", DECIMAL, "0.00"),
            _f("isCompleted", BOOL, False),
            _f("completedAt", TIMESTAMP),
            _f("rank", INT),
            _now("joinedAt"),
        ),
        order_field="joinedAt",
    ),
    Entity(
        "teams",
        (
            _req("name"),
            _f("description"),
            _req("type"),
            _req("captainId", INT),
            _f("totalSavings", DECIMAL, "0.00"),
            _f("memberCount", INT, 1),
            _f("maxMembers", INT, 50),
            _f("isActive", BOOL, True),
            _now("createdAt"),
        ),
        owner_field="captainId",
        active_field="isActive",
    ),
    Entity(
        "team_members",
        (
            _req("teamId", INT),
            _req("userId", INT),
            _f("role", TEXT, "member"),
            _now("joinedAt"),
            _f("contributedAmount", DECIMAL, "0.00"),
        ),
    ),
    Entity(
        "achievements",
        (
            _req("name"),
            _f("description"),
            _f("category"),
            _req("level", INT),
            _f("prerequisiteIds", JSON),
            _f("rewardPoints", INT, 0),
            _f("rewardCoins", INT, 0),
            _f("unlocksFeatures", JSON),
            _f("icon"),
            _f("color"),
            _f("isActive", BOOL, True),
            _now("createdAt"),
        ),
        owner_field=None,
        active_field="isActive",
    ),
    Entity(
        "user_achievements",
        (
            _req("userId", INT),
            _req("achievementId", INT),
            _f("progress", DECIMAL, "0.00"),
            _f("isUnlocked", BOOL, False),
            _f("unlockedAt", TIMESTAMP),
            _f("isCompleted", BOOL, False),
            _f("completedAt", TIMESTAMP),
        ),
    ),
    Entity(
        "rewards",
        (
            _req("name"),
            _f("description"),
            _req("type"),
            _req("pointsCost", INT),
            _f("coinsCost", INT, 0),
            _f("value", DECIMAL),
            _f("category"),
            _f("vendor"),
            _f("validityDays", INT, 30),
            _f("stockQuantity", INT),
            _f("isActive", BOOL, True),
            _f("imageUrl"),
            _f("termsConditions"),
            _now("createdAt"),
        ),
        owner_field=None,
        active_field="isActive",
    ),
    Entity(
        "user_rewards",
        (
            _req("userId", INT),
            _req("rewardId", INT),
            _req("pointsSpent", INT),
            _f("coinsSpent", INT, 0),
            _f("status", TEXT, "active"),
            _f("redemptionCode", unique=True),
            _f("expiresAt", TIMESTAMP),
            _f("usedAt", TIMESTAMP),
            _now("redeemedAt"),
        ),
        order_field="redeemedAt",
    ),
    Entity(
        "budgets",
        (
            _req("userId", INT),
            _req("category"),
            _req("monthlyLimit", DECIMAL),
            _f("currentSpent", DECIMAL, "0.00"),
            _f("alertThreshold", DECIMAL, "0.80"),
            _f("isActive", BOOL, True),
            _now("createdAt"),
            _now("updatedAt"),
        ),
        active_field="isActive",
        touch_field="updatedAt",
    ),
    Entity(
        "financial_health",
        (
            _req("userId", INT),
            _req("overallScore", INT),
            _req("savingsScore", INT),
            _req("spendingScore", INT),
            _req("investmentScore", INT),
            _req("budgetScore", INT),
            _req("streakScore", INT),
            _now("calculatedAt"),
            _f("recommendations", JSON),
            _f("trends", JSON),
        ),
        touch_field="calculatedAt",
    ),
    Entity(
        "group_goals",
        (
            _req("name"),
            _f("description"),
            _req("targetAmount", DECIMAL),
            _f("currentAmount", DECIMAL, "0.00"),
            _f("targetDate", TIMESTAMP),
            _f("category"),
            _req("createdBy", INT),
            _f("isActive", BOOL, True),
            _f("isPublic", BOOL, False),
            _f("memberLimit", INT, 10),
            _now("createdAt"),
            _f("completedAt", TIMESTAMP),
        ),
        owner_field="createdBy",
        active_field="isActive",
    ),
    Entity(
        "group_goal_members",
        (
            _req("goalId", INT),
            _req("userId", INT),
            _f("contributedAmount", DECIMAL, "0.00"),
            _f("targetContribution", DECIMAL),
            _now("joinedAt"),
        ),
    ),
    Entity(
        "savings_stories",
        (
            _req("userId", INT),
            _f("title"),
            _req("content"),
            _f("amount", DECIMAL),
            _req("type"),
            _f("imageUrl"),
            _f("isPublic", BOOL, True),
            _f("likes", INT, 0),
            _f("comments", INT, 0),
            _f("shares", INT, 0),
            _now("createdAt"),
        ),
        order_field="createdAt",
    ),
    Entity(
        "story_interactions",
        (
            _req("storyId", INT),
            _req("userId", INT),
            _req("type"),
            _f("comment"),
            _now("createdAt"),
        ),
        order_field="createdAt",
    ),
    Entity(
        "mentorships",
        (
            _req("mentorId", INT),
            _req("menteeId", INT),
            _f("status", TEXT, "active"),
            _f("specialization"),
            _now("startedAt"),
            _f("endedAt", TIMESTAMP),
        ),
        owner_field="mentorId",
        order_field="startedAt",
    ),
    Entity(
        "communities",
        (
            _req("name"),
            _f("description"),
            _req("category"),
            _req("createdBy", INT),
            _f("memberCount", INT, 1),
            _f("isPublic", BOOL, True),
            _f("imageUrl"),
            _f("rules"),
            _now("createdAt"),
        ),
        owner_field="createdBy",
    ),
    Entity(
        "community_members",
        (
            _req("communityId", INT),
            _req("userId", INT),
            _f("role", TEXT, "member"),
            _now("joinedAt"),
        ),
    ),
    Entity(
        "bank_accounts",
        (
            _req("userId", INT),
            _req("bankName"),
            _req("accountType"),
            _f("accountNumber"),
            _f("balance", DECIMAL),
            _f("isActive", BOOL, True),
            _f("isPrimary", BOOL, False),
            _f("lastSyncAt", TIMESTAMP),
            _now("createdAt"),
        ),
        active_field="isActive",
    ),
    Entity(
        "bill_splits",
        (
            _req("createdBy", INT),
            _req("title"),
            _req("totalAmount", DECIMAL),
            _f("description"),
            _f("type", TEXT, "equal"),
            _f("status", TEXT, "pending"),
            _f("dueDate", TIMESTAMP),
            _now("createdAt"),
        ),
        owner_field="createdBy",
        order_field="createdAt",
    ),
    Entity(
        "bill_split_members",
        (
            _req("billId", INT),
            _req("userId", INT),
            _req("owedAmount", DECIMAL),
            _f("paidAmount", DECIMAL, "0.00"),
            _f("status", TEXT, "pending"),
            _f("paidAt", TIMESTAMP),
        ),
    ),
    Entity(
        "scheduled_payments",
        (
            _req("userId", INT),
            _req("title"),
            _req("amount", DECIMAL),
            _req("recipientUpi"),
            _req("frequency"),
            _req("nextPaymentDate", TIMESTAMP),
            _f("endDate", TIMESTAMP),
            _f("isActive", BOOL, True),
            _f("autoExecute", BOOL, False),
            _now("createdAt"),
        ),
        active_field="isActive",
    ),
    Entity(
        "education_modules",
        (
            _req("title"),
            _f("description"),
            _req("category"),
            _req("level"),
            _req("content"),
            _f("videoUrl"),
            _f("duration", INT),
            _f("prerequisiteIds", JSON),
            _f("rewardPoints", INT, 0),
            _f("isActive", BOOL, True),
            _now("createdAt"),
        ),
        owner_field=None,
        active_field="isActive",
    ),
    Entity(
        "user_education",
        (
            _req("userId", INT),
            _req("moduleId", INT),
            _f("progress", DECIMAL, "0.00"),
            _f("isCompleted", BOOL, False),
            _f("completedAt", TIMESTAMP),
            _now("lastAccessedAt"),
            _f("timeSpent", INT, 0),
        ),
    ),
    Entity(
        "quiz_questions",
        (
            _req("moduleId", INT),
            _req("question"),
            _req("options", JSON),
            _req("correctAnswer", INT),
            _f("explanation"),
            _f("difficulty", TEXT, "medium"),
            _f("isActive", BOOL, True),
        ),
        owner_field=None,
        active_field="isActive",
    ),
    Entity(
        "quiz_attempts",
        (
            _req("userId", INT),
            _req("moduleId", INT),
            _req("score", DECIMAL),
            _req("totalQuestions", INT),
            _req("correctAnswers", INT),
            _f("timeSpent", INT),
            _f("isPassed", BOOL, False),
            _now("attemptedAt"),
        ),
        order_field="attemptedAt",
    ),
)

_REGISTRY: Dict[str, Entity] = {entity.name: entity for entity in ENTITIES}


def get_entity(name: str) -> Entity:
    """Look up an entity declaration by table name."""
    try:
        return _REGISTRY[name]
    except KeyError:
        raise KeyError(f"Unknown entity {name!r}") from None
