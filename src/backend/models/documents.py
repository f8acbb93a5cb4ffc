"""
Gamification document models for AlumniConnect.

These Pydantic models define the in-memory state of a member session and the
flat payload persisted to client-local storage. Catalog documents
(achievements, challenges) are shared across sessions; everything under
GamificationState belongs to exactly one member.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Enums
# ============================================================================


class UserRole(str, Enum):
    """Portal member role."""

    ALUMNI = "alumni"
    STUDENT = "student"
    ADMIN = "admin"


class UserLevel(str, Enum):
    """Level tiers, ordered from lowest to highest."""

    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"
    DIAMOND = "Diamond"


class AchievementCategory(str, Enum):
    """Achievement grouping shown in the achievement gallery."""

    PROFILE = "profile"
    MENTORSHIP = "mentorship"
    EVENTS = "events"
    DONATIONS = "donations"
    NETWORKING = "networking"
    SPECIAL = "special"


class ChallengeCategory(str, Enum):
    """Challenge cadence."""

    MONTHLY = "monthly"
    SEASONAL = "seasonal"
    SPECIAL = "special"


class LeaderboardCategory(str, Enum):
    """Leaderboard views."""

    OVERALL = "overall"
    MONTHLY = "monthly"
    MENTORSHIP = "mentorship"
    EVENTS = "events"
    DONATIONS = "donations"


class TransactionKind(str, Enum):
    """
    Origin of a points transaction.

    Only ACTION transactions feed achievement evaluation; REWARD transactions
    (achievement payouts, opening balances) are bookkeeping of rewards already
    decided and never trigger further unlocks.
    """

    ACTION = "action"
    REWARD = "reward"


class ActionType(str, Enum):
    """Action tags carried by transactions and matched by achievement/challenge rules."""

    DAILY_LOGIN = "daily_login"
    WEEKLY_LOGIN_STREAK = "weekly_login_streak"
    EVENT_ATTENDED = "event_attended"
    MENTORSHIP_REQUEST = "mentorship_request"
    DONATION_MADE = "donation_made"
    CHALLENGE_COMPLETED = "challenge_completed"
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
    OPENING_BALANCE = "opening_balance"


# Rule tag for point-threshold achievements (compared against total points,
# never against a transaction action)
POINTS_TOTAL_RULE = "points_total"


# ============================================================================
# Catalog Documents
# ============================================================================


class AchievementDocument(BaseModel):
    """
    Achievement definition.

    Catalog entries are immutable. ``required_action`` is either an action tag
    (counted over the member's action transactions) or ``points_total``
    (compared against total points).
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    title: str
    description: str
    icon: str  # Emoji or icon code
    category: AchievementCategory
    points: int = 0

    # Trigger rule
    required_action: str
    required_count: int = 1


class ChallengeDocument(BaseModel):
    """
    Time-boxed, opt-in challenge.

    Immutable apart from ``participants`` and ``is_active``.
    """

    model_config = ConfigDict(use_enum_values=True)

    id: str
    title: str
    description: str
    icon: str
    category: ChallengeCategory
    points: int = 0

    # Active window, half-open: [start_date, end_date)
    start_date: datetime
    end_date: datetime

    target_action: str
    target_count: int = 1

    participants: list[str] = Field(default_factory=list)
    is_active: bool = True

    def is_open(self, now: datetime) -> bool:
        """Check whether the challenge accepts participants at ``now``."""
        return self.is_active and self.start_date <= now < self.end_date


# ============================================================================
# Member Documents
# ============================================================================


class UserAchievementDocument(BaseModel):
    """Unlock record, created once per member per achievement."""

    achievement_id: str
    unlocked_at: Optional[datetime] = None
    progress: int = 0


class UserChallengeDocument(BaseModel):
    """Member progress on a joined challenge."""

    challenge_id: str
    progress: int = 0
    completed: bool = False
    completed_at: Optional[datetime] = None


class UserDocument(BaseModel):
    """
    Portal member with gamification fields.

    This is the flat object persisted to client-local storage.
    ``current_level`` is derived from ``total_points`` and is only ever
    written by the engine.
    """

    model_config = ConfigDict(use_enum_values=True)

    id: str
    name: str
    email: str
    role: UserRole

    department: Optional[str] = None
    graduation_year: Optional[int] = None

    # Gamification stats
    total_points: int = Field(default=0, ge=0)
    current_level: UserLevel = UserLevel.BRONZE
    achievements: list[UserAchievementDocument] = Field(default_factory=list)
    challenges: list[UserChallengeDocument] = Field(default_factory=list)
    login_streak: int = 0
    longest_streak: int = 0
    last_login_date: Optional[datetime] = None

    def get_user_achievement(self, achievement_id: str) -> Optional[UserAchievementDocument]:
        for user_achievement in self.achievements:
            if user_achievement.achievement_id == achievement_id:
                return user_achievement
        return None

    def get_user_challenge(self, challenge_id: str) -> Optional[UserChallengeDocument]:
        for user_challenge in self.challenges:
            if user_challenge.challenge_id == challenge_id:
                return user_challenge
        return None

    def has_unlocked(self, achievement_id: str) -> bool:
        """An achievement counts as unlocked only once it carries an unlock timestamp."""
        user_achievement = self.get_user_achievement(achievement_id)
        return user_achievement is not None and user_achievement.unlocked_at is not None


# ============================================================================
# Points Transaction Document
# ============================================================================


class PointsTransactionDocument(BaseModel):
    """
    Append-only ledger entry.

    Frozen: entries are never mutated once written.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    points: int  # Signed; only grants are recorded today
    reason: str
    action: str
    kind: TransactionKind = TransactionKind.ACTION
    timestamp: datetime

    # Event, donation, challenge or achievement the points came from
    related_id: Optional[str] = None


# ============================================================================
# Leaderboard Documents
# ============================================================================


class LeaderboardEntryDocument(BaseModel):
    """Ranked leaderboard row."""

    model_config = ConfigDict(use_enum_values=True)

    user_id: str
    user_name: str
    user_role: UserRole
    points: int
    level: UserLevel
    department: Optional[str] = None
    graduation_year: Optional[int] = None
    rank: int


class LeaderboardDocument(BaseModel):
    """Derived, read-only ranking for one category."""

    model_config = ConfigDict(use_enum_values=True)

    id: str
    title: str
    category: LeaderboardCategory
    entries: list[LeaderboardEntryDocument] = Field(default_factory=list)
    last_updated: datetime


# ============================================================================
# Session State
# ============================================================================


class GamificationState(BaseModel):
    """
    Everything the engine reads and writes for one member session.

    Passed explicitly into every engine operation; operations return a new
    state instead of mutating this one.
    """

    user: UserDocument
    point_transactions: list[PointsTransactionDocument] = Field(default_factory=list)
    all_challenges: list[ChallengeDocument] = Field(default_factory=list)
    leaderboards: list[LeaderboardDocument] = Field(default_factory=list)

    def get_challenge(self, challenge_id: str) -> Optional[ChallengeDocument]:
        for challenge in self.all_challenges:
            if challenge.id == challenge_id:
                return challenge
        return None

    def get_leaderboard(self, category: LeaderboardCategory | str) -> Optional[LeaderboardDocument]:
        value = category.value if isinstance(category, LeaderboardCategory) else category
        for leaderboard in self.leaderboards:
            if leaderboard.category == value:
                return leaderboard
        return None


class GamificationStats(BaseModel):
    """Summary shown on the member dashboard."""

    model_config = ConfigDict(use_enum_values=True)

    total_points: int
    current_level: UserLevel
    points_to_next_level: int
    achievements_unlocked: int
    total_achievements: int
    current_streak: int
    longest_streak: int
    rank: int
