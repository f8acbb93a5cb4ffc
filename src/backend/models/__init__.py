"""Gamification document models."""

from models.documents import (
    POINTS_TOTAL_RULE,
    AchievementCategory,
    AchievementDocument,
    ActionType,
    ChallengeCategory,
    ChallengeDocument,
    GamificationState,
    GamificationStats,
    LeaderboardCategory,
    LeaderboardDocument,
    LeaderboardEntryDocument,
    PointsTransactionDocument,
    TransactionKind,
    UserAchievementDocument,
    UserChallengeDocument,
    UserDocument,
    UserLevel,
    UserRole,
)

__all__ = [
    "POINTS_TOTAL_RULE",
    "AchievementCategory",
    "AchievementDocument",
    "ActionType",
    "ChallengeCategory",
    "ChallengeDocument",
    "GamificationState",
    "GamificationStats",
    "LeaderboardCategory",
    "LeaderboardDocument",
    "LeaderboardEntryDocument",
    "PointsTransactionDocument",
    "TransactionKind",
    "UserAchievementDocument",
    "UserChallengeDocument",
    "UserDocument",
    "UserLevel",
    "UserRole",
]
