"""Schemas module initialization."""

from schemas.gamification import (
    AchievementStatus,
    ActionResponse,
    ChallengeProgressRequest,
    ChallengeStatus,
    DonationRequest,
    EventRsvpRequest,
    LeaderboardEntry,
    LeaderboardResponse,
    LevelDefinitionResponse,
    LoginRequest,
    LoginResponse,
    MemberResponse,
    MentorshipRequestCreate,
    PointsTransaction,
    UserProgress,
)

__all__ = [
    "AchievementStatus",
    "ActionResponse",
    "ChallengeProgressRequest",
    "ChallengeStatus",
    "DonationRequest",
    "EventRsvpRequest",
    "LeaderboardEntry",
    "LeaderboardResponse",
    "LevelDefinitionResponse",
    "LoginRequest",
    "LoginResponse",
    "MemberResponse",
    "MentorshipRequestCreate",
    "PointsTransaction",
    "UserProgress",
]
