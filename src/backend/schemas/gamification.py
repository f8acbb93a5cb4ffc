"""
Gamification-related Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserProgress(BaseModel):
    """Member's gamification progress."""
    user_id: str
    total_points: int
    current_level: str
    next_level: Optional[str]
    points_to_next_level: int
    level_progress: float
    achievements_unlocked: int
    total_achievements: int
    current_streak: int
    longest_streak: int
    rank: int


class LevelDefinitionResponse(BaseModel):
    """A level tier and its threshold."""
    level: str
    points_required: int
    icon: str


class AchievementStatus(BaseModel):
    """An achievement with the member's progress toward it."""
    id: str
    title: str
    description: str
    icon: str
    category: str
    points: int
    required_action: str
    required_count: int
    is_unlocked: bool
    unlocked_at: Optional[datetime]
    progress: int


class ChallengeStatus(BaseModel):
    """A challenge with the member's participation."""
    id: str
    title: str
    description: str
    icon: str
    category: str
    points: int
    start_date: datetime
    end_date: datetime
    target_action: str
    target_count: int
    participant_count: int
    is_active: bool
    is_joined: bool
    progress: int = 0
    completed: bool = False
    completed_at: Optional[datetime] = None


class ChallengeProgressRequest(BaseModel):
    """Request to report progress on a joined challenge."""
    progress: int = Field(..., ge=0)


class LeaderboardEntry(BaseModel):
    """A single entry on a leaderboard."""
    rank: int
    user_id: str
    user_name: str
    user_role: str
    points: int
    level: str
    department: Optional[str] = None
    graduation_year: Optional[int] = None


class LeaderboardResponse(BaseModel):
    """A ranked leaderboard."""
    id: str
    title: str
    category: str
    entries: list[LeaderboardEntry]
    total_participants: int
    last_updated: datetime


class PointsTransaction(BaseModel):
    """A record of points earned."""
    id: str
    points: int
    reason: str
    action: str
    kind: str
    timestamp: datetime
    related_id: Optional[str] = None


class ActionResponse(BaseModel):
    """Outcome of an action that can earn points."""
    points_earned: int
    total_points: int
    current_level: str
    leveled_up: bool
    new_achievements: list[str]
    completed_challenges: list[str]
    message: str


class DonationRequest(BaseModel):
    """Request to record a donation."""
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    donation_id: Optional[str] = None
    cause: Optional[str] = None


class EventRsvpRequest(BaseModel):
    """Request to record an event RSVP."""
    event_id: str = Field(..., min_length=1)
    event_title: Optional[str] = None


class MentorshipRequestCreate(BaseModel):
    """Request to record a mentorship request."""
    mentor_id: str = Field(..., min_length=1)
    mentor_name: Optional[str] = None


class LoginRequest(BaseModel):
    """Record a successful login for a member."""
    user_id: str = Field(..., min_length=1)


class MemberResponse(BaseModel):
    """Signed-in member profile with gamification fields."""
    id: str
    name: str
    email: str
    role: str
    department: Optional[str] = None
    graduation_year: Optional[int] = None
    total_points: int
    current_level: str
    login_streak: int
    longest_streak: int
    last_login_date: Optional[datetime] = None


class LoginResponse(BaseModel):
    """Response after a login is recorded."""
    user: MemberResponse
    action: ActionResponse
