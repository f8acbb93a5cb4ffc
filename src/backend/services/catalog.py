"""
Achievement and challenge catalogs.

Achievements are a process-wide constant set. Challenges are rebuilt per
process with windows anchored on the current month and quarter, since a
challenge catalog with fixed dates goes stale.
"""

from datetime import datetime, timedelta
from typing import Any, Iterable

from models.documents import (
    POINTS_TOTAL_RULE,
    AchievementCategory,
    AchievementDocument,
    ActionType,
    ChallengeCategory,
    ChallengeDocument,
    UserRole,
)

_ACHIEVEMENTS: list[dict[str, Any]] = [
    # === PROFILE ===
    {
        "id": "first_login",
        "title": "Welcome Aboard",
        "description": "Log in to the alumni network for the first time",
        "icon": "👋",
        "category": AchievementCategory.PROFILE,
        "points": 10,
        "required_action": ActionType.DAILY_LOGIN.value,
        "required_count": 1,
    },
    {
        "id": "week_warrior",
        "title": "Week Warrior",
        "description": "Keep a 7-day login streak",
        "icon": "🔥",
        "category": AchievementCategory.PROFILE,
        "points": 50,
        "required_action": ActionType.WEEKLY_LOGIN_STREAK.value,
        "required_count": 1,
    },
    # === MENTORSHIP ===
    {
        "id": "first_mentorship",
        "title": "Seeking Guidance",
        "description": "Send your first mentorship request",
        "icon": "🤝",
        "category": AchievementCategory.MENTORSHIP,
        "points": 25,
        "required_action": ActionType.MENTORSHIP_REQUEST.value,
        "required_count": 1,
    },
    {
        "id": "mentorship_champion",
        "title": "Mentorship Champion",
        "description": "Send 5 mentorship requests",
        "icon": "🏅",
        "category": AchievementCategory.MENTORSHIP,
        "points": 100,
        "required_action": ActionType.MENTORSHIP_REQUEST.value,
        "required_count": 5,
    },
    # === EVENTS ===
    {
        "id": "event_explorer",
        "title": "Event Explorer",
        "description": "RSVP to your first alumni event",
        "icon": "🎟️",
        "category": AchievementCategory.EVENTS,
        "points": 25,
        "required_action": ActionType.EVENT_ATTENDED.value,
        "required_count": 1,
    },
    {
        "id": "event_enthusiast",
        "title": "Event Enthusiast",
        "description": "RSVP to 10 alumni events",
        "icon": "🎉",
        "category": AchievementCategory.EVENTS,
        "points": 100,
        "required_action": ActionType.EVENT_ATTENDED.value,
        "required_count": 10,
    },
    # === DONATIONS ===
    {
        "id": "generous_heart",
        "title": "Generous Heart",
        "description": "Make your first donation",
        "icon": "💝",
        "category": AchievementCategory.DONATIONS,
        "points": 50,
        "required_action": ActionType.DONATION_MADE.value,
        "required_count": 1,
    },
    {
        "id": "philanthropist",
        "title": "Philanthropist",
        "description": "Make 5 donations",
        "icon": "🏛️",
        "category": AchievementCategory.DONATIONS,
        "points": 150,
        "required_action": ActionType.DONATION_MADE.value,
        "required_count": 5,
    },
    # === NETWORKING ===
    {
        "id": "community_regular",
        "title": "Community Regular",
        "description": "Log in on 30 different days",
        "icon": "🌐",
        "category": AchievementCategory.NETWORKING,
        "points": 150,
        "required_action": ActionType.DAILY_LOGIN.value,
        "required_count": 30,
    },
    # === SPECIAL ===
    {
        "id": "challenge_accepted",
        "title": "Challenge Accepted",
        "description": "Complete your first challenge",
        "icon": "🎯",
        "category": AchievementCategory.SPECIAL,
        "points": 50,
        "required_action": ActionType.CHALLENGE_COMPLETED.value,
        "required_count": 1,
    },
    {
        "id": "rising_star",
        "title": "Rising Star",
        "description": "Reach 500 points",
        "icon": "⭐",
        "category": AchievementCategory.SPECIAL,
        "points": 50,
        "required_action": POINTS_TOTAL_RULE,
        "required_count": 500,
    },
    {
        "id": "community_pillar",
        "title": "Community Pillar",
        "description": "Reach 1,000 points",
        "icon": "🏆",
        "category": AchievementCategory.SPECIAL,
        "points": 100,
        "required_action": POINTS_TOTAL_RULE,
        "required_count": 1000,
    },
    {
        "id": "alumni_legend",
        "title": "Alumni Legend",
        "description": "Reach 2,000 points",
        "icon": "👑",
        "category": AchievementCategory.SPECIAL,
        "points": 200,
        "required_action": POINTS_TOTAL_RULE,
        "required_count": 2000,
    },
]

ACHIEVEMENT_CATALOG: tuple[AchievementDocument, ...] = tuple(
    AchievementDocument(**data) for data in _ACHIEVEMENTS
)

# Categories visible per role; admins do not take part in gamification
ROLE_ACHIEVEMENT_CATEGORIES: dict[str, set[str]] = {
    UserRole.ALUMNI.value: {category.value for category in AchievementCategory},
    UserRole.STUDENT.value: {
        AchievementCategory.PROFILE.value,
        AchievementCategory.EVENTS.value,
        AchievementCategory.NETWORKING.value,
        AchievementCategory.SPECIAL.value,
    },
    UserRole.ADMIN.value: set(),
}

ROLE_CHALLENGE_CATEGORIES: dict[str, set[str]] = {
    UserRole.ALUMNI.value: {ChallengeCategory.MONTHLY.value, ChallengeCategory.SPECIAL.value},
    UserRole.STUDENT.value: {ChallengeCategory.SEASONAL.value, ChallengeCategory.SPECIAL.value},
    UserRole.ADMIN.value: set(),
}


def _month_window(now: datetime) -> tuple[datetime, datetime]:
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def _quarter_window(now: datetime) -> tuple[datetime, datetime]:
    first_month = 3 * ((now.month - 1) // 3) + 1
    start = now.replace(month=first_month, day=1, hour=0, minute=0, second=0, microsecond=0)
    if first_month == 10:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=first_month + 3)
    return start, end


def build_challenge_catalog(now: datetime) -> list[ChallengeDocument]:
    """Build the challenge catalog with windows covering ``now``."""
    month_start, month_end = _month_window(now)
    quarter_start, quarter_end = _quarter_window(now)
    special_start = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=7)
    special_end = special_start + timedelta(days=37)

    return [
        ChallengeDocument(
            id="monthly_mentor",
            title="Mentorship Month",
            description="Send 3 mentorship requests this month",
            icon="🧭",
            category=ChallengeCategory.MONTHLY,
            points=100,
            start_date=month_start,
            end_date=month_end,
            target_action=ActionType.MENTORSHIP_REQUEST.value,
            target_count=3,
        ),
        ChallengeDocument(
            id="monthly_events",
            title="Event Marathon",
            description="RSVP to 5 events this month",
            icon="🏃",
            category=ChallengeCategory.MONTHLY,
            points=150,
            start_date=month_start,
            end_date=month_end,
            target_action=ActionType.EVENT_ATTENDED.value,
            target_count=5,
        ),
        ChallengeDocument(
            id="seasonal_giving",
            title="Season of Giving",
            description="Make 3 donations this season",
            icon="🎁",
            category=ChallengeCategory.SEASONAL,
            points=200,
            start_date=quarter_start,
            end_date=quarter_end,
            target_action=ActionType.DONATION_MADE.value,
            target_count=3,
        ),
        ChallengeDocument(
            id="seasonal_devotion",
            title="Daily Devotion",
            description="Log in on 20 days this season",
            icon="📅",
            category=ChallengeCategory.SEASONAL,
            points=120,
            start_date=quarter_start,
            end_date=quarter_end,
            target_action=ActionType.DAILY_LOGIN.value,
            target_count=20,
        ),
        ChallengeDocument(
            id="special_reunion",
            title="Reunion Rally",
            description="RSVP to the annual alumni reunion",
            icon="🎓",
            category=ChallengeCategory.SPECIAL,
            points=75,
            start_date=special_start,
            end_date=special_end,
            target_action=ActionType.EVENT_ATTENDED.value,
            target_count=1,
        ),
    ]


def achievements_for_role(
    achievements: Iterable[AchievementDocument], role: UserRole | str
) -> list[AchievementDocument]:
    """Filter achievements to the categories a role can see."""
    allowed = ROLE_ACHIEVEMENT_CATEGORIES.get(UserRole(role).value, set())
    return [a for a in achievements if a.category in allowed]


def challenges_for_role(
    challenges: Iterable[ChallengeDocument], role: UserRole | str, now: datetime
) -> list[ChallengeDocument]:
    """Filter challenges to open ones in the categories a role can see."""
    allowed = ROLE_CHALLENGE_CATEGORIES.get(UserRole(role).value, set())
    return [c for c in challenges if c.category in allowed and c.is_open(now)]
