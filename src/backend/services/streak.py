"""
Login streak calculation.
"""

from datetime import date, datetime, timezone
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo


class StreakUpdate(NamedTuple):
    """Outcome of a login for streak purposes."""

    streak: int
    first_login_today: bool


def local_date(moment: datetime, tz_name: str = "UTC") -> date:
    """Calendar date of ``moment`` in ``tz_name`` (naive datetimes are taken as UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz_name)).date()


def calculate_new_streak(
    last_login: Optional[datetime],
    current_streak: int,
    now: datetime,
    tz_name: str = "UTC",
) -> StreakUpdate:
    """
    Calculate the login streak based on the last login time.

    Streak rules:
    - First login ever: streak = 1
    - Logged in earlier today: streak unchanged, not a new day
    - Logged in yesterday: streak + 1
    - Anything older: streak resets to 1
    """
    if last_login is None:
        return StreakUpdate(streak=1, first_login_today=True)

    days_since_last_login = (local_date(now, tz_name) - local_date(last_login, tz_name)).days

    if days_since_last_login == 0:
        return StreakUpdate(streak=current_streak, first_login_today=False)
    elif days_since_last_login == 1:
        return StreakUpdate(streak=current_streak + 1, first_login_today=True)
    else:
        return StreakUpdate(streak=1, first_login_today=True)


def streak_bonus_due(streak: int, threshold: int, policy: str) -> bool:
    """
    Decide whether a first login of the day earns the streak bonus.

    ``daily`` pays every day the streak is at or above the threshold;
    ``weekly`` pays each time the streak reaches a multiple of it.
    """
    if streak < threshold:
        return False
    if policy == "daily":
        return True
    return streak % threshold == 0
