"""
Level progression.

Levels are a pure function of cumulative points.
"""

from typing import Optional, TypedDict

from models.documents import UserLevel


class LevelDefinition(TypedDict):
    """Type for level definition entries."""

    level: UserLevel
    points_required: int
    icon: str


# Ordered lowest to highest; each tier spans [points_required, next tier's points_required)
LEVEL_DEFINITIONS: list[LevelDefinition] = [
    {"level": UserLevel.BRONZE, "points_required": 0, "icon": "🥉"},
    {"level": UserLevel.SILVER, "points_required": 200, "icon": "🥈"},
    {"level": UserLevel.GOLD, "points_required": 500, "icon": "🥇"},
    {"level": UserLevel.PLATINUM, "points_required": 1000, "icon": "💎"},
    {"level": UserLevel.DIAMOND, "points_required": 2000, "icon": "💠"},
]


def _index_of(level: UserLevel | str) -> int:
    level = UserLevel(level)
    for index, definition in enumerate(LEVEL_DEFINITIONS):
        if definition["level"] == level:
            return index
    raise ValueError(f"Unknown level: {level}")


def level_for_points(points: int) -> UserLevel:
    """Return the highest level whose threshold ``points`` meets."""
    current = LEVEL_DEFINITIONS[0]["level"]
    for definition in LEVEL_DEFINITIONS:
        if points >= definition["points_required"]:
            current = definition["level"]
        else:
            break
    return current


def next_level(level: UserLevel | str) -> Optional[UserLevel]:
    """Get the level after ``level``, or None at the top tier."""
    index = _index_of(level)
    if index + 1 < len(LEVEL_DEFINITIONS):
        return LEVEL_DEFINITIONS[index + 1]["level"]
    return None


def points_required(level: UserLevel | str) -> int:
    """Get the threshold of ``level``."""
    return LEVEL_DEFINITIONS[_index_of(level)]["points_required"]


def get_points_to_next_level(level: UserLevel | str, points: int) -> int:
    """Calculate points needed to reach the level after ``level`` (0 at Diamond)."""
    upcoming = next_level(level)
    if upcoming is None:
        return 0
    return points_required(upcoming) - points


def level_progress(points: int) -> float:
    """
    Percentage of the way through the current tier, clamped to [0, 100].

    The top tier has no ceiling and always reports 100.
    """
    level = level_for_points(points)
    upcoming = next_level(level)
    if upcoming is None:
        return 100.0

    floor = points_required(level)
    ceiling = points_required(upcoming)
    progress = (points - floor) / (ceiling - floor) * 100
    return min(100.0, max(0.0, progress))


def is_level_up(previous: UserLevel | str, current: UserLevel | str) -> bool:
    """Check whether moving from ``previous`` to ``current`` climbs a tier."""
    return _index_of(current) > _index_of(previous)
