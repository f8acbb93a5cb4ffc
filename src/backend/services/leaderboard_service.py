"""
Leaderboard computation.

Leaderboards are derived views over members' point totals and ledgers. They
are recomputed on demand and read as snapshots; nothing here is live.
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

from models.documents import (
    ActionType,
    LeaderboardCategory,
    LeaderboardDocument,
    LeaderboardEntryDocument,
    PointsTransactionDocument,
    UserDocument,
    UserRole,
)
from services.levels import level_for_points

LEADERBOARD_TITLES: dict[LeaderboardCategory, str] = {
    LeaderboardCategory.OVERALL: "Overall Champions",
    LeaderboardCategory.MONTHLY: "This Month's Leaders",
    LeaderboardCategory.MENTORSHIP: "Mentorship Leaders",
    LeaderboardCategory.EVENTS: "Event Enthusiasts",
    LeaderboardCategory.DONATIONS: "Top Donors",
}

# Action tags whose points count toward each category board
CATEGORY_ACTIONS: dict[LeaderboardCategory, str] = {
    LeaderboardCategory.MENTORSHIP: ActionType.MENTORSHIP_REQUEST.value,
    LeaderboardCategory.EVENTS: ActionType.EVENT_ATTENDED.value,
    LeaderboardCategory.DONATIONS: ActionType.DONATION_MADE.value,
}


def rank_entries(
    users: Iterable[UserDocument],
    points_by_user: Mapping[str, int],
) -> list[LeaderboardEntryDocument]:
    """
    Rank members by points, highest first.

    Ties are broken by user id so equal scores always come out in the same
    order; rank is the 1-based position in that order.
    """
    ordered = sorted(users, key=lambda u: (-points_by_user.get(u.id, 0), u.id))

    entries = []
    for rank, user in enumerate(ordered, start=1):
        points = points_by_user.get(user.id, 0)
        entries.append(
            LeaderboardEntryDocument(
                user_id=user.id,
                user_name=user.name,
                user_role=user.role,
                points=points,
                level=level_for_points(user.total_points),
                department=user.department,
                graduation_year=user.graduation_year,
                rank=rank,
            )
        )
    return entries


def _points_where(transactions: Iterable[PointsTransactionDocument], predicate) -> int:
    return sum(t.points for t in transactions if predicate(t))


def build_leaderboard(
    category: LeaderboardCategory,
    users: Sequence[UserDocument],
    ledgers: Mapping[str, Sequence[PointsTransactionDocument]],
    now: datetime,
) -> LeaderboardDocument:
    """Build one leaderboard. Admins never appear on a leaderboard."""
    members = [u for u in users if u.role != UserRole.ADMIN]

    if category == LeaderboardCategory.OVERALL:
        points_by_user = {u.id: u.total_points for u in members}
    elif category == LeaderboardCategory.MONTHLY:
        # Opening balances carry points earned before the ledger began
        points_by_user = {
            u.id: _points_where(
                ledgers.get(u.id, ()),
                lambda t: (
                    t.action != ActionType.OPENING_BALANCE.value
                    and t.timestamp.year == now.year
                    and t.timestamp.month == now.month
                ),
            )
            for u in members
        }
    else:
        action = CATEGORY_ACTIONS[category]
        points_by_user = {
            u.id: _points_where(ledgers.get(u.id, ()), lambda t: t.action == action)
            for u in members
        }

    if category != LeaderboardCategory.OVERALL:
        # Category boards list only members who scored in that category
        members = [u for u in members if points_by_user.get(u.id, 0) > 0]

    return LeaderboardDocument(
        id=f"leaderboard_{category.value}",
        title=LEADERBOARD_TITLES[category],
        category=category,
        entries=rank_entries(members, points_by_user),
        last_updated=now,
    )


def build_leaderboards(
    users: Sequence[UserDocument],
    ledgers: Mapping[str, Sequence[PointsTransactionDocument]],
    now: datetime,
) -> list[LeaderboardDocument]:
    """Build every leaderboard category."""
    return [build_leaderboard(category, users, ledgers, now) for category in LeaderboardCategory]


def find_entry(leaderboard: Optional[LeaderboardDocument], user_id: str) -> Optional[LeaderboardEntryDocument]:
    """Find a member's row on a leaderboard."""
    if leaderboard is None:
        return None
    for entry in leaderboard.entries:
        if entry.user_id == user_id:
            return entry
    return None
