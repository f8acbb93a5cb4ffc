"""
Tests for leaderboard computation.
"""

from datetime import timedelta

import pytest

from models.documents import LeaderboardCategory, PointsTransactionDocument, TransactionKind
from services.leaderboard_service import build_leaderboard, build_leaderboards, find_entry, rank_entries


def txn(user_id: str, points: int, action: str, timestamp) -> PointsTransactionDocument:
    return PointsTransactionDocument(
        user_id=user_id,
        points=points,
        reason="test",
        action=action,
        timestamp=timestamp,
    )


@pytest.mark.unit
class TestRanking:
    """Tests for ordering and ranks."""

    def test_highest_points_first(self, make_user) -> None:
        users = [make_user("a", total_points=10), make_user("b", total_points=300)]

        entries = rank_entries(users, {"a": 10, "b": 300})

        assert [e.user_id for e in entries] == ["b", "a"]
        assert [e.rank for e in entries] == [1, 2]

    def test_ties_broken_by_user_id(self, make_user) -> None:
        """Test equal scores are ordered by id with distinct ranks."""
        users = [make_user("zed"), make_user("amy"), make_user("max")]

        entries = rank_entries(users, {"zed": 50, "amy": 50, "max": 50})

        assert [e.user_id for e in entries] == ["amy", "max", "zed"]
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_entry_carries_member_details(self, make_user) -> None:
        user = make_user("a", total_points=700, department="History", graduation_year=1999)

        entry = rank_entries([user], {"a": 700})[0]

        assert entry.level == "Gold"
        assert entry.department == "History"
        assert entry.graduation_year == 1999
        assert entry.user_role == "alumni"


@pytest.mark.unit
class TestLeaderboards:
    """Tests for each leaderboard category."""

    def test_admins_excluded(self, make_user, fixed_now) -> None:
        users = [make_user("a", total_points=5), make_user("root", role="admin", total_points=9000)]

        board = build_leaderboard(LeaderboardCategory.OVERALL, users, {}, fixed_now)

        assert [e.user_id for e in board.entries] == ["a"]

    def test_overall_uses_total_points(self, make_user, fixed_now) -> None:
        users = [make_user("a", total_points=100), make_user("b", total_points=0)]

        board = build_leaderboard(LeaderboardCategory.OVERALL, users, {}, fixed_now)

        assert [(e.user_id, e.points) for e in board.entries] == [("a", 100), ("b", 0)]
        assert board.last_updated == fixed_now

    def test_monthly_counts_current_month_only(self, make_user, fixed_now) -> None:
        """Test the monthly board sums ledger points earned this month."""
        users = [make_user("a", total_points=500), make_user("b", total_points=90)]
        ledgers = {
            "a": [txn("a", 500, "donation_made", fixed_now - timedelta(days=60))],
            "b": [
                txn("b", 60, "event_attended", fixed_now - timedelta(days=1)),
                txn("b", 30, "event_attended", fixed_now),
            ],
        }

        board = build_leaderboard(LeaderboardCategory.MONTHLY, users, ledgers, fixed_now)

        assert [(e.user_id, e.points) for e in board.entries] == [("b", 90)]

    def test_monthly_skips_opening_balance(self, make_user, fixed_now) -> None:
        """Test points carried into the ledger do not count as earned this month."""
        users = [make_user("a", total_points=645)]
        ledgers = {
            "a": [
                PointsTransactionDocument(
                    user_id="a",
                    points=640,
                    reason="Opening balance",
                    action="opening_balance",
                    kind=TransactionKind.REWARD,
                    timestamp=fixed_now,
                ),
                txn("a", 5, "daily_login", fixed_now),
            ],
        }

        board = build_leaderboard(LeaderboardCategory.MONTHLY, users, ledgers, fixed_now)

        assert [(e.user_id, e.points) for e in board.entries] == [("a", 5)]

    def test_category_board_sums_matching_actions(self, make_user, fixed_now) -> None:
        users = [make_user("a"), make_user("b")]
        ledgers = {
            "a": [txn("a", 25, "mentorship_request", fixed_now)] * 2,
            "b": [txn("b", 30, "event_attended", fixed_now)],
        }

        mentorship = build_leaderboard(LeaderboardCategory.MENTORSHIP, users, ledgers, fixed_now)
        events = build_leaderboard(LeaderboardCategory.EVENTS, users, ledgers, fixed_now)

        assert [(e.user_id, e.points) for e in mentorship.entries] == [("a", 50)]
        assert [(e.user_id, e.points) for e in events.entries] == [("b", 30)]

    def test_build_all_categories(self, make_user, fixed_now) -> None:
        boards = build_leaderboards([make_user("a")], {}, fixed_now)

        assert {b.category for b in boards} == {c.value for c in LeaderboardCategory}

    def test_find_entry(self, make_user, fixed_now) -> None:
        board = build_leaderboard(LeaderboardCategory.OVERALL, [make_user("a")], {}, fixed_now)

        assert find_entry(board, "a").rank == 1
        assert find_entry(board, "missing") is None
        assert find_entry(None, "a") is None
