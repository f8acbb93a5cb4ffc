"""
Gamification engine.

Awards points, recomputes levels, unlocks achievements, tracks challenge
progress and login streaks for one member session.

Every public operation takes a GamificationState and returns an EngineResult
holding a new state plus the events that happened; the state passed in is
never modified. Listeners registered with ``subscribe`` are notified once the
operation has finished.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from core.config import Settings, settings as default_settings
from models.documents import (
    POINTS_TOTAL_RULE,
    AchievementDocument,
    ActionType,
    ChallengeDocument,
    GamificationState,
    GamificationStats,
    LeaderboardCategory,
    LeaderboardDocument,
    PointsTransactionDocument,
    TransactionKind,
    UserAchievementDocument,
    UserChallengeDocument,
    UserDocument,
    UserLevel,
)
from services.catalog import ACHIEVEMENT_CATALOG
from services.levels import get_points_to_next_level, is_level_up, level_for_points
from services.streak import calculate_new_streak, streak_bonus_due

logger = structlog.get_logger(__name__)


class GamificationError(Exception):
    """Base exception for gamification operations."""

    pass


class AchievementNotFoundError(GamificationError):
    """Achievement id is not in the catalog."""

    pass


class ChallengeNotFoundError(GamificationError):
    """Challenge id is not in the catalog."""

    pass


class ChallengeNotActiveError(GamificationError):
    """Challenge is switched off or outside its date window."""

    pass


class ChallengeNotJoinedError(GamificationError):
    """Member has not joined the challenge."""

    pass


class InvalidPointsError(GamificationError):
    """Points change would take the member's total below zero."""

    pass


class InvalidActivityError(GamificationError):
    """Reported activity carries unusable values."""

    pass


class EventType(str, Enum):
    """Things subscribers can react to."""

    POINTS_AWARDED = "points_awarded"
    LEVEL_UP = "level_up"
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
    CHALLENGE_JOINED = "challenge_joined"
    CHALLENGE_COMPLETED = "challenge_completed"


class GamificationEvent(BaseModel):
    """Notification emitted by an engine operation."""

    type: EventType
    user_id: str
    occurred_at: datetime
    data: dict[str, Any] = Field(default_factory=dict)


class EngineResult(BaseModel):
    """New state produced by an engine operation."""

    state: GamificationState
    events: list[GamificationEvent] = Field(default_factory=list)
    transactions: list[PointsTransactionDocument] = Field(default_factory=list)

    @property
    def unlocked_achievement_ids(self) -> list[str]:
        return [
            e.data["achievement_id"] for e in self.events if e.type == EventType.ACHIEVEMENT_UNLOCKED
        ]

    @property
    def completed_challenge_ids(self) -> list[str]:
        return [
            e.data["challenge_id"] for e in self.events if e.type == EventType.CHALLENGE_COMPLETED
        ]

    @property
    def leveled_up(self) -> bool:
        return any(e.type == EventType.LEVEL_UP for e in self.events)

    @property
    def points_earned(self) -> int:
        return sum(t.points for t in self.transactions)


Listener = Callable[[GamificationEvent], None]


class _Operation:
    """Working copy of a state plus the events one operation produces."""

    def __init__(self, state: GamificationState, now: datetime):
        self.state = state.model_copy(deep=True)
        self.now = now
        self.events: list[GamificationEvent] = []
        self._ledger_start = len(self.state.point_transactions)

    @property
    def user(self) -> UserDocument:
        return self.state.user

    def emit(self, event_type: EventType, **data: Any) -> None:
        self.events.append(
            GamificationEvent(type=event_type, user_id=self.user.id, occurred_at=self.now, data=data)
        )

    def result(self) -> EngineResult:
        return EngineResult(
            state=self.state,
            events=self.events,
            transactions=self.state.point_transactions[self._ledger_start :],
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _tag(action: str) -> str:
    return action.value if isinstance(action, Enum) else action


class GamificationEngine:
    """Engine for awarding points, achievements and challenge rewards."""

    def __init__(
        self,
        achievements: Optional[Iterable[AchievementDocument]] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._achievements: tuple[AchievementDocument, ...] = tuple(
            ACHIEVEMENT_CATALOG if achievements is None else achievements
        )
        self._settings = settings or default_settings
        self._clock = clock or _utcnow
        self._listeners: list[Listener] = []

    # ========================================================================
    # Catalog & Subscriptions
    # ========================================================================

    @property
    def achievements(self) -> tuple[AchievementDocument, ...]:
        """The immutable achievement catalog."""
        return self._achievements

    def get_achievement(self, achievement_id: str) -> Optional[AchievementDocument]:
        for achievement in self._achievements:
            if achievement.id == achievement_id:
                return achievement
        return None

    def subscribe(self, listener: Listener) -> None:
        """Register a callback for every event emitted after an operation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ========================================================================
    # Session Setup
    # ========================================================================

    def open_session(
        self,
        user: UserDocument,
        transactions: Sequence[PointsTransactionDocument] = (),
        challenges: Sequence[ChallengeDocument] = (),
        leaderboards: Sequence[LeaderboardDocument] = (),
    ) -> GamificationState:
        """
        Build the state for a member session.

        The level is recomputed from the stored total. When the stored total
        is not backed by the ledger (members carried over from before the
        ledger existed, or rehydrated from storage), the difference is booked
        as a single opening-balance reward so the ledger sums to the total.
        """
        user = user.model_copy(deep=True)
        user.current_level = level_for_points(user.total_points).value
        ledger = [t for t in transactions if t.user_id == user.id]

        state = GamificationState(
            user=user,
            point_transactions=ledger,
            all_challenges=[c.model_copy(deep=True) for c in challenges],
            leaderboards=list(leaderboards),
        )

        difference = user.total_points - sum(t.points for t in ledger)
        if difference:
            state.point_transactions.append(
                PointsTransactionDocument(
                    user_id=user.id,
                    points=difference,
                    reason="Opening balance",
                    action=ActionType.OPENING_BALANCE.value,
                    kind=TransactionKind.REWARD,
                    timestamp=self._clock(),
                )
            )
            logger.info("opening_balance_booked", user_id=user.id, points=difference)

        return state

    # ========================================================================
    # Points
    # ========================================================================

    def add_points(
        self,
        state: GamificationState,
        points: int,
        reason: str,
        action: str,
        related_id: Optional[str] = None,
    ) -> EngineResult:
        """
        Award points for a member action.

        Appends an action transaction, recomputes the level, then evaluates
        achievements for ``action``. With challenge auto-tracking on, joined
        challenges targeting ``action`` advance by one.
        """
        op = _Operation(state, self._clock())
        self._add_points(op, points, reason, action, related_id)
        return self._finish(op)

    def check_achievements(self, state: GamificationState, action: str) -> EngineResult:
        """Unlock every achievement whose rule is met for ``action``."""
        op = _Operation(state, self._clock())
        self._evaluate_achievements(op, _tag(action))
        return self._finish(op)

    def _add_points(
        self,
        op: _Operation,
        points: int,
        reason: str,
        action: str,
        related_id: Optional[str],
    ) -> None:
        action = _tag(action)
        self._book(op, points, reason, action, TransactionKind.ACTION, related_id)
        self._evaluate_achievements(op, action)
        if self._settings.AUTO_TRACK_CHALLENGES:
            self._track_challenges(op, action)

    def _book(
        self,
        op: _Operation,
        points: int,
        reason: str,
        action: str,
        kind: TransactionKind,
        related_id: Optional[str],
    ) -> PointsTransactionDocument:
        """Append a transaction and apply it to the member's total and level."""
        user = op.user
        if user.total_points + points < 0:
            raise InvalidPointsError(
                f"Cannot apply {points} points to a total of {user.total_points}"
            )

        transaction = PointsTransactionDocument(
            user_id=user.id,
            points=points,
            reason=reason,
            action=action,
            kind=kind,
            timestamp=op.now,
            related_id=related_id,
        )
        op.state.point_transactions.append(transaction)

        previous_level = user.current_level
        user.total_points += points
        user.current_level = level_for_points(user.total_points).value
        op.emit(
            EventType.POINTS_AWARDED,
            transaction_id=transaction.id,
            points=points,
            action=action,
            total_points=user.total_points,
        )

        if user.current_level != previous_level:
            op.emit(
                EventType.LEVEL_UP,
                previous_level=UserLevel(previous_level).value,
                new_level=user.current_level,
                promoted=is_level_up(previous_level, user.current_level),
            )

        return transaction

    # ========================================================================
    # Achievements
    # ========================================================================

    def _evaluate_achievements(self, op: _Operation, action: str) -> None:
        """
        Unlock achievements whose rule is met.

        Counts only action transactions, and compares point thresholds against
        the total as it stood before this pass paid out any rewards.
        """
        user = op.user
        action_count = sum(
            1
            for t in op.state.point_transactions
            if t.kind == TransactionKind.ACTION and t.action == action
        )
        total_points = user.total_points

        for achievement in self._achievements:
            if user.has_unlocked(achievement.id):
                continue

            if achievement.required_action == POINTS_TOTAL_RULE:
                if total_points >= achievement.required_count:
                    self._unlock(op, achievement, progress=total_points)
            elif achievement.required_action == action:
                if action_count >= achievement.required_count:
                    self._unlock(op, achievement, progress=action_count)

    def unlock_achievement(self, state: GamificationState, achievement_id: str) -> EngineResult:
        """
        Unlock an achievement and pay out its reward.

        Unlocking an achievement the member already has is a no-op.

        Raises:
            AchievementNotFoundError: If the id is not in the catalog.
        """
        achievement = self.get_achievement(achievement_id)
        if achievement is None:
            raise AchievementNotFoundError(f"Achievement {achievement_id} not found")

        op = _Operation(state, self._clock())
        self._unlock(op, achievement, progress=achievement.required_count)
        return self._finish(op)

    def _unlock(self, op: _Operation, achievement: AchievementDocument, progress: int) -> bool:
        """
        Try to unlock an achievement for the member.
        Returns True if newly unlocked, False if already had it.
        """
        user = op.user
        if user.has_unlocked(achievement.id):
            return False

        existing = user.get_user_achievement(achievement.id)
        if existing is not None:
            existing.unlocked_at = op.now
            existing.progress = progress
        else:
            user.achievements.append(
                UserAchievementDocument(
                    achievement_id=achievement.id,
                    unlocked_at=op.now,
                    progress=progress,
                )
            )

        # Reward bookkeeping never re-enters achievement evaluation
        self._book(
            op,
            achievement.points,
            f"Achievement unlocked: {achievement.title}",
            ActionType.ACHIEVEMENT_UNLOCKED.value,
            TransactionKind.REWARD,
            related_id=achievement.id,
        )
        op.emit(
            EventType.ACHIEVEMENT_UNLOCKED,
            achievement_id=achievement.id,
            title=achievement.title,
            points=achievement.points,
        )
        return True

    # ========================================================================
    # Challenges
    # ========================================================================

    def join_challenge(self, state: GamificationState, challenge_id: str) -> EngineResult:
        """
        Opt the member into a challenge.

        Joining a challenge twice is a no-op.

        Raises:
            ChallengeNotFoundError: If the id is not in the catalog.
            ChallengeNotActiveError: If the challenge is off or outside its window.
        """
        op = _Operation(state, self._clock())
        challenge = op.state.get_challenge(challenge_id)
        if challenge is None:
            raise ChallengeNotFoundError(f"Challenge {challenge_id} not found")
        if not challenge.is_open(op.now):
            raise ChallengeNotActiveError(f"Challenge {challenge_id} is not active")

        user = op.user
        if user.get_user_challenge(challenge_id) is None:
            user.challenges.append(UserChallengeDocument(challenge_id=challenge_id))
            op.emit(EventType.CHALLENGE_JOINED, challenge_id=challenge_id)
        if user.id not in challenge.participants:
            challenge.participants.append(user.id)

        return self._finish(op)

    def update_challenge_progress(
        self, state: GamificationState, challenge_id: str, progress: int
    ) -> EngineResult:
        """
        Record the member's progress on a joined challenge.

        Reaching the target the first time completes the challenge and awards
        its points; later updates never pay out again.

        Raises:
            ChallengeNotFoundError: If the id is not in the catalog.
            ChallengeNotJoinedError: If the member has not joined the challenge.
        """
        op = _Operation(state, self._clock())
        self._set_challenge_progress(op, challenge_id, progress)
        return self._finish(op)

    def _set_challenge_progress(self, op: _Operation, challenge_id: str, progress: int) -> None:
        challenge = op.state.get_challenge(challenge_id)
        if challenge is None:
            raise ChallengeNotFoundError(f"Challenge {challenge_id} not found")

        user_challenge = op.user.get_user_challenge(challenge_id)
        if user_challenge is None:
            raise ChallengeNotJoinedError(f"Challenge {challenge_id} has not been joined")

        user_challenge.progress = progress
        if user_challenge.completed or progress < challenge.target_count:
            return

        user_challenge.completed = True
        user_challenge.completed_at = op.now
        op.emit(
            EventType.CHALLENGE_COMPLETED,
            challenge_id=challenge.id,
            title=challenge.title,
            points=challenge.points,
        )
        self._add_points(
            op,
            challenge.points,
            f"Challenge completed: {challenge.title}",
            ActionType.CHALLENGE_COMPLETED.value,
            related_id=challenge.id,
        )

    def _track_challenges(self, op: _Operation, action: str) -> None:
        """Advance joined, unfinished, open challenges that target ``action``."""
        for user_challenge in list(op.user.challenges):
            if user_challenge.completed:
                continue
            challenge = op.state.get_challenge(user_challenge.challenge_id)
            if challenge is None or challenge.target_action != action:
                continue
            if not challenge.is_open(op.now):
                continue
            self._set_challenge_progress(op, challenge.id, user_challenge.progress + 1)

    # ========================================================================
    # Login Streak
    # ========================================================================

    def record_login(self, state: GamificationState) -> EngineResult:
        """
        Apply a successful login to the streak and award daily points.

        Only the first login of a calendar day earns points.
        """
        op = _Operation(state, self._clock())
        user = op.user
        update = calculate_new_streak(
            user.last_login_date,
            user.login_streak,
            op.now,
            self._settings.STREAK_TIMEZONE,
        )

        user.login_streak = update.streak
        user.longest_streak = max(user.longest_streak, update.streak)
        user.last_login_date = op.now

        if update.first_login_today:
            self._add_points(
                op,
                self._settings.DAILY_LOGIN_POINTS,
                "Daily login",
                ActionType.DAILY_LOGIN.value,
                related_id=None,
            )
            if streak_bonus_due(
                update.streak,
                self._settings.STREAK_BONUS_THRESHOLD,
                self._settings.STREAK_BONUS_POLICY,
            ):
                self._add_points(
                    op,
                    self._settings.STREAK_BONUS_POINTS,
                    f"{update.streak}-day login streak bonus",
                    ActionType.WEEKLY_LOGIN_STREAK.value,
                    related_id=None,
                )

        logger.info(
            "login_recorded",
            user_id=user.id,
            streak=user.login_streak,
            first_login_today=update.first_login_today,
        )
        return self._finish(op)

    # ========================================================================
    # Read Model
    # ========================================================================

    def get_gamification_stats(self, state: GamificationState) -> GamificationStats:
        """
        Summarize the member's progress.

        ``rank`` comes from the overall leaderboard as last computed (0 when
        the member is not on it).
        """
        user = state.user
        rank = 0
        overall = state.get_leaderboard(LeaderboardCategory.OVERALL)
        if overall is not None:
            for entry in overall.entries:
                if entry.user_id == user.id:
                    rank = entry.rank
                    break

        return GamificationStats(
            total_points=user.total_points,
            current_level=user.current_level,
            points_to_next_level=get_points_to_next_level(user.current_level, user.total_points),
            achievements_unlocked=sum(1 for ua in user.achievements if ua.unlocked_at is not None),
            total_achievements=len(self._achievements),
            current_streak=user.login_streak,
            longest_streak=user.longest_streak,
            rank=rank,
        )

    # ========================================================================
    # Dispatch
    # ========================================================================

    def _finish(self, op: _Operation) -> EngineResult:
        result = op.result()
        for event in result.events:
            self._log_event(event)
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception as e:
                    logger.exception(
                        "event_listener_failed",
                        event_type=event.type.value,
                        error=str(e),
                    )
        return result

    @staticmethod
    def _log_event(event: GamificationEvent) -> None:
        if event.type == EventType.POINTS_AWARDED:
            logger.debug(event.type.value, user_id=event.user_id, **event.data)
        else:
            logger.info(event.type.value, user_id=event.user_id, **event.data)
