"""
Member session service.

Owns the one GamificationState of the signed-in member. Every change is
computed by the engine and then committed here: written back to the
repositories, reflected in freshly computed leaderboards and persisted to
client-local storage.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from models.documents import (
    GamificationState,
    GamificationStats,
    LeaderboardDocument,
    UserDocument,
    UserRole,
)
from repositories.challenge_repository import ChallengeRepository
from repositories.ledger_repository import LedgerRepository
from repositories.local_storage_repository import SessionStorageRepository
from repositories.user_repository import UserRepository
from services.activity_service import ActivityService
from services.gamification_engine import EngineResult, GamificationEngine
from services.leaderboard_service import build_leaderboards

logger = structlog.get_logger(__name__)


class SessionError(Exception):
    """Base exception for session operations."""

    pass


class MemberNotFoundError(SessionError):
    """No member with the requested ID."""

    pass


class NoActiveSessionError(SessionError):
    """Operation needs a signed-in member."""

    pass


class SessionService:
    """Service for the signed-in member's gamification session."""

    def __init__(
        self,
        engine: GamificationEngine,
        activity: ActivityService,
        users: UserRepository,
        ledgers: LedgerRepository,
        challenges: ChallengeRepository,
        session_storage: SessionStorageRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.engine = engine
        self.activity = activity
        self.users = users
        self.ledgers = ledgers
        self.challenges = challenges
        self.session_storage = session_storage
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._state: Optional[GamificationState] = None

    @property
    def current(self) -> Optional[GamificationState]:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is not None

    def require_state(self) -> GamificationState:
        """Get the current state. Raises NoActiveSessionError when signed out."""
        if self._state is None:
            raise NoActiveSessionError("No member is signed in")
        return self._state

    # ========================================================================
    # Sign-in Lifecycle
    # ========================================================================

    async def login(self, user_id: str) -> EngineResult:
        """
        Start a session after a successful login.

        Applies the login streak and daily points, except for admins who take
        no part in gamification.

        Raises:
            MemberNotFoundError: If no member has this ID.
        """
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise MemberNotFoundError(f"User {user_id} not found")

        state = await self._open(user)
        if user.role == UserRole.ADMIN:
            logger.info("admin_login", user_id=user.id)
            return EngineResult(state=await self._commit(state))

        return await self._apply(self.engine.record_login(state))

    async def restore(self) -> Optional[GamificationState]:
        """Rehydrate the session persisted by a previous run, if any."""
        user = await self.session_storage.load_user()
        if user is None:
            return None

        state = await self._commit(await self._open(user))
        logger.info("session_restored", user_id=user.id, total_points=user.total_points)
        return state

    async def logout(self) -> None:
        """End the session and forget the persisted member."""
        if self._state is not None:
            logger.info("logout", user_id=self._state.user.id)
        self._state = None
        await self.session_storage.clear_user()

    async def _open(self, user: UserDocument) -> GamificationState:
        return self.engine.open_session(
            user,
            transactions=await self.ledgers.get_ledger(user.id),
            challenges=await self.challenges.get_all_challenges(),
            leaderboards=self._state.leaderboards if self._state else (),
        )

    # ========================================================================
    # Engine Operations
    # ========================================================================

    async def add_points(
        self,
        points: int,
        reason: str,
        action: str,
        related_id: Optional[str] = None,
    ) -> EngineResult:
        return await self._apply(
            self.engine.add_points(self.require_state(), points, reason, action, related_id)
        )

    async def unlock_achievement(self, achievement_id: str) -> EngineResult:
        return await self._apply(self.engine.unlock_achievement(self.require_state(), achievement_id))

    async def join_challenge(self, challenge_id: str) -> EngineResult:
        return await self._apply(self.engine.join_challenge(self.require_state(), challenge_id))

    async def update_challenge_progress(self, challenge_id: str, progress: int) -> EngineResult:
        return await self._apply(
            self.engine.update_challenge_progress(self.require_state(), challenge_id, progress)
        )

    async def record_donation(
        self,
        amount: float,
        donation_id: Optional[str] = None,
        cause: Optional[str] = None,
    ) -> EngineResult:
        return await self._apply(
            self.activity.record_donation(self.require_state(), amount, donation_id, cause)
        )

    async def record_event_rsvp(self, event_id: str, event_title: Optional[str] = None) -> EngineResult:
        return await self._apply(
            self.activity.record_event_rsvp(self.require_state(), event_id, event_title)
        )

    async def record_mentorship_request(
        self, mentor_id: str, mentor_name: Optional[str] = None
    ) -> EngineResult:
        return await self._apply(
            self.activity.record_mentorship_request(self.require_state(), mentor_id, mentor_name)
        )

    def get_gamification_stats(self) -> GamificationStats:
        return self.engine.get_gamification_stats(self.require_state())

    async def refresh_leaderboards(self) -> list[LeaderboardDocument]:
        """Recompute leaderboards from the repositories."""
        leaderboards = build_leaderboards(
            await self.users.list_all(),
            await self.ledgers.get_all_ledgers(),
            self._clock(),
        )
        if self._state is not None:
            self._state = self._state.model_copy(update={"leaderboards": leaderboards})
        return leaderboards

    # ========================================================================
    # Commit
    # ========================================================================

    async def _apply(self, result: EngineResult) -> EngineResult:
        state = await self._commit(result.state)
        return result.model_copy(update={"state": state})

    async def _commit(self, state: GamificationState) -> GamificationState:
        await self.users.update(state.user)
        await self.ledgers.append(state.point_transactions)
        await self.challenges.save_all(state.all_challenges)

        self._state = state
        await self.refresh_leaderboards()
        await self.session_storage.save_user(self._state.user)
        return self._state
