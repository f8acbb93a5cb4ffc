"""
Shared dependencies for API endpoints.

Includes:
- The signed-in member's session state
- Gating of gamification endpoints (admins take no part)
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status

from core.config import settings
from models.documents import GamificationState, UserRole
from repositories.provider import get_session_service
from schemas.gamification import ActionResponse
from services.gamification_engine import (
    AchievementNotFoundError,
    ChallengeNotActiveError,
    ChallengeNotFoundError,
    ChallengeNotJoinedError,
    EngineResult,
    GamificationError,
)
from services.session_service import NoActiveSessionError, SessionService

logger = structlog.get_logger(__name__)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


async def get_current_state(session_service: SessionServiceDep) -> GamificationState:
    """
    Get the signed-in member's gamification state.

    Raises:
        HTTPException: If no member is signed in.
    """
    try:
        return session_service.require_state()
    except NoActiveSessionError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )


async def get_gamified_state(
    state: Annotated[GamificationState, Depends(get_current_state)],
) -> GamificationState:
    """
    Ensure the signed-in member takes part in gamification.

    Raises:
        HTTPException: If gamification is switched off or the member is an admin.
    """
    if not settings.ENABLE_GAMIFICATION:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Gamification is disabled",
        )
    if state.user.role == UserRole.ADMIN.value:
        logger.warning("admin_gamification_access", user_id=state.user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Gamification is not available for admin accounts",
        )
    return state


# =============================================================================
# Helper Functions
# =============================================================================


def to_action_response(result: EngineResult, message: str) -> ActionResponse:
    """Summarize an engine result for the client (single source of truth)."""
    user = result.state.user
    return ActionResponse(
        points_earned=result.points_earned,
        total_points=user.total_points,
        current_level=user.current_level,
        leveled_up=result.leveled_up,
        new_achievements=result.unlocked_achievement_ids,
        completed_challenges=result.completed_challenge_ids,
        message=message,
    )


def gamification_http_error(exc: GamificationError) -> HTTPException:
    """Map an engine error onto an HTTP error."""
    if isinstance(exc, (AchievementNotFoundError, ChallengeNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (ChallengeNotActiveError, ChallengeNotJoinedError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST

    logger.info("gamification_request_rejected", error_type=type(exc).__name__, error=str(exc))
    return HTTPException(status_code=code, detail=str(exc))
