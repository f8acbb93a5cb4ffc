"""
Gamification endpoints for points, levels, achievements, challenges and leaderboards.
"""

from datetime import datetime, timezone
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.deps import (
    SessionServiceDep,
    gamification_http_error,
    get_current_state,
    get_gamified_state,
    to_action_response,
)
from models.documents import (
    POINTS_TOTAL_RULE,
    AchievementDocument,
    GamificationState,
    LeaderboardCategory,
    LeaderboardDocument,
    TransactionKind,
)
from repositories.ledger_repository import LedgerRepository
from repositories.provider import get_ledger_repository
from schemas.gamification import (
    AchievementStatus,
    ActionResponse,
    ChallengeProgressRequest,
    ChallengeStatus,
    LeaderboardEntry,
    LeaderboardResponse,
    LevelDefinitionResponse,
    PointsTransaction,
    UserProgress,
)
from services.catalog import achievements_for_role, challenges_for_role
from services.gamification_engine import GamificationError
from services.levels import LEVEL_DEFINITIONS, level_progress, next_level

router = APIRouter()


def calculate_achievement_progress(state: GamificationState, achievement: AchievementDocument) -> int:
    """
    Progress toward an achievement, capped at its target.

    Unlocked achievements report the progress recorded when they unlocked.
    """
    user_achievement = state.user.get_user_achievement(achievement.id)
    if user_achievement is not None and user_achievement.unlocked_at is not None:
        return user_achievement.progress

    if achievement.required_action == POINTS_TOTAL_RULE:
        current = state.user.total_points
    else:
        current = sum(
            1
            for t in state.point_transactions
            if t.kind == TransactionKind.ACTION.value and t.action == achievement.required_action
        )
    return min(current, achievement.required_count)


def _leaderboard_response(leaderboard: LeaderboardDocument, limit: int) -> LeaderboardResponse:
    return LeaderboardResponse(
        id=leaderboard.id,
        title=leaderboard.title,
        category=leaderboard.category,
        entries=[LeaderboardEntry.model_validate(e.model_dump()) for e in leaderboard.entries[:limit]],
        total_participants=len(leaderboard.entries),
        last_updated=leaderboard.last_updated,
    )


@router.get("/stats", response_model=UserProgress)
async def get_stats(
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    session_service: SessionServiceDep,
) -> UserProgress:
    """
    Get the signed-in member's gamification progress.

    Includes points, level, streaks, rank and progress to the next level.
    """
    stats = session_service.get_gamification_stats()
    upcoming = next_level(stats.current_level)

    return UserProgress(
        user_id=state.user.id,
        total_points=stats.total_points,
        current_level=stats.current_level,
        next_level=upcoming.value if upcoming else None,
        points_to_next_level=stats.points_to_next_level,
        level_progress=level_progress(stats.total_points),
        achievements_unlocked=stats.achievements_unlocked,
        total_achievements=stats.total_achievements,
        current_streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        rank=stats.rank,
    )


@router.get("/levels", response_model=List[LevelDefinitionResponse])
async def get_level_definitions() -> List[LevelDefinitionResponse]:
    """Get all level tiers and their point thresholds."""
    return [
        LevelDefinitionResponse(
            level=definition["level"].value,
            points_required=definition["points_required"],
            icon=definition["icon"],
        )
        for definition in LEVEL_DEFINITIONS
    ]


@router.get("/achievements", response_model=List[AchievementStatus])
async def get_achievements(
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    session_service: SessionServiceDep,
    unlocked_only: bool = Query(False, description="Only return unlocked achievements"),
) -> List[AchievementStatus]:
    """Get the achievements visible to the member's role, with progress."""
    statuses = []
    for achievement in achievements_for_role(session_service.engine.achievements, state.user.role):
        user_achievement = state.user.get_user_achievement(achievement.id)
        unlocked_at = user_achievement.unlocked_at if user_achievement else None
        if unlocked_only and unlocked_at is None:
            continue

        statuses.append(
            AchievementStatus(
                **achievement.model_dump(),
                is_unlocked=unlocked_at is not None,
                unlocked_at=unlocked_at,
                progress=calculate_achievement_progress(state, achievement),
            )
        )
    return statuses


@router.get("/challenges", response_model=List[ChallengeStatus])
async def get_challenges(
    state: Annotated[GamificationState, Depends(get_gamified_state)],
) -> List[ChallengeStatus]:
    """Get the open challenges visible to the member's role."""
    now = datetime.now(timezone.utc)
    statuses = []
    for challenge in challenges_for_role(state.all_challenges, state.user.role, now):
        user_challenge = state.user.get_user_challenge(challenge.id)
        data = challenge.model_dump(exclude={"participants"})
        statuses.append(
            ChallengeStatus(
                **data,
                participant_count=len(challenge.participants),
                is_joined=user_challenge is not None,
                progress=user_challenge.progress if user_challenge else 0,
                completed=user_challenge.completed if user_challenge else False,
                completed_at=user_challenge.completed_at if user_challenge else None,
            )
        )
    return statuses


@router.post("/challenges/{challenge_id}/join", response_model=ActionResponse)
async def join_challenge(
    challenge_id: str,
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    session_service: SessionServiceDep,
) -> ActionResponse:
    """Opt the member into a challenge."""
    try:
        result = await session_service.join_challenge(challenge_id)
    except GamificationError as e:
        raise gamification_http_error(e)

    return to_action_response(result, f"Joined challenge {challenge_id}")


@router.put("/challenges/{challenge_id}/progress", response_model=ActionResponse)
async def update_challenge_progress(
    challenge_id: str,
    request: ChallengeProgressRequest,
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    session_service: SessionServiceDep,
) -> ActionResponse:
    """Report progress on a joined challenge."""
    try:
        result = await session_service.update_challenge_progress(challenge_id, request.progress)
    except GamificationError as e:
        raise gamification_http_error(e)

    if challenge_id in result.completed_challenge_ids:
        message = f"Challenge {challenge_id} completed!"
    else:
        message = "Progress updated"
    return to_action_response(result, message)


@router.get("/leaderboards", response_model=List[LeaderboardResponse])
async def get_leaderboards(
    state: Annotated[GamificationState, Depends(get_current_state)],
    session_service: SessionServiceDep,
    limit: int = Query(10, ge=1, le=100),
) -> List[LeaderboardResponse]:
    """Get every leaderboard, freshly computed."""
    leaderboards = await session_service.refresh_leaderboards()
    return [_leaderboard_response(leaderboard, limit) for leaderboard in leaderboards]


@router.get("/leaderboards/{category}", response_model=LeaderboardResponse)
async def get_leaderboard(
    category: LeaderboardCategory,
    state: Annotated[GamificationState, Depends(get_current_state)],
    session_service: SessionServiceDep,
    limit: int = Query(10, ge=1, le=100),
) -> LeaderboardResponse:
    """Get one leaderboard, freshly computed."""
    await session_service.refresh_leaderboards()
    leaderboard = session_service.require_state().get_leaderboard(category)
    if leaderboard is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Leaderboard not found",
        )
    return _leaderboard_response(leaderboard, limit)


@router.get("/history", response_model=List[PointsTransaction])
async def get_points_history(
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    ledger_repo: LedgerRepository = Depends(get_ledger_repository),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> List[PointsTransaction]:
    """Get the member's points history, newest first."""
    transactions = await ledger_repo.get_points_history(state.user.id, limit=limit, offset=offset)
    return [PointsTransaction.model_validate(t.model_dump(exclude={"user_id"})) for t in transactions]
