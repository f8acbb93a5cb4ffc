"""
Session endpoints: sign-in bookkeeping for the portal member.

Credential checks happen upstream; these endpoints only start and end the
gamification session of an already authenticated member.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import SessionServiceDep, get_current_state, to_action_response
from models.documents import GamificationState, UserDocument
from schemas.gamification import LoginRequest, LoginResponse, MemberResponse
from services.session_service import MemberNotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter()


def _member_response(user: UserDocument) -> MemberResponse:
    return MemberResponse.model_validate(user.model_dump())


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, session_service: SessionServiceDep) -> LoginResponse:
    """
    Record a successful login.

    Updates the login streak and awards the daily login points on the first
    login of a calendar day.
    """
    try:
        result = await session_service.login(request.user_id)
    except MemberNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found",
        )

    user = result.state.user
    if result.points_earned:
        message = f"Welcome back! You earned {result.points_earned} points."
    else:
        message = "Welcome back!"

    logger.info("member_signed_in", user_id=user.id, points_earned=result.points_earned)
    return LoginResponse(user=_member_response(user), action=to_action_response(result, message))


@router.post("/logout")
async def logout(session_service: SessionServiceDep) -> dict[str, str]:
    """End the session and forget the persisted member."""
    await session_service.logout()
    return {"message": "Signed out"}


@router.get("/me", response_model=MemberResponse)
async def get_me(
    state: Annotated[GamificationState, Depends(get_current_state)],
) -> MemberResponse:
    """Get the signed-in member."""
    return _member_response(state.user)
