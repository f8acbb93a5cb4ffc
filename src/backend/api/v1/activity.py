"""
Activity endpoints.

Portal flows (donations, event RSVPs, mentorship requests) report completed
actions here so they earn points on the fixed schedule.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.deps import SessionServiceDep, gamification_http_error, get_gamified_state, to_action_response
from models.documents import GamificationState
from schemas.gamification import (
    ActionResponse,
    DonationRequest,
    EventRsvpRequest,
    MentorshipRequestCreate,
)
from services.gamification_engine import GamificationError

router = APIRouter()


@router.post("/donations", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def record_donation(
    request: DonationRequest,
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    session_service: SessionServiceDep,
) -> ActionResponse:
    """Record a donation; earns one point per whole donation unit."""
    try:
        result = await session_service.record_donation(
            request.amount, donation_id=request.donation_id, cause=request.cause
        )
    except GamificationError as e:
        raise gamification_http_error(e)

    return to_action_response(result, "Thank you for your donation!")


@router.post("/event-rsvps", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def record_event_rsvp(
    request: EventRsvpRequest,
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    session_service: SessionServiceDep,
) -> ActionResponse:
    """Record an RSVP to a portal event."""
    try:
        result = await session_service.record_event_rsvp(request.event_id, request.event_title)
    except GamificationError as e:
        raise gamification_http_error(e)

    return to_action_response(result, "See you at the event!")


@router.post(
    "/mentorship-requests", response_model=ActionResponse, status_code=status.HTTP_201_CREATED
)
async def record_mentorship_request(
    request: MentorshipRequestCreate,
    state: Annotated[GamificationState, Depends(get_gamified_state)],
    session_service: SessionServiceDep,
) -> ActionResponse:
    """Record a mentorship request sent to another member."""
    try:
        result = await session_service.record_mentorship_request(
            request.mentor_id, request.mentor_name
        )
    except GamificationError as e:
        raise gamification_http_error(e)

    return to_action_response(result, "Mentorship request sent!")
