"""
Activity point awards.

Donations, event RSVPs and mentorship requests happen elsewhere in the
portal; each of those flows reports here and earns a fixed number of points.
"""

import math
from typing import Optional

import structlog

from core.config import Settings, settings as default_settings
from models.documents import ActionType, GamificationState
from services.gamification_engine import EngineResult, GamificationEngine, InvalidActivityError

logger = structlog.get_logger(__name__)


class ActivityService:
    """Translate portal activity into engine point awards."""

    def __init__(self, engine: GamificationEngine, settings: Optional[Settings] = None):
        self.engine = engine
        self.settings = settings or default_settings

    def donation_points(self, amount: float) -> int:
        """One point per DONATION_UNIT donated, rounded down."""
        return int(amount // self.settings.DONATION_UNIT)

    def record_donation(
        self,
        state: GamificationState,
        amount: float,
        donation_id: Optional[str] = None,
        cause: Optional[str] = None,
    ) -> EngineResult:
        """
        Award points for a donation.

        Donations too small to earn a point are still recorded so that
        donation-count achievements and challenges see them.
        """
        if not math.isfinite(amount):
            raise InvalidActivityError("Donation amount must be a finite number")
        if amount <= 0:
            raise InvalidActivityError("Donation amount must be positive")

        points = self.donation_points(amount)
        reason = f"Donation of {amount:,.0f}" + (f" to {cause}" if cause else "")
        logger.info("donation_recorded", user_id=state.user.id, amount=amount, points=points)
        return self.engine.add_points(
            state,
            points,
            reason,
            ActionType.DONATION_MADE.value,
            related_id=donation_id,
        )

    def record_event_rsvp(
        self,
        state: GamificationState,
        event_id: str,
        event_title: Optional[str] = None,
    ) -> EngineResult:
        """Award points for an event RSVP."""
        if not event_id:
            raise InvalidActivityError("Event id is required")

        logger.info("event_rsvp_recorded", user_id=state.user.id, event_id=event_id)
        return self.engine.add_points(
            state,
            self.settings.EVENT_RSVP_POINTS,
            f"RSVP to {event_title or 'event'}",
            ActionType.EVENT_ATTENDED.value,
            related_id=event_id,
        )

    def record_mentorship_request(
        self,
        state: GamificationState,
        mentor_id: str,
        mentor_name: Optional[str] = None,
    ) -> EngineResult:
        """Award points for sending a mentorship request."""
        if not mentor_id:
            raise InvalidActivityError("Mentor id is required")
        if mentor_id == state.user.id:
            raise InvalidActivityError("Members cannot request mentorship from themselves")

        logger.info("mentorship_request_recorded", user_id=state.user.id, mentor_id=mentor_id)
        return self.engine.add_points(
            state,
            self.settings.MENTORSHIP_REQUEST_POINTS,
            f"Mentorship request to {mentor_name or 'mentor'}",
            ActionType.MENTORSHIP_REQUEST.value,
            related_id=mentor_id,
        )
