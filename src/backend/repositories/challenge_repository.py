"""
In-memory challenge repository.

Challenge definitions plus their participant lists.
"""

import logging
from typing import Iterable, Optional

from models.documents import ChallengeDocument

logger = logging.getLogger(__name__)


class ChallengeRepository:
    """Repository for challenge operations."""

    def __init__(self) -> None:
        self._challenges: dict[str, ChallengeDocument] = {}

    async def get_challenge(self, challenge_id: str) -> Optional[ChallengeDocument]:
        challenge = self._challenges.get(challenge_id)
        return challenge.model_copy(deep=True) if challenge else None

    async def get_all_challenges(self) -> list[ChallengeDocument]:
        """Get every challenge in catalog order."""
        return [c.model_copy(deep=True) for c in self._challenges.values()]

    async def seed(self, challenges: Iterable[ChallengeDocument]) -> int:
        """Load challenge definitions, keeping participants of ones already present."""
        seeded = 0
        for challenge in challenges:
            existing = self._challenges.get(challenge.id)
            participants = existing.participants if existing else []
            self._challenges[challenge.id] = challenge.model_copy(
                update={"participants": list(participants)}, deep=True
            )
            seeded += 1
        logger.info(f"Seeded {seeded} challenges")
        return seeded

    async def save_all(self, challenges: Iterable[ChallengeDocument]) -> None:
        """Write back challenges changed by a session (participants)."""
        for challenge in challenges:
            self._challenges[challenge.id] = challenge.model_copy(deep=True)
