"""
In-memory member repository.

Holds the member directory the portal seeds at startup. Leaderboards rank
everyone in here.
"""

import logging
from typing import Optional

from models.documents import UserDocument

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for member lookups and updates."""

    def __init__(self) -> None:
        self._users: dict[str, UserDocument] = {}

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]:
        """Get a member by ID."""
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        """Get a member by email (case-insensitive)."""
        email_lower = email.lower()
        for user in self._users.values():
            if user.email.lower() == email_lower:
                return user.model_copy(deep=True)
        return None

    async def list_all(self) -> list[UserDocument]:
        """Get every member, ordered by ID."""
        return [self._users[user_id].model_copy(deep=True) for user_id in sorted(self._users)]

    async def count(self) -> int:
        return len(self._users)

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def add(self, user: UserDocument) -> UserDocument:
        """Register a member. Raises ValueError if the ID or email is taken."""
        if user.id in self._users:
            raise ValueError(f"User {user.id} already exists")
        if await self.get_by_email(user.email) is not None:
            raise ValueError(f"Email {user.email} is already registered")

        self._users[user.id] = user.model_copy(deep=True)
        logger.info(f"Registered member: {user.id}")
        return user

    async def update(self, user: UserDocument) -> UserDocument:
        """Replace a member's record."""
        self._users[user.id] = user.model_copy(deep=True)
        return user
