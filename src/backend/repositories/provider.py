"""
Repository and service provider for dependency injection.

All state lives in process memory, so each provider hands out one shared
instance.

Usage:
    from repositories.provider import get_session_service

    # In FastAPI dependencies:
    async def some_endpoint(
        session_service: SessionService = Depends(get_session_service),
    ):
        stats = session_service.get_gamification_stats()
"""

import logging
from functools import lru_cache

from core.config import settings
from repositories.challenge_repository import ChallengeRepository
from repositories.ledger_repository import LedgerRepository
from repositories.local_storage_repository import LocalStorageRepository, SessionStorageRepository
from repositories.user_repository import UserRepository
from services.activity_service import ActivityService
from services.gamification_engine import GamificationEngine
from services.session_service import SessionService

logger = logging.getLogger(__name__)


# =============================================================================
# Repository Factory Functions
# =============================================================================


@lru_cache
def get_user_repository() -> UserRepository:
    return UserRepository()


@lru_cache
def get_ledger_repository() -> LedgerRepository:
    return LedgerRepository()


@lru_cache
def get_challenge_repository() -> ChallengeRepository:
    return ChallengeRepository()


@lru_cache
def get_session_storage() -> SessionStorageRepository:
    """Persisted-member storage at LOCAL_STORAGE_PATH under SESSION_STORAGE_KEY."""
    logger.info(f"Using local storage at {settings.LOCAL_STORAGE_PATH}")
    return SessionStorageRepository(
        LocalStorageRepository(settings.LOCAL_STORAGE_PATH),
        key=settings.SESSION_STORAGE_KEY,
    )


# =============================================================================
# Service Factory Functions
# =============================================================================


@lru_cache
def get_gamification_engine() -> GamificationEngine:
    return GamificationEngine(settings=settings)


@lru_cache
def get_session_service() -> SessionService:
    engine = get_gamification_engine()
    return SessionService(
        engine=engine,
        activity=ActivityService(engine, settings=settings),
        users=get_user_repository(),
        ledgers=get_ledger_repository(),
        challenges=get_challenge_repository(),
        session_storage=get_session_storage(),
    )


def reset_providers() -> None:
    """Drop every shared instance (used by tests and on shutdown)."""
    for provider in (
        get_user_repository,
        get_ledger_repository,
        get_challenge_repository,
        get_session_storage,
        get_gamification_engine,
        get_session_service,
    ):
        provider.cache_clear()
