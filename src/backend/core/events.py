"""
Application lifecycle event handlers.

Manages startup and shutdown tasks: catalog and member seeding, and
rehydrating the session persisted by the previous run.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info(f"Starting {settings.APP_NAME}...")

        # Seed catalogs and members - safe to run multiple times
        try:
            from services.startup_seeder import seed_all

            await seed_all()
            logger.info("Catalogs seeded")
        except Exception as e:
            logger.warning(f"Startup seeder failed: {e}")

        # Rehydrate the signed-in member, if any
        from repositories.provider import get_session_service

        state = await get_session_service().restore()
        if state is not None:
            logger.info("Restored session", user_id=state.user.id)

        logger.info(f"{settings.APP_NAME} started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info(f"Shutting down {settings.APP_NAME}...")

        # The persisted member is written on every change; nothing to flush
        from repositories.provider import reset_providers

        reset_providers()
        logger.info(f"{settings.APP_NAME} shutdown complete")

    return stop_app
