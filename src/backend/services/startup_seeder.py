"""
Startup seeding.

Loads the challenge catalog and, when MEMBER_SEED_PATH is set, the member
directory. Safe to run multiple times.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from core.config import settings
from models.documents import UserDocument
from repositories.challenge_repository import ChallengeRepository
from repositories.provider import get_challenge_repository, get_user_repository
from repositories.user_repository import UserRepository
from services.catalog import build_challenge_catalog

logger = structlog.get_logger(__name__)


async def seed_challenges(
    repo: ChallengeRepository,
    now: Optional[datetime] = None,
) -> int:
    """Load the challenge catalog with windows around ``now``."""
    return await repo.seed(build_challenge_catalog(now or datetime.now(timezone.utc)))


async def seed_members(repo: UserRepository, path: str | Path) -> int:
    """
    Load members from a JSON list.

    Invalid records and members already registered are skipped.
    """
    records = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"Member seed file {path} must contain a JSON list")

    seeded = 0
    for record in records:
        try:
            user = UserDocument.model_validate(record)
        except ValidationError as e:
            logger.warning("member_seed_invalid", error=str(e))
            continue

        if await repo.get_by_id(user.id) is not None:
            continue
        await repo.add(user)
        seeded += 1

    logger.info("members_seeded", count=seeded, directory_size=await repo.count(), path=str(path))
    return seeded


async def seed_all() -> None:
    await seed_challenges(get_challenge_repository())

    if settings.MEMBER_SEED_PATH:
        await seed_members(get_user_repository(), settings.MEMBER_SEED_PATH)
