"""
Pytest fixtures for AlumniConnect gamification tests.
"""

import os
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("STREAK_BONUS_POLICY", "weekly")
os.environ.setdefault("AUTO_TRACK_CHALLENGES", "true")

from core.config import Settings, settings  # noqa: E402
from models.documents import (  # noqa: E402
    ChallengeCategory,
    ChallengeDocument,
    GamificationState,
    UserDocument,
)
from repositories.provider import (  # noqa: E402
    get_challenge_repository,
    get_user_repository,
    reset_providers,
)
from services.gamification_engine import GamificationEngine  # noqa: E402

# Fixed "now" for deterministic engine tests
FIXED_NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_providers(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Any:
    """Give every test fresh repositories and its own local storage file."""
    monkeypatch.setattr(settings, "LOCAL_STORAGE_PATH", str(tmp_path / "storage.json"))
    reset_providers()
    yield
    reset_providers()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the default point schedule."""
    return Settings(
        _env_file=None,
        STREAK_BONUS_POLICY="weekly",
        AUTO_TRACK_CHALLENGES=True,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now: datetime) -> Callable[[], datetime]:
    return lambda: fixed_now


@pytest.fixture
def engine(test_settings: Settings, clock: Callable[[], datetime]) -> GamificationEngine:
    """Engine with the standard catalog and a fixed clock."""
    return GamificationEngine(settings=test_settings, clock=clock)


@pytest.fixture
def make_user() -> Callable[..., UserDocument]:
    """Factory for members with sensible defaults."""

    def _make_user(user_id: str = "alum-1", **overrides: Any) -> UserDocument:
        data: dict[str, Any] = {
            "id": user_id,
            "name": f"Member {user_id}",
            "email": f"{user_id}@alumni.example.edu",
            "role": "alumni",
            "department": "Computer Science",
            "graduation_year": 2015,
        }
        data.update(overrides)
        return UserDocument(**data)

    return _make_user


@pytest.fixture
def sample_challenge() -> ChallengeDocument:
    """An open challenge targeting event RSVPs."""
    return ChallengeDocument(
        id="test_events",
        title="Event Sprint",
        description="RSVP to 2 events",
        icon="🏃",
        category=ChallengeCategory.MONTHLY,
        points=40,
        start_date=FIXED_NOW - timedelta(days=5),
        end_date=FIXED_NOW + timedelta(days=5),
        target_action="event_attended",
        target_count=2,
    )


@pytest.fixture
def state(
    engine: GamificationEngine,
    make_user: Callable[..., UserDocument],
    sample_challenge: ChallengeDocument,
) -> GamificationState:
    """Session state of a fresh alumni member."""
    return engine.open_session(make_user(), challenges=[sample_challenge])


@pytest.fixture
def sample_members() -> list[dict[str, Any]]:
    """Members registered in the directory for API tests."""
    return [
        {
            "id": "alum-1",
            "name": "Ada Alumna",
            "email": "ada@alumni.example.edu",
            "role": "alumni",
            "department": "Computer Science",
            "graduation_year": 2012,
        },
        {
            "id": "alum-2",
            "name": "Ben Graduate",
            "email": "ben@alumni.example.edu",
            "role": "alumni",
            "department": "Economics",
            "graduation_year": 2008,
            "total_points": 640,
        },
        {
            "id": "student-1",
            "name": "Cleo Student",
            "email": "cleo@students.example.edu",
            "role": "student",
            "department": "Physics",
            "graduation_year": 2027,
        },
        {
            "id": "admin-1",
            "name": "Dana Admin",
            "email": "dana@admin.example.edu",
            "role": "admin",
        },
    ]


@pytest.fixture
async def seeded_directory(sample_members: list[dict[str, Any]]) -> None:
    """Register sample members and load the challenge catalog."""
    from services.startup_seeder import seed_challenges

    users = get_user_repository()
    for member in sample_members:
        await users.add(UserDocument(**member))
    await seed_challenges(get_challenge_repository())


@pytest.fixture
async def app() -> Any:
    """Create FastAPI application for testing."""
    from main import app as fastapi_app

    return fastapi_app


@pytest.fixture
async def client(app: Any, seeded_directory: None) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client against a seeded directory."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Origin": "http://localhost:3000"},
    ) as ac:
        yield ac


@pytest.fixture
async def alumni_client(client: AsyncClient) -> AsyncClient:
    """Client with an alumni member signed in."""
    response = await client.post("/api/v1/session/login", json={"user_id": "alum-1"})
    assert response.status_code == 200
    return client
