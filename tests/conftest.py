"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- Per-test SQLite database (file-backed, so several sessions can share it)
- Database session for arranging data
- HTTP client with dependency overrides
- Token helpers and base data fixtures (challenge, owner, team)
"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set test environment variables BEFORE importing app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'team_service_import.db')}"
os.environ["AUTH_SECRET_KEY"] = "test-secret-key"
os.environ["AUTH_ALGORITHM"] = "HS256"
os.environ.pop("SENTRY_DSN", None)

from app.main import app  # noqa: E402
from app.api.dependencies import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from tests.utils import headers_for  # noqa: E402

OWNER_ID = "user-owner"


# ==================== Database ====================

@pytest.fixture(scope="function")
async def test_engine(tmp_path):
    """
    Create a fresh database for each test.

    File-backed so that concurrent sessions see each other's commits.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'teams.db'}",
        poolclass=NullPool,
        echo=False,  # Set to True for SQL debugging
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session used by tests to arrange data and inspect results.

    Data must be committed before it is visible to the API client, which
    works on its own sessions.
    """
    session = session_factory()
    yield session
    await session.close()


# ==================== FastAPI Client ====================

@pytest.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Create HTTP client for testing FastAPI endpoints.

    Overrides get_db so every request gets its own session on the test database.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Base Data Fixtures ====================

@pytest.fixture
async def challenge(db_session: AsyncSession):
    """A challenge that allows teams of up to 4."""
    from tests.factories.challenge import ChallengeFactory
    challenge = await ChallengeFactory.create_async(db_session, max_team_size=4)
    await db_session.commit()
    return challenge


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def auth_headers(owner_id) -> dict:
    """Authentication headers for the team owner."""
    return headers_for(owner_id)


@pytest.fixture
async def team(db_session: AsyncSession, challenge, owner_id):
    """
    A public team owned by owner_id, with the owner as its only member.
    """
    from tests.factories.team import TeamFactory
    team = await TeamFactory.create_with_members_async(
        db_session, owner_id=owner_id, challenge=challenge
    )
    await db_session.commit()
    return team


@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for httpx AsyncClient.
    """
    return "asyncio"
