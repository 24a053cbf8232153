"""
NoteKeeper Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with
       all tables created; API tests talk to the app through httpx.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine: in-memory database with the schema created
    ├── db_session: AsyncSession for service-level tests
    ├── mock_db_session: Mock session for store-failure paths
    ├── auth_headers: builds Authorization headers for a user id
    └── test_client: HTTPX AsyncClient wired to db_engine
"""

import os

# Override settings for testing BEFORE any notekeeper imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ENVIRONMENT"] = "test"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from notekeeper.database import Base, get_db_session
from notekeeper.security import create_access_token
import notekeeper.models  # noqa: F401

USER_A = "user-a-0001"


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite; StaticPool keeps one connection so the data survives."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """
    Session for calling services directly.

    Usage:
        async def test_create(db_session):
            label = await label_service.create_label(db_session, USER_A, payload)
    """
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for store-failure tests.

    Usage:
        mock_db_session.execute.side_effect = SQLAlchemyError("boom")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_headers():
    """Factory: auth_headers(USER_A) → {"Authorization": "Bearer ..."}."""
    def _headers(user_id: str = USER_A) -> dict:
        return {"Authorization": f"Bearer {create_access_token({'id': user_id})}"}
    return _headers


@pytest_asyncio.fixture
async def test_client(db_engine):
    """
    HTTPX AsyncClient talking to the app over ASGI.

    The session dependency is replaced with one bound to the test database;
    it keeps the commit/rollback behaviour of the real dependency.
    """
    from notekeeper.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def _test_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
