"""
API Base — Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (mocked DB, real SQLite DB, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── make_example:    Factory for detached Example rows
    ├── database:        Empty `examples` table in a temporary SQLite file
    ├── app:             Fresh FastAPI app (own rate-limit and cache stores)
    └── client:          HTTPX AsyncClient bound to `app` through ASGITransport
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings BEFORE any api_base import: the settings singleton and
# the database engine are built when their modules load.
_TEST_DIR = tempfile.mkdtemp(prefix="api_base_test_")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.sqlite"
os.environ["ALLOWED_HOSTS"] = "test,localhost"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ.pop("SECURITY_ENABLED", None)
os.environ.pop("AUTH_ENABLED", None)

from sqlalchemy import delete  # noqa: E402

from api_base.database import create_tables, dispose_engine, engine  # noqa: E402
from api_base.main import create_app  # noqa: E402
from api_base.models.example import Example  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    Why:     Handler tests should not require a real database.
    How:     Mocks execute, get, flush, refresh, delete, commit, rollback and close.

    Usage:
        async def test_get_example(mock_db_session):
            mock_db_session.get.return_value = example
            result = await GetExampleByIdHandler(mock_db_session).execute(query)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_example():
    """Factory for Example rows that were never attached to a session."""

    def _make(name: str = "First Example", description: str = "A sample description") -> Example:
        now = datetime.now(timezone.utc)
        return Example(
            id=str(uuid4()),
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )

    return _make


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """
    Empty `examples` table for one test.

    The engine is disposed afterwards so pooled connections never outlive
    the event loop of the test that opened them.
    """
    await create_tables()
    async with engine.begin() as conn:
        await conn.execute(delete(Example))
    yield
    await dispose_engine()


@pytest.fixture
def app():
    """Fresh application: rate-limit counters and cached responses start empty."""
    return create_app()


@pytest_asyncio.fixture
async def client(database, app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP client for API testing.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
