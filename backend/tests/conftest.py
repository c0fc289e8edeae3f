"""
CodeArchive Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service unit tests get a mocked AsyncSession; API tests get a real
       SQLite database (aiosqlite) per test and an HTTPX AsyncClient wired
       to a freshly built app.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── sample_snippet: Attribute bag shaped like a stored Snippet
    ├── database: Lifespan-style Database on a temporary SQLite file
    └── test_client: HTTPX AsyncClient talking to the app over ASGI
"""

import os
import tempfile
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

# Must be set before any codearchive import reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="codearchive_test_"), "default.db"
)
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from codearchive.database import Database


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = snippet
            result = await snippet_service.get_snippet(mock_db_session, snippet_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_snippet():
    """A stored-snippet stand-in that SnippetResponse can read attributes from."""
    now = datetime.now(timezone.utc)
    return SimpleNamespace(
        id=uuid4(),
        title="Auth guard",
        language="JavaScript",
        code="export const x=1;",
        version=1,
        author="ada",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def valid_payload():
    return {
        "title": "Auth guard",
        "language": "JavaScript",
        "code": "export const x=1;",
        "version": 1,
    }


@pytest_asyncio.fixture
async def database(tmp_path):
    """A real database with the snippets table, disposed after the test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'snippets.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    ASGITransport does not run the lifespan, so the fixture installs the
    test database on app.state the way the lifespan would.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/snippets/health")
            assert response.status_code == 200
    """
    from codearchive.main import create_app

    app = create_app()
    app.state.database = database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
