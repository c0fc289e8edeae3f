"""
CodeArchive Backend: Database Session Management
=================================================

What:  Async SQLAlchemy engine ownership, session factory, and FastAPI dependency.
How:   A `Database` object owns one engine (and its connection pool). The
       application lifespan creates it, probes connectivity, stores it on
       `app.state.database`, and disposes it at shutdown. Route handlers get a
       fresh session per request through `get_db_session`.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (used by the test suite) keep SQLAlchemy's default pool;
    the sizing options only apply to server databases.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations.
    """
    pass


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Lifecycle:
        1. Constructed during startup from the configured URL
        2. ping() verifies the store is reachable before serving traffic
        3. session() hands out AsyncSession objects per request
        4. dispose() closes every pooled connection at shutdown
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        options: Dict[str, Any] = {"echo": echo}
        if make_url(url).get_backend_name() != "sqlite":
            options.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(url, **options)

        # expire_on_commit=False: attributes stay readable after the service commits
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings) -> "Database":
        """Builds a Database from the application Settings object."""
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def ping(self) -> None:
        """
        Executes SELECT 1 against the store.

        Raises whatever the driver raises; callers decide whether a failure
        is fatal (startup) or just reported (health check).
        """
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Creates every mapped table. Used by tests; production uses Alembic."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Gracefully closes all connections in the pool."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the lifespan-owned Database
        2. Yields it to the route handler (services commit their own writes)
        3. On error: rolls back any uncommitted work
        4. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/api/snippets")
        async def list_snippets(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
