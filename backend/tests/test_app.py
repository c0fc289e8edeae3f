"""
CodeArchive Backend: Application Startup and Configuration Tests
=================================================================

What:  Lifespan startup/shutdown, settings validation, service health.
How:   Drives lifespan() directly (ASGITransport never runs it) with the
       settings singleton monkeypatched per test.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError
from sqlalchemy.exc import DBAPIError

from codearchive.config import Settings, settings
from codearchive.database import Database
from codearchive.main import create_app, lifespan


class TestLifespan:

    @pytest.mark.asyncio
    async def test_missing_database_url_aborts_startup(self, monkeypatch):
        monkeypatch.setattr(settings, "database_url", "")
        app = create_app()

        with pytest.raises(ValueError, match="DATABASE_URL"):
            async with lifespan(app):
                pass

        assert not hasattr(app.state, "database")

    @pytest.mark.asyncio
    async def test_unreachable_database_aborts_startup(self, monkeypatch, tmp_path):
        unreachable = tmp_path / "no" / "such" / "dir" / "snippets.db"
        monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{unreachable}")
        app = create_app()

        with pytest.raises(DBAPIError):
            async with lifespan(app):
                pass

        assert not hasattr(app.state, "database")

    @pytest.mark.asyncio
    async def test_startup_installs_database(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'up.db'}")
        app = create_app()

        async with lifespan(app):
            assert isinstance(app.state.database, Database)
            await app.state.database.ping()


class TestSettings:

    def test_cors_origins_list_drops_blanks(self):
        s = Settings(cors_origins="http://a.test, ,http://b.test,")
        assert s.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_defaults(self):
        s = Settings(database_url="sqlite+aiosqlite:///x.db")
        assert s.backend_port == 3000
        assert s.cors_origins_list == ["http://localhost:5173"]
        assert (s.default_page_size, s.max_page_size) == (20, 100)

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_default_page_size_cannot_exceed_max(self):
        with pytest.raises(ValidationError):
            Settings(default_page_size=50, max_page_size=10)

    def test_blank_database_url_fails_production_check(self):
        with pytest.raises(ValueError):
            Settings(database_url="   ").validate_required_for_production()


class TestServiceHealth:

    @pytest.mark.asyncio
    async def test_unreachable_database_reports_503(self):
        app = create_app()
        broken = MagicMock()
        broken.ping = AsyncMock(side_effect=ConnectionError("connection refused"))
        app.state.database = broken

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"


class TestEntryPoint:

    def test_run_uses_configured_host_and_port(self):
        from codearchive.__main__ import run

        with patch("codearchive.__main__.uvicorn.run") as uvicorn_run:
            run()

        uvicorn_run.assert_called_once_with(
            "codearchive.main:app",
            host=settings.backend_host,
            port=settings.backend_port,
            log_level=settings.log_level.lower(),
        )
