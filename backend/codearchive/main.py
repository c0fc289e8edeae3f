"""
CodeArchive Backend: FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routes;
       lifespan() owns the database for the lifetime of the process.
Who:   Served by uvicorn (uvicorn codearchive.main:app, or python -m codearchive).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌─────────┐  │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│  CORS   │  │
    │  └──────────┘ └─────────────┘ └──────┘ └─────────┘  │
    │  (innermost: UnhandledError → 500 JSON body)        │
    │                                                     │
    │  Routes:                                            │
    │  ┌─────────────────────────┐ ┌───────────────────┐  │
    │  │ /api/snippets (CRUD)    │ │ GET /health       │  │
    │  └─────────────────────────┘ └───────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Validation→422 │ NotFound→404 │ DB/other→500  │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (DATABASE_URL is required)
    3. Open the database engine and probe it with SELECT 1
    Any failure here aborts startup; the server never accepts traffic.

    Shutdown:
    1. Dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from codearchive import __version__
from codearchive.config import settings
from codearchive.database import Database
from codearchive.exceptions import CodeArchiveError, DatabaseError, NotFoundError
from codearchive.middleware.errors import UnhandledErrorMiddleware, internal_error_response
from codearchive.middleware.logging import RequestLoggingMiddleware
from codearchive.middleware.request_id import RequestIDMiddleware, request_id_var
from codearchive.routes import health, snippets

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2026-01-15T12:00:00 [INFO] codearchive.access: GET /api/snippets 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the database for the lifetime of the application.

    Startup raises (and the process exits) when DATABASE_URL is missing or
    the database cannot be reached. There is no degraded mode.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("CodeArchive Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.critical("Configuration error: %s", str(e))
        raise

    database = Database.from_settings(settings)
    try:
        await database.ping()
    except Exception as e:
        logger.critical("Could not connect to the database: %s", str(e), exc_info=True)
        await database.dispose()
        raise

    app.state.database = database
    logger.info("Database connection verified")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("CodeArchive Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_body(request: Request, error: str, detail: str) -> dict:
    return {"error": error, "detail": detail, "request_id": _request_id(request)}


def _format_validation_errors(exc: RequestValidationError) -> str:
    """Render pydantic errors as 'field: message; field: message'."""
    parts = []
    for err in exc.errors():
        # loc is ("body", "title") / ("query", "skip"); drop the source prefix
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Validation failed"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Translate every error into the uniform {error, detail, request_id} body.

    Handler hierarchy:
        RequestValidationError  → 422 validation_error
        NotFoundError           → 404 not_found
        DatabaseError           → 500 server_error (generic detail)
        CodeArchiveError (base) → 500 server_error
        StarletteHTTPException  → its own status (unknown route, 405, ...)
        Exception (fallback)    → 500 internal_server_error

    Internal details (driver messages, stack traces) are logged, never returned.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        detail = _format_validation_errors(exc)
        logger.warning("[%s] Validation error: %s", _request_id(request), detail)
        return JSONResponse(
            status_code=422,
            content=_error_body(request, "validation_error", detail),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body(request, "not_found", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", _request_id(request), exc.message, exc.context
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request, "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(CodeArchiveError)
    async def handle_app_error(request: Request, exc: CodeArchiveError):
        logger.error("[%s] %s: %s | Context: %s", _request_id(request), type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "server_error", exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error = "not_found"
        elif exc.status_code == 405:
            error = "method_not_allowed"
        else:
            error = "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, error, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    # Only reached for failures raised outside UnhandledErrorMiddleware
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        return internal_error_response(request, exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CodeArchive API",
        description="Store and retrieve reusable code snippets.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → UnhandledError
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(snippets.router)
    app.include_router(health.router)

    return app


app = create_app()
