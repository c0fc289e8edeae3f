"""
CodeArchive Backend: Service Health Route
==========================================

What:  GET /health for container and load balancer probes.
How:   Runs SELECT 1 through the lifespan-owned Database.

    database reachable   → 200 {"status": "healthy",   "database": "connected", ...}
    database unreachable → 503 {"status": "unhealthy", "database": "disconnected", ...}
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from codearchive import __version__
from codearchive.schemas.snippet import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Process start, for uptime_seconds
STARTED_AT = time.monotonic()


async def _database_reachable(request: Request) -> bool:
    try:
        await request.app.state.database.ping()
    except Exception as e:
        logger.warning("Health probe failed, database unreachable: %s", str(e))
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health with database probe",
)
async def health_check(request: Request):
    reachable = await _database_reachable(request)
    report = HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.monotonic() - STARTED_AT, 2),
    )
    if not reachable:
        return JSONResponse(status_code=503, content=report.model_dump())
    return report
