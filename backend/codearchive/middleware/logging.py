"""
CodeArchive Backend: Request Logging Middleware
================================================

What:  One access log line per request on the `codearchive.access` logger.
How:   Times the downstream call and logs at a level chosen by status class
       (5xx ERROR, 4xx WARNING, otherwise INFO). The same values are attached
       as `extra` fields for structured handlers.

Not logged: request bodies (snippet code can be large and private) and
headers. Health probes are skipped entirely.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from codearchive.middleware.request_id import request_id_var

logger = logging.getLogger("codearchive.access")

ACCESS_FORMAT = "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] from %(client_ip)s"


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # /health and /api/snippets/health are polled constantly
        if request.url.path.endswith("/health"):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)

        entry = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(_level_for(response.status_code), ACCESS_FORMAT % entry, extra=entry)
        return response
