"""
CodeArchive Backend: Unhandled Error Middleware
================================================

What:  Turns any exception that escaped the route and its handlers into the
       500 `internal_server_error` body.
How:   Installed as the innermost middleware. Starlette would otherwise
       build that response in ServerErrorMiddleware, outside every user
       middleware, so it would carry neither CORS headers nor X-Request-ID.
"""

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from codearchive.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    rid = request_id_var.get("") or getattr(request.state, "request_id", "")
    logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "detail": "An unexpected error occurred. Please try again later.",
            "request_id": rid,
        },
    )


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return internal_error_response(request, e)
