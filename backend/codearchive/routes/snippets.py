"""
CodeArchive Backend: Snippet Route Handlers
============================================

What:  CRUD endpoints for snippets, mounted at /api/snippets.
How:   Extracts path/query/body data, delegates to SnippetService, sets
       status codes and headers. Errors raised by the service are turned
       into responses by the handlers registered in main.py.

Endpoints:
    GET    /api/snippets/health  → {"status": "ok"}
    GET    /api/snippets         → paginated list (skip/limit)
    GET    /api/snippets/{id}    → one snippet
    POST   /api/snippets         → create (201)
    PUT    /api/snippets/{id}    → partial or full update
    DELETE /api/snippets/{id}    → delete (204, empty body)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from codearchive.database import get_db_session
from codearchive.schemas.snippet import (
    ErrorResponse,
    SnippetCreate,
    SnippetListResponse,
    SnippetResponse,
    SnippetUpdate,
    StatusResponse,
)
from codearchive.services.snippet_service import snippet_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/snippets", tags=["Snippets"])


# Declared before /{snippet_id} so "health" is not taken for an id
@router.get("/health", response_model=StatusResponse, summary="Snippet API liveness")
async def snippets_health() -> StatusResponse:
    return StatusResponse(status="ok")


@router.get(
    "",
    response_model=SnippetListResponse,
    responses={500: {"description": "Store fault", "model": ErrorResponse}},
    summary="List snippets, most recent first",
    description=(
        "skip is clamped to >= 0 (default 0) and limit to 1..100 (default 20). "
        "Out-of-range or non-numeric values are clamped, never rejected."
    ),
)
async def list_snippets(
    response: Response,
    # Plain strings: clamping happens in the service instead of a 422 here
    skip: Optional[str] = Query(default=None, description="Number of snippets to skip"),
    limit: Optional[str] = Query(default=None, description="Page size (1-100)"),
    db: AsyncSession = Depends(get_db_session),
) -> SnippetListResponse:
    result = await snippet_service.list_snippets(db=db, skip=skip, limit=limit)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/{snippet_id}",
    response_model=SnippetResponse,
    responses={404: {"description": "Snippet not found", "model": ErrorResponse}},
    summary="Get a single snippet by ID",
)
async def get_snippet(
    snippet_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SnippetResponse:
    """
    snippet_id is taken as a plain string so malformed ids reach the
    service and come back as 404 rather than a 422 from path parsing.
    """
    return await snippet_service.get_snippet(db=db, snippet_id=snippet_id)


@router.post(
    "",
    status_code=201,
    response_model=SnippetResponse,
    responses={422: {"description": "Validation failed", "model": ErrorResponse}},
    summary="Create a snippet",
)
async def create_snippet(
    payload: SnippetCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SnippetResponse:
    return await snippet_service.create_snippet(db=db, payload=payload)


@router.put(
    "/{snippet_id}",
    response_model=SnippetResponse,
    responses={
        404: {"description": "Snippet not found", "model": ErrorResponse},
        422: {"description": "Validation failed", "model": ErrorResponse},
    },
    summary="Update a snippet",
    description="Only the fields present in the body are changed; updatedAt is always refreshed.",
)
async def update_snippet(
    snippet_id: str,
    payload: SnippetUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> SnippetResponse:
    return await snippet_service.update_snippet(db=db, snippet_id=snippet_id, payload=payload)


@router.delete(
    "/{snippet_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"description": "Snippet not found", "model": ErrorResponse}},
    summary="Delete a snippet",
)
async def delete_snippet(
    snippet_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await snippet_service.delete_snippet(db=db, snippet_id=snippet_id)
    return Response(status_code=204)
