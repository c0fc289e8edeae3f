"""
CodeArchive Backend: Snippet Service (Business Logic)
======================================================

What:  List/get/create/update/delete for snippets, independent of HTTP.
How:   Each method receives the request's AsyncSession, runs at most two
       round trips against the store, and commits its own writes.
Who:   Called by the snippet route handlers.

Error Handling Strategy:
    - Missing or malformed ids raise NotFoundError (404), never a fault
    - Any other failure from the database layer is logged with its stack
      trace and re-raised as DatabaseError (generic 500 for the client)
    - Input validation has already happened in the request schemas, so a
      write either applies the whole body or nothing
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from codearchive.config import settings
from codearchive.exceptions import DatabaseError, NotFoundError
from codearchive.models.snippet import Snippet
from codearchive.schemas.snippet import (
    SnippetCreate,
    SnippetListResponse,
    SnippetResponse,
    SnippetUpdate,
)

logger = logging.getLogger(__name__)

# OFFSET must fit a signed 64-bit integer for both SQLite and asyncpg
MAX_SKIP = 2**63 - 1


def _parse_int(value, default: int) -> int:
    """Lenient integer parsing for query strings; garbage falls back to default."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def resolve_page(skip=None, limit=None) -> Tuple[int, int]:
    """
    Clamp raw pagination input to the effective window.

    skip  → between 0 and MAX_SKIP (default 0)
    limit → between 1 and max_page_size (default default_page_size)

    Never raises: negative, zero, oversized and non-numeric values are all
    pulled into range.
    """
    effective_skip = min(max(_parse_int(skip, 0), 0), MAX_SKIP)
    effective_limit = min(
        max(_parse_int(limit, settings.default_page_size), 1),
        settings.max_page_size,
    )
    return effective_skip, effective_limit


def _parse_id(snippet_id) -> Optional[uuid.UUID]:
    if isinstance(snippet_id, uuid.UUID):
        return snippet_id
    try:
        return uuid.UUID(str(snippet_id))
    except ValueError:
        return None


def _next_timestamp(previous: datetime) -> datetime:
    # updated_at must move strictly forward, even within one clock tick
    now = datetime.now(timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class SnippetService:
    """
    Business logic layer for snippet operations.

    Responsibilities:
        - list_snippets(): Clamped skip/limit page, newest first, plus total
        - get_snippet(): Single snippet or NotFoundError
        - create_snippet(): Assigns id and timestamps, persists
        - update_snippet(): Applies only the sent fields, bumps updated_at
        - delete_snippet(): Hard delete or NotFoundError

    Stateless: the session is passed in per call.
    """

    async def list_snippets(self, db: AsyncSession, skip=None, limit=None) -> SnippetListResponse:
        """
        Return one page of snippets ordered by created_at descending.

        Snippets sharing a created_at are ordered by id descending, so
        consecutive pages never overlap or skip a record.

        Query plan:
            SELECT ... FROM snippets ORDER BY created_at DESC, id DESC LIMIT :limit OFFSET :skip
            SELECT count(*) FROM snippets
        """
        skip, limit = resolve_page(skip, limit)
        try:
            result = await db.execute(
                select(Snippet)
                .order_by(desc(Snippet.created_at), desc(Snippet.id))
                .offset(skip)
                .limit(limit)
            )
            snippets = list(result.scalars().all())

            count_result = await db.execute(select(func.count(Snippet.id)))
            total = count_result.scalar() or 0
        except Exception as e:
            logger.error("Database error listing snippets: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve snippets. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        return SnippetListResponse(
            total=total,
            skip=skip,
            limit=limit,
            items=[SnippetResponse.model_validate(s) for s in snippets],
        )

    async def get_snippet(self, db: AsyncSession, snippet_id) -> SnippetResponse:
        snippet = await self._load(db, snippet_id)
        return SnippetResponse.model_validate(snippet)

    async def create_snippet(self, db: AsyncSession, payload: SnippetCreate) -> SnippetResponse:
        """
        Persist a new snippet.

        created_at and updated_at share one timestamp so a fresh record
        always reports createdAt == updatedAt.
        """
        now = datetime.now(timezone.utc)
        snippet = Snippet(
            id=uuid.uuid4(),
            created_at=now,
            updated_at=now,
            **payload.model_dump(),
        )
        try:
            db.add(snippet)
            await db.commit()
        except Exception as e:
            logger.error("Database error creating snippet: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the snippet. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Snippet created: %s (%s)", snippet.id, snippet.language)
        return SnippetResponse.model_validate(snippet)

    async def update_snippet(
        self, db: AsyncSession, snippet_id, payload: SnippetUpdate
    ) -> SnippetResponse:
        """
        Apply the fields present in `payload` to an existing snippet.

        Fields absent from the request body keep their stored values.
        updated_at is refreshed even when the body carries no changes.
        """
        snippet = await self._load(db, snippet_id)
        changes = payload.changes()

        for field, value in changes.items():
            setattr(snippet, field, value)
        snippet.updated_at = _next_timestamp(snippet.updated_at)

        try:
            await db.commit()
        except Exception as e:
            logger.error("Database error updating snippet %s: %s", snippet_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the snippet. Please try again.",
                context={"snippet_id": str(snippet_id), "error_type": type(e).__name__},
            ) from e

        logger.info("Snippet updated: %s fields=%s", snippet.id, sorted(changes))
        return SnippetResponse.model_validate(snippet)

    async def delete_snippet(self, db: AsyncSession, snippet_id) -> None:
        """
        Remove a snippet with a single DELETE statement.

        Deleting an id that is already gone raises NotFoundError again.
        """
        uid = _parse_id(snippet_id)
        if uid is None:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))

        try:
            result = await db.execute(delete(Snippet).where(Snippet.id == uid))
            await db.commit()
        except Exception as e:
            logger.error("Database error deleting snippet %s: %s", snippet_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the snippet. Please try again.",
                context={"snippet_id": str(snippet_id), "error_type": type(e).__name__},
            ) from e

        if not result.rowcount:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))

        logger.info("Snippet deleted: %s", uid)

    async def _load(self, db: AsyncSession, snippet_id) -> Snippet:
        uid = _parse_id(snippet_id)
        if uid is None:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))

        try:
            result = await db.execute(select(Snippet).where(Snippet.id == uid))
            snippet = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching snippet %s: %s", snippet_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the snippet. Please try again.",
                context={"snippet_id": str(snippet_id)},
            ) from e

        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))
        return snippet


snippet_service = SnippetService()
