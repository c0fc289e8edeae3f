"""
CodeArchive Backend: Snippet SQLAlchemy Model
==============================================

What:  ORM model representing the `snippets` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by SnippetService for CRUD operations.

Table Design:
    - UUID primary key, generated in Python so every backend assigns it the same way
    - title/language/code/version: validated by the request schemas before insert
    - author: free-form label, deliberately not a foreign key
    - created_at/updated_at: timezone-aware UTC, both set by the service

    Indexes:
        created_at DESC           → list ordering (most recent first)
        (author, created_at DESC) → an author's recent snippets
        title                     → title lookups
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, TypeDecorator, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from codearchive.database import Base


class Language(str, enum.Enum):
    """Languages a snippet may be tagged with."""

    JAVASCRIPT = "JavaScript"
    PYTHON = "Python"
    HTML = "HTML"
    CSS = "CSS"
    MARKDOWN = "Markdown"


class UTCDateTime(TypeDecorator):
    """
    DateTime column that always round-trips as an aware UTC datetime.

    PostgreSQL returns aware values already; SQLite drops the offset, so
    naive values read back are tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Snippet(Base):
    """
    A stored code sample and its metadata.

    Lifecycle:
        1. Created by SnippetService.create_snippet (id + timestamps assigned)
        2. Updated in place; updated_at moves forward on every update
        3. Hard-deleted; no tombstones
    """

    __tablename__ = "snippets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(40), nullable=False)

    language: Mapped[str] = mapped_column(String(20), nullable=False)

    code: Mapped[str] = mapped_column(Text, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Free-form identifier of whoever wrote the snippet; no referential integrity
    author: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("version BETWEEN 1 AND 999", name="ck_snippets_version_range"),
        CheckConstraint(
            "language IN ('JavaScript', 'Python', 'HTML', 'CSS', 'Markdown')",
            name="ck_snippets_language",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Snippet(id={self.id}, title='{self.title}', "
            f"language='{self.language}', version={self.version})>"
        )


# ── Indexes ───────────────────────────────────────────────────────────────
Index("idx_snippets_created_at", Snippet.created_at.desc())
Index("idx_snippets_author_created_at", Snippet.author, Snippet.created_at.desc())
Index("idx_snippets_title", Snippet.title)
