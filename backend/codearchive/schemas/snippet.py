"""
CodeArchive Backend: Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between clients and the backend.
How:   FastAPI validates request bodies against these models before a route
       handler runs, serializes responses through them, and builds the
       OpenAPI document from them.

Field rules (enforced on both create and update):
    title     4-40 characters after trimming surrounding whitespace
    language  one of JavaScript, Python, HTML, CSS, Markdown
    code      6-5000 characters, stored verbatim
    version   integer 1-999, defaults to 1
    author    optional free-form label

Responses use camelCase timestamps (createdAt / updatedAt) to match what
the front end already consumes.
"""

import uuid
from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
)

from codearchive.models.snippet import Language

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=4, max_length=40)]
Code = Annotated[str, StringConstraints(min_length=6, max_length=5000)]
Version = Annotated[int, Field(ge=1, le=999)]


def _strip_language(value: Any) -> Any:
    # " Python " is accepted as "Python"
    if isinstance(value, str):
        return value.strip()
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SnippetCreate(BaseModel):
    """
    What:  Body of POST /api/snippets.
    Note:  Unknown keys (including id, createdAt, updatedAt) are ignored.
    """

    model_config = ConfigDict(use_enum_values=True)

    title: Title = Field(description="Short human name for the snippet")
    language: Language = Field(description="Language the code is written in")
    code: Code = Field(description="Source text of the snippet")
    version: Version = Field(default=1, description="Revision number")
    author: Optional[str] = Field(default=None, description="Free-form author label")

    @field_validator("language", mode="before")
    @classmethod
    def strip_language(cls, v: Any) -> Any:
        return _strip_language(v)


class SnippetUpdate(BaseModel):
    """
    What:  Body of PUT /api/snippets/{id}.
    How:   Every field is optional; only the keys present in the body are
           applied. Required snippet fields may be omitted but not nulled.
    """

    model_config = ConfigDict(use_enum_values=True)

    title: Optional[Title] = None
    language: Optional[Language] = None
    code: Optional[Code] = None
    version: Optional[Version] = None
    author: Optional[str] = None

    @field_validator("title", "language", "code", "version", mode="before")
    @classmethod
    def reject_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("language", mode="before")
    @classmethod
    def strip_language(cls, v: Any) -> Any:
        return _strip_language(v)

    def changes(self) -> dict:
        """Fields the client actually sent, ready to assign onto a Snippet."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SnippetResponse(BaseModel):
    """
    A stored snippet as returned by every snippet endpoint.

    Built from the ORM object (from_attributes). Timestamps are emitted as
    createdAt/updatedAt; either spelling is accepted on input because
    FastAPI re-validates the dumped model against the response model.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID = Field(description="Unique snippet identifier (UUID)")
    title: str
    language: str
    code: str
    version: int
    author: Optional[str] = None
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
        description="When the snippet was created (UTC ISO 8601)",
    )
    updated_at: datetime = Field(
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        serialization_alias="updatedAt",
        description="When the snippet was last changed (UTC ISO 8601)",
    )


class SnippetListResponse(BaseModel):
    """
    One page of GET /api/snippets.

    skip/limit are the values actually applied after clamping, not the raw
    query parameters.
    """

    total: int = Field(description="Number of snippets in the store")
    skip: int = Field(description="Effective offset")
    limit: int = Field(description="Effective page size")
    items: List[SnippetResponse] = Field(description="Snippets, most recently created first")


class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    """
    Body of every non-2xx response.

    error categories: validation_error, not_found, method_not_allowed,
    http_error, server_error, internal_server_error
    """

    error: str = Field(description="Machine-readable error category")
    detail: str = Field(description="Human-readable description")
    request_id: str = Field(default="", description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the process started")
