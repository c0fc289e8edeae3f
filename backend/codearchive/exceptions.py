"""
CodeArchive Backend: Custom Exception Hierarchy
================================================

What:  The failures a service can report, independent of HTTP.
How:   Every exception carries a client-safe `message` and a `context` dict
       for the logs. main.register_exception_handlers() turns them into the
       `{error, detail, request_id}` body.

Exception Hierarchy:
    CodeArchiveError
    ├── NotFoundError   → 404 not_found
    └── DatabaseError   → 500 server_error

Bad request bodies never get this far: the request schemas reject them and
FastAPI raises RequestValidationError, which main.py maps to 422.
"""

from typing import Any, Dict, Optional


class CodeArchiveError(Exception):
    """
    Root of the service's exceptions.

    `message` may be shown to API clients. `context` holds ids, driver
    error names and similar debugging data and is only ever logged.
    """

    default_message = "Something went wrong while handling the request"

    def __init__(self, message: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.context = dict(context or {})
        super().__init__(self.message)


class NotFoundError(CodeArchiveError):
    """
    No record answers to the given id.

    Covers ids that cannot name a record at all (wrong shape), which a
    client cannot tell apart from ids that name nothing.
    """

    def __init__(self, resource: str = "resource", resource_id: Optional[str] = None):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource.capitalize()} not found",
            context={"resource": resource, "resource_id": resource_id},
        )


class DatabaseError(CodeArchiveError):
    """The store failed a read or write. Clients only ever see a generic message."""

    default_message = "A database error occurred. Please try again later."
