"""
NoteKeeper Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure kind a core
       operation can report.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) map them to HTTP
       status codes and the `{success: false, error, code}` envelope.
Who:   Raised by services and the identity dependency; caught by handlers.

Exception Hierarchy:
    NoteKeeperError (base)
    ├── ValidationError          → 400 Bad Request
    │   └── InvalidLabelsError   → 400 Bad Request (label ownership)
    ├── ConflictError            → 400 Bad Request (duplicate label name)
    ├── AuthenticationError      → 401 (missing or invalid bearer token)
    ├── UnauthorizedError        → 401 (record owned by another user)
    ├── NotFoundError            → 404 Not Found
    └── DatabaseError            → 500 Internal Server Error

Every failure except DatabaseError is raised before the first write of an
operation, so rejected requests never leave partial changes behind.
"""

from typing import Any, Dict, Optional


class NoteKeeperError(Exception):
    """
    Base exception for all NoteKeeper application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteKeeperError):
    """
    Raised when client input fails a business-rule validation.

    Schema-level problems (missing fields, bad id shape) are rejected earlier
    by FastAPI and reported with the same 400 envelope.
    """

    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidLabelsError(ValidationError):
    """One or more label ids do not resolve to labels of the caller."""

    code = "invalid_labels"

    def __init__(self, label_ids: Optional[list] = None):
        ctx = {"label_ids": list(label_ids)} if label_ids else None
        super().__init__(message="Invalid labels", field="labels", context=ctx)


class ConflictError(NoteKeeperError):
    """Uniqueness violation, e.g. a second label with the same name."""

    code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(NoteKeeperError):
    """No usable caller identity: missing, malformed or expired token."""

    code = "not_authenticated"

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(NoteKeeperError):
    """
    The record exists but belongs to another user.

    Only raised after the existence check, see services/ownership.py.
    """

    code = "unauthorized"

    def __init__(
        self,
        resource: str = "resource",
        action: str = "access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"Not authorized to {action} this {resource}",
            context=context,
        )
        self.resource = resource


class NotFoundError(NoteKeeperError):
    """Raised when a requested resource does not exist."""

    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(NoteKeeperError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the context is
    logged server-side only.
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
