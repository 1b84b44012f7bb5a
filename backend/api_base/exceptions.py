"""
API Base — Custom Exception Hierarchy
======================================

What:  Application-specific exceptions for the non-security error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message, an optional context dict, a
       status code and a machine-readable error code. Global exception
       handlers (registered in main.py) turn them into the response envelope.
Who:   Raised by repositories, command/query handlers and auth dependencies.

Exception Hierarchy:
    AppError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    │   └── DuplicateNameError   → 400 Bad Request (unique name taken)
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── RequestTimeoutError      → 408 Request Timeout
    └── DatabaseError            → 500 Internal Server Error

Security violations live in api_base.security.exceptions; they carry a
security code and severity on top of the same message/context pair.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info
        status_code:  HTTP status used by the global handler
        error:        Machine-readable error code
    """

    status_code: int = 500
    error: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """
    Raised when client input fails a business rule.

    Schema-level validation (types, lengths, patterns) is handled by FastAPI's
    RequestValidationError; this class covers rules that need the database.
    """

    status_code = 400
    error = "validation_error"

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


class DuplicateNameError(ValidationError):
    """Raised when an Example name is already used by another row."""

    error = "duplicate_name"

    def __init__(self, name: str, resource: str = "Example"):
        super().__init__(
            message=f"{resource} with name '{name}' already exists",
            field="name",
            context={"name": name},
        )
        self.name = name


class AuthenticationError(AppError):
    """Raised by the bearer-token guard when a token is missing or invalid."""

    status_code = 401
    error = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(AppError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records (not an exception). We convert
    None → NotFoundError in the handler layer to keep HTTP concerns out of the
    repository while still producing a 404.
    """

    status_code = 404
    error = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RequestTimeoutError(AppError):
    """Raised when a request exceeds the configured processing time."""

    status_code = 408
    error = "request_timeout"

    def __init__(self, timeout_seconds: float):
        timeout_ms = int(timeout_seconds * 1000)
        super().__init__(
            message=f"Request timeout after {timeout_ms}ms",
            context={"timeout_ms": timeout_ms},
        )
        self.timeout_seconds = timeout_seconds


class DatabaseError(AppError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Detailed error
        info (SQL, constraint names) is logged server-side only.
    """

    status_code = 500
    error = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
