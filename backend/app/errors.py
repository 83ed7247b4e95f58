"""API error taxonomy.

Every failure surfaced to a client is an ``ApiError`` subclass carrying the
HTTP status, the envelope message and optional details. Services raise
these; routes and the auth decorators turn them into envelopes.
"""

from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """Base exception for errors reported to API clients."""

    status = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Any = None, status: Optional[int] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details
        if status is not None:
            self.status = status


class Unauthenticated(ApiError):
    status = 401
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None, *, details: Any = "No token provided") -> None:
        super().__init__(message, details=details)


class ExpiredToken(ApiError):
    status = 401
    default_message = "Token expired"

    def __init__(self, message: Optional[str] = None, *, details: Any = "Please login again") -> None:
        super().__init__(message, details=details)


class MalformedToken(ApiError):
    status = 401
    default_message = "Invalid token"

    def __init__(self, message: Optional[str] = None, *, details: Any = "Invalid token format") -> None:
        super().__init__(message, details=details)


class AdminNotFound(ApiError):
    """Token was valid but the admin it names no longer exists."""

    status = 401
    default_message = "Invalid token"

    def __init__(self, message: Optional[str] = None, *, details: Any = "Admin not found") -> None:
        super().__init__(message, details=details)


class InvalidCredentials(ApiError):
    status = 401
    default_message = "Invalid credentials"


class Forbidden(ApiError):
    status = 403
    default_message = "Access denied"


class NotFound(ApiError):
    status = 404
    default_message = "Not found"


class BadRequest(ApiError):
    status = 400
    default_message = "Bad request"


class ValidationFailed(BadRequest):
    """Carries the per-field failures as details."""

    default_message = "Validation failed"

    def __init__(self, errors: list, message: Optional[str] = None) -> None:
        super().__init__(message, details=errors)
        self.errors = errors


class Conflict(ApiError):
    status = 409
    default_message = "Duplicate value"

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Duplicate {field}",
            details=f"{field[:1].upper()}{field[1:]} already exists",
        )
        self.field = field


class Internal(ApiError):
    status = 500
    default_message = "Internal server error"
