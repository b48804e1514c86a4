"""
Error taxonomy.

Every domain failure carries an ErrorKind. The HTTP boundary maps the kind
to a status code; nothing downstream inspects message text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """What went wrong, independent of transport."""

    VALIDATION = "validation"
    UNAUTHENTICATED = "unauthenticated"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    FORBIDDEN = "forbidden"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.ACCESS_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORAGE: 502,
}


class TaskifyError(Exception):
    """Base exception for all domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION
    default_message = "Request failed"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(TaskifyError):
    kind = ErrorKind.VALIDATION
    default_message = "Validation failed"


class UnauthenticatedError(TaskifyError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Authorization header missing"


class InvalidCredentialsError(TaskifyError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"


class InvalidTokenError(TaskifyError):
    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid refresh token"


class ForbiddenError(TaskifyError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Invalid or expired token"


class AccessDeniedError(TaskifyError):
    kind = ErrorKind.ACCESS_DENIED
    default_message = "Access denied: You are not the owner of this project"


class NotFoundError(TaskifyError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ConflictError(TaskifyError):
    kind = ErrorKind.CONFLICT
    default_message = "User already exists"


class StorageError(TaskifyError):
    kind = ErrorKind.STORAGE
    default_message = "Storage provider failure"


# =============================================================================
# Token errors (raised by the issuer, translated by callers)
# =============================================================================


class TokenError(TaskifyError):
    """Base exception for token errors."""
    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid token"


class TokenExpiredError(TokenError):
    """Token has expired."""
    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "Token has expired"


class TokenInvalidError(TokenError):
    """Token signature, structure or claims are bad."""
    pass
