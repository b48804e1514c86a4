"""
Core module - data models, error taxonomy and shared utilities.
"""

from taskify.core.errors import (
    ErrorKind,
    TaskifyError,
    ValidationError,
    UnauthenticatedError,
    InvalidCredentialsError,
    InvalidTokenError,
    ForbiddenError,
    AccessDeniedError,
    NotFoundError,
    ConflictError,
    StorageError,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
)
from taskify.core.models import (
    User,
    UserProfile,
    Project,
    StoredFile,
    FileStats,
)
from taskify.core.utils import generate_id, utc_now, parse_duration

__all__ = [
    # Errors
    "ErrorKind",
    "TaskifyError",
    "ValidationError",
    "UnauthenticatedError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "ForbiddenError",
    "AccessDeniedError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    # Models
    "User",
    "UserProfile",
    "Project",
    "StoredFile",
    "FileStats",
    # Utils
    "generate_id",
    "utc_now",
    "parse_duration",
]
