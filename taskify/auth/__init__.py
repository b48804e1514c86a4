"""
Authentication and authorization.

- passwords: bcrypt hashing
- tokens: access/refresh issuing and verification
- service: register, login, refresh rotation, logout
- middleware: bearer-token dependency for protected routes
- guard: ownership checks for projects and files
"""

from taskify.auth.context import Identity
from taskify.auth.guard import authorize_file, authorize_project, ensure_owner
from taskify.auth.middleware import authenticate, require_identity
from taskify.auth.passwords import hash_password, verify_password
from taskify.auth.service import AuthService
from taskify.auth.tokens import TokenClaims, TokenDomain, TokenIssuer, TokenPair
from taskify.auth.routes import router as auth_router

__all__ = [
    # Identity & guards
    "Identity",
    "ensure_owner",
    "authorize_project",
    "authorize_file",
    # Middleware
    "authenticate",
    "require_identity",
    # Passwords
    "hash_password",
    "verify_password",
    # Tokens
    "TokenClaims",
    "TokenDomain",
    "TokenIssuer",
    "TokenPair",
    # Service
    "AuthService",
    # Router
    "auth_router",
]
