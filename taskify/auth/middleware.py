"""
Bearer-token authentication for protected routes.

Missing header -> 401. Header present but no usable bearer token, or the
token fails verification -> 403. Clients rely on the difference.

Usage in routes:
    async def my_route(identity: Identity = Depends(require_identity)):
        ...
"""

from __future__ import annotations

import logging

from fastapi import Request

from taskify.auth.context import Identity
from taskify.auth.tokens import TokenDomain, TokenIssuer
from taskify.core.errors import ForbiddenError, TokenError, UnauthenticatedError

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: str) -> str | None:
    """Return the token from "Bearer <token>", or None if malformed."""
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def authenticate(authorization: str | None, issuer: TokenIssuer) -> Identity:
    """
    Resolve the caller identity from an Authorization header value.

    Raises:
        UnauthenticatedError: no header
        ForbiddenError: malformed header, bad or expired token
    """
    if not authorization:
        raise UnauthenticatedError("Authorization header missing")

    token = extract_bearer_token(authorization)
    if not token:
        raise ForbiddenError("Invalid or expired token")

    try:
        claims = issuer.verify(TokenDomain.ACCESS, token)
    except TokenError as e:
        logger.debug(f"Access token rejected: {e.message}")
        raise ForbiddenError("Invalid or expired token")

    return Identity.from_claims(claims)


async def require_identity(request: Request) -> Identity:
    """FastAPI dependency: authenticate the request or fail."""
    identity = authenticate(
        request.headers.get("authorization"),
        request.app.state.token_issuer,
    )
    request.state.identity = identity
    return identity
