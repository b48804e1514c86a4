# =============================================================================
# JWT Token Issuing and Verification
# =============================================================================
#
# Two signing domains, each with its own secret and lifetime:
#   - access:  short-lived, stateless, sent on every protected request
#   - refresh: long-lived, stored on the user row, rotated on every use
#
# A token from one domain never verifies in the other.
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import jwt
from pydantic import BaseModel, Field

from taskify.config import Settings
from taskify.core.errors import TokenExpiredError, TokenInvalidError
from taskify.core.models import ApiModel
from taskify.core.utils import generate_id, parse_duration, utc_now


# =============================================================================
# Models
# =============================================================================


class TokenDomain(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    """Validated JWT payload."""
    id: str
    email: str
    exp: datetime
    iat: datetime
    jti: str = ""


class TokenPair(ApiModel):
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Seconds until the access token expires")


# =============================================================================
# Issuer
# =============================================================================


class TokenIssuer:
    """
    Signs and verifies tokens for both domains.

    Usage:
        issuer = TokenIssuer.from_settings(get_settings())
        token = issuer.issue(TokenDomain.ACCESS, {"id": user.id, "email": user.email})
        claims = issuer.verify(TokenDomain.ACCESS, token)
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: str | int = "15m",
        refresh_ttl: str | int = "7d",
        algorithm: str = "HS256",
    ):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must use different secrets")
        self._secrets = {
            TokenDomain.ACCESS: access_secret,
            TokenDomain.REFRESH: refresh_secret,
        }
        self._ttls = {
            TokenDomain.ACCESS: parse_duration(access_ttl),
            TokenDomain.REFRESH: parse_duration(refresh_ttl),
        }
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(
            access_secret=settings.jwt_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl=settings.jwt_access_expires,
            refresh_ttl=settings.jwt_refresh_expires,
            algorithm=settings.jwt_algorithm,
        )

    def ttl(self, domain: TokenDomain) -> int:
        return self._ttls[domain]

    def issue(self, domain: TokenDomain, claims: dict[str, Any]) -> str:
        """Sign `{id, email}` plus iat/exp/jti for the given domain."""
        now = utc_now()
        payload = {
            "id": claims["id"],
            "email": claims["email"],
            "iat": now,
            "exp": now + timedelta(seconds=self._ttls[domain]),
            # Makes every token unique, even two issued in the same second
            "jti": generate_id("tok"),
        }
        return jwt.encode(payload, self._secrets[domain], algorithm=self.algorithm)

    def issue_pair(self, claims: dict[str, Any]) -> TokenPair:
        """Create both access and refresh tokens."""
        return TokenPair(
            access_token=self.issue(TokenDomain.ACCESS, claims),
            refresh_token=self.issue(TokenDomain.REFRESH, claims),
            expires_in=self._ttls[TokenDomain.ACCESS],
        )

    def verify(self, domain: TokenDomain, token: str) -> TokenClaims:
        """
        Decode and validate a token for the given domain.

        Raises:
            TokenExpiredError: Token has expired
            TokenInvalidError: Bad signature, wrong domain, or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[domain],
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")

        if not isinstance(payload.get("id"), str) or not isinstance(payload.get("email"), str):
            raise TokenInvalidError("Invalid token: missing identity claims")

        return TokenClaims(
            id=payload["id"],
            email=payload["email"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            jti=payload.get("jti", ""),
        )
