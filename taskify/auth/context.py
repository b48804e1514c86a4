"""
Caller identity attached to authenticated requests.
"""

from __future__ import annotations

from dataclasses import dataclass

from taskify.auth.tokens import TokenClaims


@dataclass(frozen=True)
class Identity:
    """
    Who is calling, as embedded in the access token at issue time.

    Never re-read from the user store: a renamed or deleted user keeps
    this identity until their next login.
    """

    id: str
    email: str

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> Identity:
        return cls(id=claims.id, email=claims.email)
