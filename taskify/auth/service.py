"""
Auth service - registration, login and refresh-token rotation.

State per user: Anonymous -> Registered (register) -> Authenticated
(login/refresh). The stored refresh token is the only session state; it is
overwritten on every login and refresh, and cleared on logout.
"""

from __future__ import annotations

import logging
import secrets

from taskify.auth.passwords import MAX_PASSWORD_BYTES, hash_password, password_too_long, verify_password
from taskify.auth.tokens import TokenDomain, TokenIssuer, TokenPair
from taskify.core.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenError,
    ValidationError,
)
from taskify.core.models import User, UserProfile
from taskify.storage.repositories import UserStore

logger = logging.getLogger(__name__)


class AuthService:
    """Orchestrates credentials, tokens and the user store."""

    def __init__(self, users: UserStore, issuer: TokenIssuer):
        self.users = users
        self.issuer = issuer

    async def register(self, email: str, password: str, name: str | None = None) -> UserProfile:
        """
        Create an account. No tokens are issued here.

        Raises ConflictError if the email is already registered, and
        ValidationError if the password is too long for bcrypt.
        """
        if password_too_long(password):
            raise ValidationError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

        if await self.users.get_by_email(email):
            raise ConflictError("User already exists")

        user = User(email=email, password_hash=hash_password(password), name=name)
        # Uniqueness is re-checked atomically by the store
        if not await self.users.create(user):
            raise ConflictError("User already exists")

        logger.info(f"Registered user {user.id}")
        return user.profile()

    async def login(self, email: str, password: str) -> TokenPair:
        """
        Authenticate and start a new session.

        Unknown email and wrong password raise the same error.
        """
        user = await self.users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials")

        pair = self.issuer.issue_pair({"id": user.id, "email": user.email})
        await self.users.set_refresh_token(user.id, pair.refresh_token)

        logger.info(f"User {user.id} logged in")
        return pair

    async def refresh(self, token: str) -> TokenPair:
        """
        Redeem a refresh token for a new pair.

        The presented token must be the one currently stored for the user.
        Once redeemed it is replaced, so a second redemption fails.
        """
        try:
            claims = self.issuer.verify(TokenDomain.REFRESH, token)
        except TokenError as e:
            logger.warning(f"Refresh rejected: {e.message}")
            raise InvalidTokenError("Invalid refresh token")

        user = await self.users.get_by_id(claims.id)
        if not user or not _same_token(user.refresh_token, token):
            logger.warning(f"Refresh rejected for {claims.id}: token not current")
            raise InvalidTokenError("Invalid refresh token")

        pair = self.issuer.issue_pair({"id": user.id, "email": user.email})
        if not await self.users.swap_refresh_token(user.id, token, pair.refresh_token):
            # Another request redeemed the same token first
            logger.warning(f"Refresh rejected for {user.id}: lost rotation race")
            raise InvalidTokenError("Invalid refresh token")

        return pair

    async def logout(self, user_id: str) -> None:
        """Revoke the user's refresh token."""
        await self.users.set_refresh_token(user_id, None)
        logger.info(f"User {user_id} logged out")

    async def get_profile(self, user_id: str) -> UserProfile:
        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user.profile()


def _same_token(stored: str | None, presented: str) -> bool:
    """Constant-time comparison of the stored and presented refresh tokens."""
    if not stored:
        return False
    return secrets.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))
