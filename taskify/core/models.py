"""
Core data models for the taskify API.

Users own projects; projects hold uploaded files. Models that leave the
API are serialized with camelCase aliases.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskify.core.utils import generate_id, utc_now


class ApiModel(BaseModel):
    """Base for models exposed over HTTP (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# User
# =============================================================================


class User(BaseModel):
    """
    A registered user as persisted by the user store.

    `refresh_token` is the single active session. It is overwritten on every
    login/refresh and cleared on logout.
    """

    id: str = Field(default_factory=lambda: generate_id("usr"))
    email: str
    password_hash: str
    name: str | None = None
    refresh_token: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    def profile(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
        )


class UserProfile(ApiModel):
    """User data returned to clients (no credentials)."""

    id: str
    email: str
    name: str | None = None
    created_at: datetime


# =============================================================================
# Project
# =============================================================================


class Project(ApiModel):
    """A project. Exactly one owner; only the owner may touch it."""

    id: str = Field(default_factory=lambda: generate_id("proj"))
    title: str = Field(min_length=1)
    description: str | None = None
    owner_id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Files
# =============================================================================


class StoredFile(ApiModel):
    """
    Metadata for a file attached to a project.

    Access is decided by the parent project's owner, not by `uploaded_by`.
    """

    id: str = Field(default_factory=lambda: generate_id("file"))
    original_name: str
    stored_name: str
    mime_type: str
    size: int
    url: str
    public_id: str
    project_id: str
    uploaded_by: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class FileStats(ApiModel):
    total_files: int = 0
    total_size: int = 0
