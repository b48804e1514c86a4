"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (local filesystem -> object store, in-memory -> PostgreSQL,
in-process cache -> Redis) without changing application code.

Integration Points:
- ContentStorage -> object storage (uploaded file bytes)
- MetadataStorage -> relational/document database (users, projects, files)
- CacheStorage -> Redis (response cache)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator

from pydantic import BaseModel


# =============================================================================
# Storage Interfaces
# =============================================================================


class ContentStorage(ABC):
    """
    Storage for binary content (uploaded attachments).

    Local Implementation: Filesystem
    """

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store content, return URL/path."""
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Retrieve content by key."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete content."""
        pass

    @abstractmethod
    async def get_url(self, key: str, expires_in: int = 3600) -> str:
        """Get a URL for direct access."""
        pass

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> AsyncIterator[str]:
        """List keys with optional prefix."""
        pass


class MetadataStorage(ABC):
    """
    Storage for structured records (users, projects, files).

    Local Implementation: in-memory
    """

    @abstractmethod
    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        """Save a document to a collection."""
        pass

    @abstractmethod
    async def create(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        unique: list[str] | None = None,
    ) -> bool:
        """
        Insert a new document.

        Returns False (and writes nothing) if another document in the
        collection already has the same value for any field in `unique`.
        """
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents with optional equality filters."""
        pass

    @abstractmethod
    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> bool:
        """Partial update of a document."""
        pass

    @abstractmethod
    async def compare_and_set(
        self,
        collection: str,
        id: str,
        field: str,
        expected: Any,
        new: Any,
    ) -> bool:
        """
        Atomically set `field` to `new` iff its current value equals `expected`.

        Returns True if the write happened.
        """
        pass


class CacheStorage(ABC):
    """
    Fast key-value cache for computed responses.

    Implementations must never raise on backend outages: reads degrade to
    a miss and writes/invalidations to a no-op.
    """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set a value with optional TTL in seconds."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Get a value."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        pass

    @abstractmethod
    async def invalidate(self, pattern: str) -> int:
        """Delete every key matching a glob pattern, return how many."""
        pass

    async def is_healthy(self) -> bool:
        return True

    async def close(self) -> None:
        return None


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Built once by the app factory; services receive the pieces they need.
    """

    model_config = {"arbitrary_types_allowed": True}

    content: ContentStorage
    metadata: MetadataStorage
    cache: CacheStorage


# =============================================================================
# Collection Names (for MetadataStorage)
# =============================================================================


class Collections:
    """Standard collection/table names."""

    USERS = "users"
    PROJECTS = "projects"
    FILES = "files"
