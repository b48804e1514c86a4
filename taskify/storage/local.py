"""
Local storage implementations for development and tests.

These are in-memory or filesystem-based implementations
that work without any external services.
"""

from __future__ import annotations

import asyncio
import copy
import fnmatch
from pathlib import Path
from typing import Any, AsyncIterator
from datetime import datetime, timezone

from taskify.storage.base import (
    ContentStorage,
    MetadataStorage,
    CacheStorage,
    StorageProvider,
)


# =============================================================================
# Local Filesystem Content Storage
# =============================================================================


class LocalContentStorage(ContentStorage):
    """Store content on local filesystem."""

    def __init__(self, base_path: str = "./data/content", base_url: str = "/content"):
        self.base_path = Path(base_path)
        self.base_url = base_url.rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_to_path(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if self.base_path.resolve() not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        path = self._key_to_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return await self.get_url(key)

    async def get(self, key: str) -> bytes:
        path = self._key_to_path(key)
        if not path.exists():
            raise FileNotFoundError(f"Content not found: {key}")
        return path.read_bytes()

    async def delete(self, key: str) -> bool:
        path = self._key_to_path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    async def get_url(self, key: str, expires_in: int = 3600) -> str:
        # Public URL relative to base_url; never exposes the server path
        self._key_to_path(key)
        return f"{self.base_url}/{key}"

    async def list_keys(self, prefix: str = "") -> AsyncIterator[str]:
        search_path = self.base_path / prefix if prefix else self.base_path
        if search_path.exists():
            for path in search_path.rglob("*"):
                if path.is_file():
                    yield str(path.relative_to(self.base_path))


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory document storage for development."""

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        # Serializes read-then-write operations (unique inserts, CAS)
        self._lock = asyncio.Lock()

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._data.setdefault(collection, {})

    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        self._collection(collection)[id] = {
            **copy.deepcopy(data),
            "_id": id,
            "_updated_at": datetime.now(timezone.utc).isoformat(),
        }

    async def create(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        unique: list[str] | None = None,
    ) -> bool:
        async with self._lock:
            docs = self._collection(collection)
            if id in docs:
                return False
            for field in unique or []:
                if any(doc.get(field) == data.get(field) for doc in docs.values()):
                    return False
            await self.save(collection, id, data)
            return True

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        return copy.deepcopy(doc) if doc is not None else None

    async def delete(self, collection: str, id: str) -> bool:
        if collection in self._data and id in self._data[collection]:
            del self._data[collection][id]
            return True
        return False

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        if collection not in self._data:
            return []

        results = list(self._data[collection].values())

        if filters:
            results = [
                doc for doc in results
                if all(doc.get(key) == value for key, value in filters.items())
            ]

        return copy.deepcopy(results[offset:offset + limit])

    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> bool:
        if collection in self._data and id in self._data[collection]:
            self._data[collection][id].update(copy.deepcopy(updates))
            self._data[collection][id]["_updated_at"] = datetime.now(timezone.utc).isoformat()
            return True
        return False

    async def compare_and_set(
        self,
        collection: str,
        id: str,
        field: str,
        expected: Any,
        new: Any,
    ) -> bool:
        async with self._lock:
            doc = self._data.get(collection, {}).get(id)
            if doc is None or doc.get(field) != expected:
                return False
            return await self.update(collection, id, {field: new})


# =============================================================================
# In-Memory Cache Storage
# =============================================================================


class InMemoryCacheStorage(CacheStorage):
    """In-memory cache for development."""

    def __init__(self):
        self._cache: dict[str, tuple[Any, float | None]] = {}

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = None
        if ttl:
            expires_at = datetime.now(timezone.utc).timestamp() + ttl
        self._cache[key] = (value, expires_at)

    async def get(self, key: str) -> Any | None:
        if key not in self._cache:
            return None

        value, expires_at = self._cache[key]
        if expires_at and datetime.now(timezone.utc).timestamp() > expires_at:
            del self._cache[key]
            return None

        return value

    async def delete(self, key: str) -> bool:
        if key in self._cache:
            del self._cache[key]
            return True
        return False

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def invalidate(self, pattern: str) -> int:
        keys = [key for key in self._cache if fnmatch.fnmatchcase(key, pattern)]
        for key in keys:
            del self._cache[key]
        return len(keys)


# =============================================================================
# Factory
# =============================================================================


def create_local_storage(
    content_dir: str = "./data/content",
    cache: CacheStorage | None = None,
    content_base_url: str = "/content",
) -> StorageProvider:
    """Create a StorageProvider with local implementations."""
    return StorageProvider(
        content=LocalContentStorage(content_dir, content_base_url),
        metadata=InMemoryMetadataStorage(),
        cache=cache or InMemoryCacheStorage(),
    )
