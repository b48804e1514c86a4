"""
Storage abstractions.

Integration Points:
- ContentStorage -> object storage (uploaded attachments)
- MetadataStorage -> database (users, projects, files)
- CacheStorage -> Redis (response cache)
"""

from taskify.storage.base import (
    ContentStorage,
    MetadataStorage,
    CacheStorage,
    StorageProvider,
    Collections,
)
from taskify.storage.local import (
    LocalContentStorage,
    InMemoryMetadataStorage,
    InMemoryCacheStorage,
    create_local_storage,
)
from taskify.storage.redis_cache import RedisCacheStorage
from taskify.storage.repositories import UserStore, ProjectStore, FileStore

__all__ = [
    "ContentStorage",
    "MetadataStorage",
    "CacheStorage",
    "StorageProvider",
    "Collections",
    "LocalContentStorage",
    "InMemoryMetadataStorage",
    "InMemoryCacheStorage",
    "RedisCacheStorage",
    "create_local_storage",
    "UserStore",
    "ProjectStore",
    "FileStore",
]
