"""
Redis-backed response cache.

Values are stored as JSON. Every Redis failure is logged and swallowed:
reads become misses, writes and invalidations become no-ops, so an
unreachable Redis never fails a request.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from taskify.storage.base import CacheStorage

logger = logging.getLogger(__name__)


class RedisCacheStorage(CacheStorage):
    """CacheStorage on top of redis.asyncio."""

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        if client is None and not url:
            raise ValueError("RedisCacheStorage needs a url or a client")
        self._client = client or redis.from_url(url, decode_responses=True)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            payload = json.dumps(value, default=str)
            if ttl:
                await self._client.set(key, payload, ex=ttl)
            else:
                await self._client.set(key, payload)
        except (RedisError, OSError) as e:
            logger.warning(f"Failed to set key {key} in Redis: {e}")

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Failed to get key {key} from Redis: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding undecodable cache entry {key}")
            return None

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self._client.delete(key))
        except (RedisError, OSError) as e:
            logger.warning(f"Failed to delete key {key} from Redis: {e}")
            return False

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(key))
        except (RedisError, OSError) as e:
            logger.warning(f"Failed to check key {key} in Redis: {e}")
            return False

    async def invalidate(self, pattern: str) -> int:
        try:
            keys = [key async for key in self._client.scan_iter(match=pattern)]
            if not keys:
                return 0
            return await self._client.delete(*keys)
        except (RedisError, OSError) as e:
            logger.warning(f"Failed to invalidate pattern {pattern} in Redis: {e}")
            return 0

    async def is_healthy(self) -> bool:
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as e:
            logger.warning(f"Failed to close Redis connection: {e}")
