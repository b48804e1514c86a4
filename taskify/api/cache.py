"""
Read-through response cache for GET endpoints.

Keys are derived from the caller, the path and the query string. Mutating
endpoints invalidate a glob over the affected resource family once they
have succeeded. A broken cache backend only ever costs a miss.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from taskify.auth.context import Identity
from taskify.storage.base import CacheStorage

logger = logging.getLogger(__name__)

PROJECTS_PATTERN = "api:*projects*"


class ResponseCache:
    """
    Usage:
        value, hit = await cache.fetch(key, compute)
        await cache.invalidate(PROJECTS_PATTERN)
    """

    def __init__(self, storage: CacheStorage, ttl: int = 300, prefix: str = "api"):
        self.storage = storage
        self.ttl = ttl
        self.prefix = prefix

    def build_key(self, user_id: str, path: str, query: dict[str, Any] | None = None) -> str:
        query_part = json.dumps(dict(sorted((query or {}).items())), separators=(",", ":"))
        return f"{self.prefix}:{user_id}:{path}:{query_part}"

    async def fetch(self, key: str, compute: Callable[[], Awaitable[Any]]) -> tuple[Any, bool]:
        """Return (value, hit). On a miss, compute and store the value."""
        try:
            cached = await self.storage.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            cached = None

        if cached is not None:
            return cached, True

        value = await compute()
        try:
            await self.storage.set(key, value, self.ttl)
        except Exception as e:
            logger.warning(f"Failed to cache response {key}: {e}")
        return value, False

    async def invalidate(self, pattern: str) -> int:
        try:
            return await self.storage.invalidate(pattern)
        except Exception as e:
            logger.warning(f"Failed to invalidate cache pattern {pattern}: {e}")
            return 0


# =============================================================================
# Route helpers
# =============================================================================


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


async def cached_json(
    request: Request,
    identity: Identity,
    compute: Callable[[], Awaitable[Any]],
) -> JSONResponse:
    """Serve a JSON body from cache, or compute it, tagging X-Cache."""
    cache = get_response_cache(request)
    key = cache.build_key(identity.id, request.url.path, dict(request.query_params))

    async def compute_json() -> Any:
        return jsonable_encoder(await compute(), by_alias=True)

    body, hit = await cache.fetch(key, compute_json)
    return JSONResponse(body, headers={"X-Cache": "HIT" if hit else "MISS"})


async def invalidate_projects(request: Request) -> None:
    await get_response_cache(request).invalidate(PROJECTS_PATTERN)
