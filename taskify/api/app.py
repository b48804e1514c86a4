"""
FastAPI application for the Taskify API.

`create_app()` wires storage, token issuer and services together and
attaches them to `app.state`; route dependencies read them from there.
Tests build their own app with in-memory storage.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from taskify.api import files as file_routes
from taskify.api import projects as project_routes
from taskify.api.cache import ResponseCache
from taskify.api.errors import register_exception_handlers
from taskify.auth import AuthService, TokenIssuer, auth_router
from taskify.config import Settings, configure_logging, get_settings
from taskify.integrations.sentry import init_sentry
from taskify.services import FileService, ProjectService
from taskify.storage import (
    CacheStorage,
    FileStore,
    InMemoryCacheStorage,
    ProjectStore,
    RedisCacheStorage,
    StorageProvider,
    UserStore,
    create_local_storage,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Wiring
# =============================================================================


def build_storage(settings: Settings) -> StorageProvider:
    """Local content + metadata; Redis cache when REDIS_URL is set."""
    cache: CacheStorage
    if settings.redis_url:
        cache = RedisCacheStorage(settings.redis_url)
    else:
        cache = InMemoryCacheStorage()
    return create_local_storage(settings.content_dir, cache=cache, content_base_url=settings.content_base_url)


def create_app(settings: Settings | None = None, storage: StorageProvider | None = None) -> FastAPI:
    settings = settings or get_settings()
    storage = storage or build_storage(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize and cleanup app resources."""
        configure_logging(settings)
        if init_sentry(settings):
            logger.info("Sentry error tracking enabled")

        if not await storage.cache.is_healthy():
            logger.warning("Cache backend unreachable - serving without cache")

        logger.info(f"Taskify API starting in {settings.environment} mode")

        yield

        await storage.cache.close()
        logger.info("Taskify API shutting down")

    app = FastAPI(
        title="Taskify API",
        description="Projects, file attachments and JWT sessions",
        version="0.1.0",
        lifespan=lifespan,
    )

    users = UserStore(storage.metadata)
    projects = ProjectStore(storage.metadata)
    files = FileStore(storage.metadata)
    issuer = TokenIssuer.from_settings(settings)

    app.state.settings = settings
    app.state.storage = storage
    app.state.token_issuer = issuer
    app.state.auth_service = AuthService(users, issuer)
    app.state.project_service = ProjectService(projects, files, storage.content)
    app.state.file_service = FileService(
        projects,
        files,
        storage.content,
        max_files=settings.max_upload_files,
        max_file_size=settings.max_upload_bytes,
    )
    app.state.response_cache = ResponseCache(storage.cache, ttl=settings.cache_ttl_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    app.include_router(auth_router)
    app.include_router(project_routes.router)
    app.include_router(file_routes.router)

    @app.get("/health")
    async def health(request: Request):
        cache_ok = await request.app.state.storage.cache.is_healthy()
        return {"status": "ok", "cache": "up" if cache_ok else "down"}

    return app
