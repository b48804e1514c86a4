"""
Exception handlers: map error kinds to HTTP responses.

Body shape: {"error": str, "details"?: any, "stack"?: [str]}.
Stack traces are only included outside production.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskify.config import Settings
from taskify.core.errors import TaskifyError
from taskify.integrations.sentry import capture_exception

logger = logging.getLogger(__name__)


def _body(message: str, details=None, error: Exception | None = None, settings: Settings | None = None) -> dict:
    body: dict = {"error": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    if error is not None and settings is not None and not settings.is_production:
        body["stack"] = traceback.format_exception(type(error), error, error.__traceback__)
    return body


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(TaskifyError)
    async def handle_domain_error(request: Request, exc: TaskifyError) -> JSONResponse:
        status = exc.status_code
        if status >= 500:
            logger.error(f"Server Error: {exc.message}", exc_info=exc)
        else:
            logger.warning(f"Client Error ({exc.kind.value}): {exc.message}")
        return JSONResponse(
            status_code=status,
            content=_body(exc.message, exc.details, exc if status >= 500 else None, settings),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"Client Error (validation): {request.method} {request.url.path}")
        return JSONResponse(status_code=400, content=_body("Validation failed", exc.errors()))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Server Error: {exc}", exc_info=exc)
        capture_exception(exc, path=request.url.path, method=request.method)
        return JSONResponse(
            status_code=500,
            content=_body("Internal server error", error=exc, settings=settings),
        )
