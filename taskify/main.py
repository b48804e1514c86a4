"""
Taskify API - server entry point.

Run with:
    python -m taskify.main
or:
    uvicorn --factory taskify.main:create_app
"""

from __future__ import annotations

import uvicorn

from taskify.api.app import create_app
from taskify.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
