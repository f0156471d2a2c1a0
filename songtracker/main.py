"""
FastAPI application entrypoint for the song tracker backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from songtracker.api.errors import register_exception_handlers
from songtracker.api.routes import router as api_router
from songtracker.core.config import get_settings
from songtracker.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    missing = settings.spotify.missing_fields()
    if missing:
        # Requests that need these fail with a ConfigurationError until they are set.
        logger.error("Spotify configuration incomplete; missing %s", ", ".join(missing))

    app = FastAPI(
        title="Song Tracker",
        version="0.1.0",
        description="Spotify listening history, recommendations and stats behind a server-side session.",
    )
    register_exception_handlers(app, settings)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
