"""Application Factory — serves an ApiDefinition as a FastAPI application.

Invariants:
    - Routes come only from the API's route table (plus the schema route)
    - Global error handlers map adapter faults to the standard error envelope
    - Logging configured on startup via the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from apiframe.api.error_handlers import register_error_handlers
from apiframe.api.routes import build_router
from apiframe.config import Settings, get_settings
from apiframe.core.api_definition import ApiDefinition
from apiframe.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(api: ApiDefinition, settings: Settings | None = None) -> FastAPI:
    """FastAPI application exposing ``api``."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        logger.info(f"{api.name or api.id} started", extra={"api": api.id})
        yield
        logger.info(f"{api.name or api.id} shutting down", extra={"api": api.id})

    app = FastAPI(
        title=api.name or api.id, description=api.description or "",
        lifespan=lifespan, openapi_url=None, docs_url=None, redoc_url=None,
    )
    app.include_router(build_router(api, settings))
    register_error_handlers(app)
    return app
