"""Error Handlers — global exception handlers for errors raised outside the pipeline.

Invariants:
    - ApiRuntimeError → its own envelope and status, logged at WARNING below 500
    - Exception (catch-all) → generic_runtime_error body, never leaks internal details

Design Decisions:
    - Two-layer handler: typed (ApiRuntimeError), catch-all (Exception); the pipeline
      already captures everything raised by actions, so these only see adapter faults
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from apiframe.core.errors import ApiRuntimeError
from apiframe.infrastructure.observability import level_for_status

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_api_error_handler(app)
    _register_generic_error_handler(app)


def _register_api_error_handler(app: FastAPI) -> None:

    @app.exception_handler(ApiRuntimeError)
    async def api_error_handler(request: Request, exc: ApiRuntimeError):
        logger.log(
            level_for_status(exc.http_status), f"ApiRuntimeError: {exc.description}",
            extra={
                "error_code": exc.code, "http_status": exc.http_status,
                "path": request.url.path,
            },
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": ApiRuntimeError.code,
                    "description": "An unexpected error occurred",
                    "detail": {},
                },
            },
        )
