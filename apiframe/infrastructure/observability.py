"""Structured Logging — JSON formatter and setup for request-pipeline observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (endpoint, pipeline_state, error_code, ...) surfaced when present
    - JSON format in production, human-readable in development
    - Pipeline records carry their endpoint through PipelineLogAdapter, not per call

Design Decisions:
    - JSONFormatter on the standard logging module: no extra dependency
    - setup_logging called once on startup via the FastAPI lifespan
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "api", "controller", "endpoint", "pipeline_state", "error_code", "http_status",
    "path", "method",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


def level_for_status(http_status: int) -> int:
    """WARNING for client errors, ERROR for server faults."""
    return logging.WARNING if http_status < 500 else logging.ERROR


class PipelineLogAdapter(logging.LoggerAdapter):
    """Stamps every record with the ids of the request's definitions.

    Per-call extras are merged over the adapter's own, so a call can add
    pipeline_state or error_code without losing the endpoint.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs
