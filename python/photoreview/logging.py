"""Structured logging for photoreview.

Every entry is one JSON object (or a console line with json_format=False)
carrying the request context bound by the HTTP middleware:

- request_id: bound by RequestIDMiddleware for the life of the request
- path, method: raw path (no query string) and HTTP verb
- user_id: bound once AuthMiddleware has verified the bearer token

Context lives in structlog's contextvars store, so anything logged while a
request is in flight, including stdlib loggers such as uvicorn and
sqlalchemy, picks it up.

    logger = get_logger(__name__)
    logger.info("review_upserted", photo_id=str(photo_id))
"""

import logging
import sys

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    get_contextvars,
    merge_contextvars,
)

# Stdlib loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


def _shared_processors() -> list:
    return [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Install structlog and route the stdlib root logger through it.

    Args:
        json_format: JSON lines when True, human-readable console output otherwise.
        level: Root log level.
    """
    shared = _shared_processors()
    renderer = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(request_id: str, path: str, method: str) -> None:
    """Start a fresh logging context for an incoming request."""
    clear_contextvars()
    bind_contextvars(request_id=request_id, path=path, method=method)


def bind_user(user_id: str) -> None:
    """Attach the authenticated user to the current logging context."""
    bind_contextvars(user_id=user_id)


def clear_request_context() -> None:
    clear_contextvars()


def get_request_id() -> str | None:
    """Current request's correlation id, if a request is in flight."""
    return get_contextvars().get("request_id")
