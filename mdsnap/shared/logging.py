"""
Logging setup with request context.

All loggers live under the ``mdsnap`` hierarchy so a single handler
installed by ``setup_logging`` covers the whole application.
"""

import logging
import sys
from contextvars import ContextVar

from .types import RequestContext

ROOT_LOGGER = "mdsnap"

_request_context: ContextVar[RequestContext | None] = ContextVar(
    "mdsnap_request_context", default=None
)


class RequestContextFilter(logging.Filter):
    """Inject the current request id into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _request_context.get()
        record.request_id = ctx.request_id if ctx else "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure the ``mdsnap`` logger with a single stream handler."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())

    # Idempotent: uvicorn reload and tests may call this repeatedly
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s"
        )
    )
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger, re-rooting module names under ``mdsnap``."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_request_context(ctx: RequestContext) -> None:
    _request_context.set(ctx)


def get_request_context() -> RequestContext | None:
    return _request_context.get()


def clear_request_context() -> None:
    _request_context.set(None)
