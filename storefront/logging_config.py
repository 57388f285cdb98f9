"""Logging configuration for Storefront.

Application modules use plain stdlib loggers::

    from storefront.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Order created", extra={"order_id": str(order.id)})

Records are rendered through structlog's ``ProcessorFormatter`` so that
``extra`` fields and per-request context (correlation ID, user ID) end up
as structured key/value pairs, either as JSON lines or as colored console
output for local development.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Configure root logging for the process.

    Safe to call more than once; later calls replace the handlers.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render records as JSON lines instead of console output
        log_file: Optional file to write records to in addition to stderr
    """
    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper())

    # Uvicorn installs its own handlers; route them through ours instead
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Get a module logger.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        Standard library logger
    """
    return logging.getLogger(name)


def set_context(**kwargs: Any) -> None:
    """Bind fields to every log record emitted by the current request/task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Remove all fields bound with set_context()."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def LogContext(**kwargs: Any) -> Iterator[None]:
    """Temporarily bind log context fields.

    Example:
        with LogContext(command="seed"):
            logger.info("Seeding catalog")
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
