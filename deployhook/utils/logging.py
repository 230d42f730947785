"""Logging configuration using structlog.

Log lines emitted while a webhook delivery is processed carry that
delivery's ``delivery_id`` and ``event_type``, bound with
:func:`delivery_context` and merged in from structlog's context variables.
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog

from deployhook.config import settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def _log_file() -> Path:
    log_dir = Path(settings.log_directory)
    if not log_dir.is_absolute():
        log_dir = Path(__file__).resolve().parents[2] / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / settings.log_file_name


def shared_processors() -> list[Any]:
    """Processors applied to every event before rendering."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging() -> None:
    """Configure structured logging for the application."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(_log_file(), encoding="utf-8"),
        ],
    )
    # The GitHub client logs its own outcomes
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if settings.log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=settings.is_development)

    structlog.configure(
        processors=[*shared_processors(), renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def delivery_context(delivery_id: str | None, event_type: str) -> Iterator[None]:
    """Bind a GitHub delivery to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(
        delivery_id=delivery_id or "unknown",
        event_type=event_type,
    ):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
