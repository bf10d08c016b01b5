"""
Structured logging configuration.
Designed for easy debugging of live sessions without dumping whole routes.
"""
import logging
import sys
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor

from fittrack.core.config import settings


def setup_logging() -> None:
    """Configure structured logging for the application."""

    # Common processors
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        # JSON format for production
        renderer = structlog.processors.JSONRenderer()
    else:
        # Console format for development
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure root logger
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


@contextmanager
def session_context(session_id: str, activity_type: str) -> Generator[None, None, None]:
    """Bind session identity to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(
        session_id=session_id,
        activity_type=activity_type,
    ):
        yield


def log_session_transition(
    logger: structlog.stdlib.BoundLogger,
    transition: str,
    session_id: str | None,
    activity_type: str,
    duration: int,
    **extra: Any
) -> None:
    """
    Log a lifecycle transition (start, pause, resume, stop, restore).
    NEVER logs GPS coordinates.
    """
    logger.info(
        "Session transition",
        transition=transition,
        session_id=session_id,
        activity_type=activity_type,
        duration=duration,
        **extra
    )


def log_remote_save_error(
    logger: structlog.stdlib.BoundLogger,
    activity_type: str,
    error_type: str,
    error_message: str,
    **extra: Any
) -> None:
    """
    Log a failed remote save.
    Logs error details but NEVER the auth token or the workout payload.
    """
    logger.warning(
        "Remote workout save failed",
        activity_type=activity_type,
        error_type=error_type,
        error_message=error_message,
        **extra
    )


def log_sync_result(
    logger: structlog.stdlib.BoundLogger,
    synced: int,
    failed: int,
    remaining: int,
    **extra: Any
) -> None:
    """Log the outcome of one sync queue sweep."""
    logger.info(
        "Sync queue sweep finished",
        synced=synced,
        failed=failed,
        remaining=remaining,
        **extra
    )
