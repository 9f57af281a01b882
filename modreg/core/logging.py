"""Logging configuration module."""

from __future__ import annotations

import logging
from typing import Optional, cast

import structlog
from structlog import dev, processors, stdlib
from structlog.stdlib import BoundLogger

LOG_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structured logging for the registry.

    Args:
        level: Log level name, e.g. ``"INFO"``.
        json_logs: Render JSON lines instead of the console format.
    """
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    shared_processors = [
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = stdlib.ProcessorFormatter(
        processors=[
            stdlib.ProcessorFormatter.remove_processors_meta,
            processors.format_exc_info,
            processors.JSONRenderer() if json_logs else dev.ConsoleRenderer(),
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    app_logger = logging.getLogger("modreg")
    # Clear existing handlers to prevent duplicates
    app_logger.handlers = [handler]
    app_logger.setLevel(log_level)
    app_logger.propagate = False


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Return a structured logger, namespaced under ``modreg``."""
    logger_name = "modreg" if not name else f"modreg.{name}"
    return cast(BoundLogger, structlog.get_logger(logger_name))
