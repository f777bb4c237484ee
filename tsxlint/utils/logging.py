"""
Structured logging configuration for tsxlint.
Uses structlog on top of stdlib logging; console output by default, JSON on request.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.types import Processor

from tsxlint.utils.config import get_settings


def configure_logging(
    log_level: str | None = None,
    log_file: str | Path | None = None,
    json_format: bool | None = None,
) -> None:
    """Configure structured logging.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Uses settings if None.
        log_file: Optional path to an additional log file. Uses settings if None.
        json_format: JSON lines (True) or console format (False). Uses settings if None.
    """
    general = get_settings().general

    log_level = log_level or general.log_level
    log_file = log_file or general.log_file
    if json_format is None:
        json_format = general.json_logs

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


class LogContext:
    """Bind context variables for the duration of a block.

    Context variables are task-local under asyncio, so each region task
    carries its own region index. Previous values are restored on exit,
    which keeps nested contexts intact.

    Example:
        with LogContext(region=3):
            logger.info("Formatting region")
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
