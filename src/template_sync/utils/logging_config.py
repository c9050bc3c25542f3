"""Centralized logging configuration for the command line tool."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog


def configure_logging(
    log_level: str = "WARNING",
    json_logs: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Configure structured logging.

    Logs are written to stderr so that status lines on stdout stay readable
    and can be piped. A rotating log file can be added on top.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON logs. If False, use console format.
        log_file: Optional path to a log file.

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> log = structlog.stdlib.get_logger()
        >>> log.info("download_started", group="Default")
    """
    # Unknown level names fall back to WARNING
    numeric_level = getattr(logging, log_level.upper(), logging.WARNING)

    # stdout belongs to status lines; force replaces handlers from earlier calls
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        stream=sys.stderr,
        force=True,
    )

    if log_file:
        # 10MB per file, 5 backups
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        logging.root.addHandler(file_handler)

    processors: list[Any] = [
        # Drop events below the configured level before rendering
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        # UTC ISO timestamps so file logs from different hosts sort together
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Renderer must be the last processor
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                # No ANSI codes when stderr is redirected to a file
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
