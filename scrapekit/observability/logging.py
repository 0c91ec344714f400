"""Structured logging configuration."""

import logging
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Final, TextIO

import httpx
import structlog
from structlog.types import EventDict, WrappedLogger

from scrapekit.fetch.redact import redact_headers, redact_url_credentials


if TYPE_CHECKING:
    from scrapekit.settings.app import AppSettings


# Accepted level names; anything else falls back to INFO
LOG_LEVELS: Final[dict[str, int]] = {
    "silly": 5,
    "trace": 5,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def resolve_log_level(name: str | None) -> int:
    """Map a level name to a logging level.

    Args:
        name: Level name in any case (e.g. 'debug', 'WARN', 'fatal').

    Returns:
        The numeric level, INFO for unknown or missing names.
    """
    if not name:
        return logging.INFO
    return LOG_LEVELS.get(name.strip().lower(), logging.INFO)


def redact_event(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask ``headers`` and ``url`` entries of an event before rendering."""
    headers = event_dict.get("headers")
    if isinstance(headers, Mapping):
        event_dict["headers"] = redact_headers(headers)

    url = event_dict.get("url")
    if isinstance(url, str | httpx.URL):
        event_dict["url"] = redact_url_credentials(url)

    return event_dict


def configure_logging(
    level: int | str = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for clients and scrapers.

    Events carry a log level and an ISO timestamp, and pass through
    ``redact_event`` so that headers and URLs are masked even when they are
    logged directly by interceptors.

    Args:
        level: Logging level, numeric or by name (default: INFO).
        output: Output stream (default: stderr).
        json_format: Render JSON lines, or colored console output when False.
    """
    if isinstance(level, str):
        level = resolve_log_level(level)

    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_event,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # httpx logs through the standard library
    logging.basicConfig(format="%(message)s", stream=output, level=level)


def configure_logging_from_settings(
    settings: "AppSettings", output: TextIO = sys.stderr
) -> None:
    """Configure logging from environment settings.

    Args:
        settings: Application settings (LOG_LEVEL, LOG_FORMAT).
        output: Output stream (default: stderr).
    """
    configure_logging(
        level=settings.log_level,
        output=output,
        json_format=settings.log_format == "json",
    )


def bind_scrape_context(**context: str) -> None:
    """Bind context (e.g. a crawl id) to all subsequent log events."""
    structlog.contextvars.bind_contextvars(**context)


def clear_scrape_context() -> None:
    """Clear context bound with ``bind_scrape_context``."""
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a bound logger instance.

    Args:
        name: Optional logger name, bound as ``logger``.

    Returns:
        Bound logger instance.
    """
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger()
    if name is not None:
        logger = logger.bind(logger=name)
    return logger
