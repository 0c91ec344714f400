"""Observability module for logging."""

from scrapekit.observability.logging import (
    LOG_LEVELS,
    bind_scrape_context,
    clear_scrape_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    redact_event,
    resolve_log_level,
)


__all__ = [
    "LOG_LEVELS",
    "bind_scrape_context",
    "clear_scrape_context",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "redact_event",
    "resolve_log_level",
]
