"""Composition root: logging setup and client profile registration."""

import structlog

from scrapekit.fetch.client import HttpClient
from scrapekit.fetch.profiles import ClientProfile, ProfileRegistry
from scrapekit.observability.logging import configure_logging_from_settings
from scrapekit.scraping.scraper import Scraper
from scrapekit.settings.app import AppSettings, get_settings


logger = structlog.get_logger()


def register_default_profiles() -> list[ClientProfile]:
    """Register the baselines of the built-in client lineages.

    Returns:
        The registered profiles, parents first.
    """
    registry = ProfileRegistry.get_instance()
    return [registry.register(HttpClient.lineage), registry.register(Scraper.lineage)]


def bootstrap(settings: AppSettings | None = None) -> AppSettings:
    """Configure logging and register client profiles.

    Call once at startup, before defining custom defaults.

    Args:
        settings: Settings to use (defaults to the environment).

    Returns:
        The settings in effect.
    """
    settings = settings or get_settings()
    configure_logging_from_settings(settings)
    profiles = register_default_profiles()
    logger.info(
        "bootstrap_complete",
        profiles=[profile.name for profile in profiles],
        cache_enabled=settings.enable_cache,
        cache_dir=str(settings.cache_dir),
    )
    return settings
