"""Settings package for environment-driven configuration."""

from scrapekit.settings.app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
