"""Tests for the composition root."""

from pathlib import Path

import structlog

from scrapekit.bootstrap import bootstrap, register_default_profiles
from scrapekit.fetch.profiles import ProfileRegistry
from scrapekit.settings.app import AppSettings


class TestBootstrap:
    """Tests for bootstrap and profile registration."""

    def setup_method(self) -> None:
        """Reset the registry before each test."""
        ProfileRegistry.reset()

    def teardown_method(self) -> None:
        """Reset the registry and logging after each test."""
        ProfileRegistry.reset()
        structlog.reset_defaults()

    def test_register_default_profiles(self) -> None:
        """Test that both built-in lineages are registered, parent first."""
        profiles = register_default_profiles()

        assert [profile.name for profile in profiles] == ["http", "scraper"]
        assert ProfileRegistry.get_instance().list_profiles() == ["http", "scraper"]

    def test_bootstrap_uses_given_settings(self, tmp_path: Path) -> None:
        """Test that bootstrap returns the settings it was given."""
        settings = AppSettings(
            _env_file=None, CACHE_DIR=str(tmp_path), LOG_LEVEL="warning"
        )

        result = bootstrap(settings)

        assert result is settings
        assert ProfileRegistry.get_instance().count() == 2
