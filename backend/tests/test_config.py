"""
Tests for application configuration.
"""

import pytest


class TestSettings:
    """Test the Settings configuration class."""

    def test_settings_defaults(self):
        """Test that settings have sensible defaults."""
        from api.config import Settings

        defaults = Settings(_env_file=None)

        assert defaults.api_host == "0.0.0.0"
        assert defaults.api_port == 8000
        assert defaults.api_debug is False
        assert defaults.scraper_headless is True
        assert defaults.log_level == "INFO"

    def test_scraper_timeouts(self):
        """Test the page acquisition bounds."""
        from api.config import Settings

        defaults = Settings(_env_file=None)

        assert defaults.product_page_timeout_ms == 30000
        assert defaults.product_selector_timeout_ms == 10000
        assert defaults.search_page_timeout_ms == 20000
        assert defaults.search_selector_timeout_ms == 15000
        assert defaults.search_settle_ms == 3000

    def test_log_retention(self):
        """Test how many search log entries are kept."""
        from api.config import Settings

        defaults = Settings(_env_file=None)

        assert defaults.recent_search_limit == 10
        assert defaults.error_log_limit == 20

    def test_env_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        from api.config import Settings

        monkeypatch.setenv("SEARCH_SETTLE_MS", "0")
        monkeypatch.setenv("EMOJI_MODEL", "claude-test")

        overridden = Settings(_env_file=None)

        assert overridden.search_settle_ms == 0
        assert overridden.emoji_model == "claude-test"

    def test_settings_database_url(self):
        """Test that database URL is set."""
        from api.config import settings

        assert settings.database_url is not None
        assert "book_notes.db" in settings.database_url

    def test_settings_cors_origins(self):
        """Test that CORS origins are configured."""
        from api.config import settings

        assert isinstance(settings.cors_origins, list)
        assert len(settings.cors_origins) > 0

    def test_settings_log_paths(self):
        """Test that log paths are valid."""
        from api.config import settings

        assert settings.log_dir is not None
        assert settings.log_file is not None
        assert settings.log_file.name == "backend.log"

    def test_settings_data_dir(self):
        """Test that data directory path is valid."""
        from api.config import settings

        assert settings.data_dir is not None
        assert "data" in str(settings.data_dir)
