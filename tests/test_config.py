"""Tests for the config module."""

from pathlib import Path

from freightsmith.config import Settings, _parse_cors_origins


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        """Test parsing CORS origins from environment variable."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        result = _parse_cors_origins()
        assert result == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        """Test default CORS origins when not set."""
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        assert _parse_cors_origins() == ["*"]

    def test_parse_cors_origins_empty_string(self, monkeypatch):
        """Test parsing empty CORS origins defaults to wildcard."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "")
        assert _parse_cors_origins() == ["*"]


class TestSettings:
    """Test Settings configuration."""

    def test_resolution_threshold_defaults(self):
        """Test the resolution and learning thresholds."""
        settings = Settings()

        assert settings.known_format_min_confidence == 0.8
        assert settings.dictionary_confidence_threshold == 0.9
        assert settings.pending_confidence_threshold == 0.7

    def test_risk_rate_defaults(self):
        """Test demurrage and detention defaults."""
        settings = Settings()

        assert settings.demurrage_daily_rate == 150
        assert settings.detention_daily_rate == 175
        assert settings.detention_free_days == 10
        assert settings.detention_alert_days == 14

    def test_settings_explicit_values(self, tmp_path):
        """Test Settings with explicitly provided values."""
        db_path = tmp_path / "custom.db"
        settings = Settings(
            database_path=db_path,
            llm_provider="openrouter",
            openrouter_api_key="test-openrouter-key",
            fallback_enabled=False,
            fallback_timeout_seconds=2.5,
            port=9000,
        )

        assert settings.database_path == db_path
        assert settings.llm_provider == "openrouter"
        assert settings.openrouter_api_key == "test-openrouter-key"
        assert settings.fallback_enabled is False
        assert settings.fallback_timeout_seconds == 2.5
        assert settings.port == 9000

    def test_database_path_is_path(self):
        """Test that the database path is a Path object."""
        assert isinstance(Settings().database_path, Path)
