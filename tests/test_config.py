"""Tests for configuration."""

from ride_analytics.config import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings()

        assert settings.power_filter_max_watts == 2000
        assert settings.power_filter_max_delta is None
        assert settings.cp_min_duration_secs == 120
        assert settings.cp_max_duration_secs == 1200
        assert settings.ftp_change_threshold == 0.05

    def test_remote_disabled_without_key(self):
        """Test the remote client needs an API key."""
        assert not Settings(remote_api_key="").remote_enabled
        assert Settings(remote_api_key="abc").remote_enabled

    def test_env_override(self, monkeypatch):
        """Test RIDE_ANALYTICS_ environment variables are read."""
        monkeypatch.setenv("RIDE_ANALYTICS_DEFAULT_FTP", "275")
        monkeypatch.setenv("RIDE_ANALYTICS_POWER_FILTER_MAX_DELTA", "250")

        settings = Settings()

        assert settings.default_ftp == 275
        assert settings.power_filter_max_delta == 250

    def test_get_settings_cached(self):
        """Test get_settings returns a shared instance."""
        get_settings.cache_clear()

        assert get_settings() is get_settings()
