"""
Tests for settings loading and validation.
"""

from pydantic import ValidationError
import pytest

from common.config import (
    AnalyticsServiceSettings,
    AuthServiceSettings,
    BaseServiceSettings,
    GatewaySettings,
    MetaServiceSettings,
    SpotifyServiceSettings,
    get_settings,
)


class TestGetSettings:
    """Tests for service name matching."""

    @pytest.mark.parametrize(
        ("service_name", "settings_class"),
        [
            ("api-gateway", GatewaySettings),
            ("auth-service", AuthServiceSettings),
            ("meta", MetaServiceSettings),
            ("Spotify-Service", SpotifyServiceSettings),
            ("analytics-service", AnalyticsServiceSettings),
            (None, BaseServiceSettings),
            ("unknown", BaseServiceSettings),
        ],
    )
    def test_fuzzy_matching(self, service_name, settings_class):
        """Test that service names select their settings class."""
        assert type(get_settings(service_name)) is settings_class


class TestGatewaySettings:
    """Tests for gateway defaults and validation."""

    def test_default_upstreams(self, monkeypatch):
        """Test the default upstream URLs and global limit."""
        for name in ("AUTH_SERVICE_URL", "META_SERVICE_URL", "SPOTIFY_SERVICE_URL", "ANALYTICS_SERVICE_URL"):
            monkeypatch.delenv(name, raising=False)

        settings = GatewaySettings()

        assert settings.AUTH_SERVICE_URL == "http://localhost:3001"
        assert settings.META_SERVICE_URL == "http://localhost:3002"
        assert settings.SPOTIFY_SERVICE_URL == "http://localhost:3003"
        assert settings.ANALYTICS_SERVICE_URL == "http://localhost:3004"
        assert settings.GLOBAL_RATE_LIMIT == "100/15 minutes"

    def test_invalid_rate_limit_string(self):
        """Test that an unparsable limit is rejected."""
        with pytest.raises(ValidationError):
            GatewaySettings(GLOBAL_RATE_LIMIT="lots")

    def test_cors_origins_from_string(self, monkeypatch):
        """Test that comma separated origins are split and trimmed."""
        monkeypatch.setenv("CORS_ORIGINS", "https://app.example.com, https://admin.example.com,")

        settings = GatewaySettings()

        assert settings.CORS_ORIGINS == ["https://app.example.com", "https://admin.example.com"]


class TestBaseSettings:
    """Tests for shared validators."""

    def test_negative_pool_size_rejected(self):
        """Test that pool sizes must be positive."""
        with pytest.raises(ValidationError):
            BaseServiceSettings(DATABASE_POOL_SIZE=-1)

    def test_unknown_strategy_rejected(self):
        """Test that only known window strategies are accepted."""
        with pytest.raises(ValidationError):
            BaseServiceSettings(RATE_LIMIT_STRATEGY="sliding-log")
