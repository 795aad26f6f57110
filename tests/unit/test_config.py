"""
Unit tests for application settings.

Tests cover:
- Environment variable loading with the PLANNORA_ prefix
- Field validators and their normalization
- Computed properties
- Settings cache reset
"""

import pytest
from pydantic import ValidationError

from plannora.config import Settings, clear_settings_cache, get_settings


@pytest.fixture
def fresh_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestSettingsValidation:
    """Test Settings validators"""

    def test_normalizes_case(self):
        settings = Settings(log_level="debug", environment="Staging", log_format="JSON")

        assert settings.log_level == "DEBUG"
        assert settings.environment == "staging"
        assert settings.log_format == "json"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("log_level", "VERBOSE"),
            ("environment", "qa"),
            ("jwt_algorithm", "RS256"),
            ("log_format", "xml"),
            ("cookie_samesite", "sometimes"),
            ("jwt_secret_key", "too-short"),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})

    def test_empty_cors_origins_allow_all(self):
        assert Settings(cors_origins=[]).cors_origins == ["*"]


class TestComputedProperties:
    """Test derived settings"""

    def test_fallback_admin_needs_password(self):
        assert Settings(fallback_admin_password=None).fallback_admin_enabled is False
        assert Settings(fallback_admin_password="pw").fallback_admin_enabled is True

    def test_cookie_lifetime_follows_token_lifetime(self):
        assert Settings(jwt_expire_days=2).jwt_expire_seconds == 2 * 24 * 60 * 60

    def test_rate_limit_expression(self):
        settings = Settings(rate_limit_requests=5, rate_limit_window=60)
        assert settings.rate_limit == "5/60 seconds"

    def test_environment_flags(self):
        assert Settings(environment="production").is_production is True
        assert Settings(environment="development").is_development is True


class TestSettingsCache:
    """Test get_settings caching"""

    def test_cached_until_cleared(self, fresh_settings, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("PLANNORA_MONGODB_DATABASE", "plannora_other")

        assert get_settings() is first

        clear_settings_cache()
        reloaded = get_settings()

        assert reloaded is not first
        assert reloaded.mongodb_database == "plannora_other"
        assert reloaded.environment == "test"
