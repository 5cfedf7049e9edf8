"""
Test configuration validation for VacayPay settings.
"""

import pytest
from pydantic import ValidationError

from vacaypay.core.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    """Test settings defaults and validation."""

    def test_defaults(self, monkeypatch):
        for name in ("API_KEY", "ACCOUNT_UUID", "PAYMENT_STRATEGY_UUID", "PUBLISHABLE_KEY", "PAYMENT_METHOD_MODE"):
            monkeypatch.delenv(f"VACAYPAY_{name}", raising=False)

        settings = Settings(_env_file=None)

        assert settings.live_url == "https://www.procuro.io/api/v1/"
        assert settings.tokenize_url == "https://api.stripe.com/v1/"
        assert settings.payment_method_mode == "tokenize"
        assert settings.default_currency == "USD"
        assert settings.test_mode is False

    def test_invalid_payment_method_mode(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(payment_method_mode="carrier-pigeon")

        assert "payment_method_mode must be one of" in str(exc_info.value)

    def test_mode_is_case_insensitive(self):
        assert Settings(payment_method_mode="INLINE").payment_method_mode == "inline"

    def test_api_key_requires_account_reference(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(api_key="key", account_uuid=None, payment_strategy_uuid=None)

        assert "account_uuid or payment_strategy_uuid" in str(exc_info.value)

    def test_urls_get_trailing_slash(self):
        settings = Settings(live_url="https://sandbox.procuro.io/api/v1", tokenize_url="http://localhost:12111/v1")
        assert settings.live_url == "https://sandbox.procuro.io/api/v1/"
        assert settings.tokenize_url == "http://localhost:12111/v1/"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(timeout_seconds=0)


class TestSettingsCache:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("VACAYPAY_API_KEY", "env-key")
        monkeypatch.setenv("VACAYPAY_PAYMENT_STRATEGY_UUID", "env-strategy")
        monkeypatch.setenv("VACAYPAY_TEST_MODE", "true")

        settings = get_settings()

        assert settings.api_key == "env-key"
        assert settings.payment_strategy_uuid == "env-strategy"
        assert settings.test_mode is True

    def test_cached_until_cleared(self, monkeypatch):
        monkeypatch.setenv("VACAYPAY_DEFAULT_CURRENCY", "EUR")
        first = get_settings()
        monkeypatch.setenv("VACAYPAY_DEFAULT_CURRENCY", "GBP")

        assert get_settings() is first
        assert get_settings().default_currency == "EUR"

        clear_settings_cache()
        assert get_settings().default_currency == "GBP"
