"""Tests for environment-driven settings."""

import pytest
from commerce.settings import GATEWAY_HTTP, GATEWAY_SIMULATED, Settings


class TestSettingsFromEnv:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.payment_gateway == GATEWAY_SIMULATED
        assert settings.payment_delay_seconds == 3.0
        assert settings.payment_success_rate == 0.9
        assert settings.pending_payment_ttl_minutes == 15
        assert settings.is_production is False

    def test_overrides(self):
        settings = Settings.from_env(
            {
                "PROTEAN_ENV": "Production",
                "PAYMENT_GATEWAY": "HTTP",
                "PAYMENT_SERVICE_URL": "http://payments.internal:9000/",
                "PAYMENT_DELAY_SECONDS": "0.5",
                "PAYMENT_SUCCESS_RATE": "0.75",
                "PAYMENT_PENDING_TTL_MINUTES": "30",
            }
        )
        assert settings.is_production
        assert settings.payment_gateway == GATEWAY_HTTP
        assert settings.payment_service_url == "http://payments.internal:9000"
        assert settings.payment_delay_seconds == 0.5
        assert settings.payment_success_rate == 0.75
        assert settings.pending_payment_ttl_minutes == 30

    @pytest.mark.parametrize(
        "environ",
        [
            {"PAYMENT_GATEWAY": "carrier-pigeon"},
            {"PAYMENT_SUCCESS_RATE": "1.5"},
            {"PAYMENT_DELAY_SECONDS": "-1"},
        ],
    )
    def test_invalid_values(self, environ):
        with pytest.raises(ValueError):
            Settings.from_env(environ)
