"""Settings loading and the configuration gate."""

from decimal import Decimal

import pytest

from laybuy_gateway.config import (
    SANDBOX_SERVICE_URL,
    SERVICE_URL,
    LaybuySettings,
)


class TestFromEnv:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LAYBUY_MERCHANT_ID", "100000")
        monkeypatch.setenv("LAYBUY_AUTHENTICATION_KEY", "secret-key")
        monkeypatch.setenv("LAYBUY_USE_SANDBOX", "true")
        monkeypatch.setenv("LAYBUY_BREAKDOWN_PRODUCT_BOX", "0")
        monkeypatch.setenv("LAYBUY_REQUEST_TIMEOUT", "25")
        monkeypatch.setenv("PRIMARY_STORE_CURRENCY", "NZD")
        monkeypatch.setenv("CURRENCY_RATES", "aud=0.92, GBP=0.48,bogus")
        monkeypatch.setenv("DATA_DIR", "/tmp/laybuy")

        settings = LaybuySettings.from_env()

        assert settings.merchant_id == "100000"
        assert settings.authentication_key == "secret-key"
        assert settings.use_sandbox is True
        assert settings.display_price_breakdown_on_product_page is True
        assert settings.display_price_breakdown_in_product_box is False
        assert settings.timeout_seconds == 25.0
        assert settings.primary_store_currency == "NZD"
        assert settings.exchange_rates == {"AUD": Decimal("0.92"), "GBP": Decimal("0.48")}
        assert settings.data_dir == "/tmp/laybuy"

    def test_defaults(self, monkeypatch):
        for name in ("LAYBUY_MERCHANT_ID", "LAYBUY_AUTHENTICATION_KEY", "LAYBUY_USE_SANDBOX",
                     "LAYBUY_REQUEST_TIMEOUT", "PRIMARY_STORE_CURRENCY", "CURRENCY_RATES"):
            monkeypatch.delenv(name, raising=False)

        settings = LaybuySettings.from_env()

        assert settings.use_sandbox is False
        assert settings.timeout_seconds == 10.0
        assert settings.primary_store_currency == "AUD"
        assert settings.exchange_rates == {}
        assert settings.service_url == SERVICE_URL


class TestConfigured:

    @pytest.mark.parametrize("merchant_id,key,sandbox,expected", [
        ("100000", "secret-key", False, True),
        ("100000", None, False, False),
        (None, "secret-key", False, False),
        ("", "", False, False),
        (None, None, True, True),
    ])
    def test_is_configured(self, merchant_id, key, sandbox, expected):
        settings = LaybuySettings(merchant_id=merchant_id, authentication_key=key, use_sandbox=sandbox)
        assert settings.is_configured is expected

    def test_validation_errors(self):
        assert LaybuySettings().validation_errors() == [
            "Merchant ID is required",
            "Authentication key is required",
        ]
        assert LaybuySettings(use_sandbox=True).validation_errors() == []

    def test_sandbox_service_url(self):
        assert LaybuySettings(use_sandbox=True).service_url == SANDBOX_SERVICE_URL
