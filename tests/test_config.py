from decimal import Decimal

import pytest

from credit_quote import config
from credit_quote.data_models import Settings
from credit_quote.exceptions import InvalidQuoteInput


def test_resolve_tier_rate():
    assert config.resolve_tier_rate("A") == Decimal("0.36")
    assert config.resolve_tier_rate(" c ") == Decimal("0.45")


def test_resolve_unknown_tier():
    with pytest.raises(InvalidQuoteInput) as excinfo:
        config.resolve_tier_rate("D")
    assert "rate_tier" in excinfo.value.errors


def test_settings_defaults():
    settings = config.settings_from_env({})
    assert settings.annual_nominal_rate == Decimal("0.45")
    assert settings.iva_rate == Decimal("0.16")
    assert settings.gps_monthly_fee == Decimal("400")
    assert settings.day_count == "A360"


def test_settings_overrides():
    settings = config.settings_from_env(
        {
            "CREDIT_QUOTE_IVA": "0.08",
            "CREDIT_QUOTE_GPS_MONTHLY": "350",
            "CREDIT_QUOTE_DAY_COUNT": "A365",
            "CREDIT_QUOTE_TIER_C": "0.42",
        }
    )
    assert settings.iva_rate == Decimal("0.08")
    assert settings.gps_monthly_fee == Decimal("350")
    assert settings.day_count == "A365"
    assert settings.annual_nominal_rate == Decimal("0.42")


def test_explicit_rate_wins():
    settings = config.settings_from_env({"CREDIT_QUOTE_TIER_C": "0.42"}, annual_nominal_rate=Decimal("0.3"))
    assert settings.annual_nominal_rate == Decimal("0.3")


def test_tier_rates_from_env():
    rates = config.tier_rates_from_env({"CREDIT_QUOTE_TIER_A": "0.30", "CREDIT_QUOTE_TIER_B": " "})
    assert rates == {"A": Decimal("0.30"), "B": Decimal("0.40"), "C": Decimal("0.45")}


def test_malformed_env_value():
    with pytest.raises(ValueError):
        config.settings_from_env({"CREDIT_QUOTE_IVA": "sixteen"})


def test_settings_from_env_returns_settings():
    assert isinstance(config.settings_from_env({}), Settings)
