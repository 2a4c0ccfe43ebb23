from dataclasses import replace
from decimal import Decimal

import pytest

from credit_quote.data_models import CommissionChoice, InsuranceChoice
from credit_quote.exceptions import InvalidQuoteInput
from credit_quote.validation import validate_quote


def _errors(inputs, settings, **kwargs):
    with pytest.raises(InvalidQuoteInput) as excinfo:
        validate_quote(inputs, settings, **kwargs)
    return excinfo.value.errors


def test_valid_quote_passes(scenario_a, settings):
    validate_quote(scenario_a, settings)


def test_zero_rate_is_accepted(scenario_a, settings):
    validate_quote(scenario_a, replace(settings, annual_nominal_rate=Decimal("0")))


@pytest.mark.parametrize(
    "changes, field",
    [
        ({"vehicle_price": Decimal("0")}, "vehicle_value"),
        ({"down_payment": Decimal("-1")}, "down_payment_amount"),
        ({"down_payment": Decimal("405900")}, "down_payment_amount"),
        ({"term_months": -12}, "term_months"),
        ({"insurance": InsuranceChoice(mode="credit", amount=Decimal("0"))}, "insurance.mode"),
        ({"insurance": InsuranceChoice(mode="cash", amount=Decimal("-5"))}, "insurance.amount"),
        ({"commission": CommissionChoice(mode="later")}, "commission.mode"),
    ],
)
def test_invalid_inputs(scenario_a, settings, changes, field):
    assert field in _errors(replace(scenario_a, **changes), settings)


@pytest.mark.parametrize(
    "changes, field",
    [
        ({"iva_rate": Decimal("1.5")}, "settings.iva"),
        ({"gps_monthly_fee": Decimal("-400")}, "settings.gps_monthly"),
        ({"first_payment_rule": "weekly"}, "settings.first_payment_rule"),
        ({"day_count": "A252"}, "settings.day_count"),
        ({"finance_insurance_mode": "leasing"}, "settings.finance_insurance_mode"),
        ({"insurance_coverage_months": 0}, "settings.insurance_coverage_months"),
        ({"affordability_ratio": Decimal("0")}, "settings.affordability_ratio"),
    ],
)
def test_invalid_settings(scenario_a, settings, changes, field):
    assert field in _errors(scenario_a, replace(settings, **changes))


def test_all_errors_reported_together(scenario_a, settings):
    errors = _errors(
        replace(scenario_a, vehicle_price=Decimal("-1"), term_months=0),
        replace(settings, day_count="A252"),
    )
    assert set(errors) == {"vehicle_value", "term_months", "settings.day_count"}


def test_strict_terms(scenario_a, settings):
    errors = _errors(replace(scenario_a, term_months=30), settings, strict_terms=True)
    assert "term_months" in errors
    validate_quote(replace(scenario_a, term_months=36), settings, strict_terms=True)


def test_message_lists_fields(scenario_a, settings):
    with pytest.raises(InvalidQuoteInput, match="vehicle_value"):
        validate_quote(replace(scenario_a, vehicle_price=Decimal("0")), settings)
