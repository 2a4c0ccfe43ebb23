"""Input validation for quotes.

All checks run before any computation and every offending field is reported
in a single :class:`InvalidQuoteInput`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict

from . import config
from .data_models import (
    FIRST_PAYMENT_RULES,
    INSURANCE_FINANCE_MODES,
    PAYMENT_MODES,
    QuoteInputs,
    Settings,
)
from .dates import DAY_COUNT_ALIASES
from .exceptions import InvalidQuoteInput

ZERO = Decimal("0")


def _check_inputs(inputs: QuoteInputs, errors: Dict[str, str], strict_terms: bool) -> None:
    if inputs.vehicle_price <= ZERO:
        errors["vehicle_value"] = "must be greater than zero"
    if inputs.down_payment < ZERO:
        errors["down_payment_amount"] = "must not be negative"
    elif inputs.down_payment >= inputs.vehicle_price and inputs.vehicle_price > ZERO:
        errors["down_payment_amount"] = "must be less than the vehicle value"
    if inputs.term_months <= 0:
        errors["term_months"] = "must be a positive number of months"
    elif strict_terms and inputs.term_months not in config.SUPPORTED_TERMS:
        errors["term_months"] = f"must be one of {list(config.SUPPORTED_TERMS)}"
    if inputs.insurance.mode not in PAYMENT_MODES:
        errors["insurance.mode"] = f"must be one of {list(PAYMENT_MODES)}"
    if inputs.insurance.amount < ZERO:
        errors["insurance.amount"] = "must not be negative"
    if inputs.commission.mode not in PAYMENT_MODES:
        errors["commission.mode"] = f"must be one of {list(PAYMENT_MODES)}"


def _check_settings(settings: Settings, errors: Dict[str, str]) -> None:
    if not ZERO <= settings.iva_rate <= Decimal("1"):
        errors["settings.iva"] = "must be between 0 and 1"
    if settings.opening_fee_rate < ZERO:
        errors["settings.opening_fee_rate"] = "must not be negative"
    if settings.gps_initial_fee < ZERO:
        errors["settings.gps_initial"] = "must not be negative"
    if settings.gps_monthly_fee < ZERO:
        errors["settings.gps_monthly"] = "must not be negative"
    if settings.life_insurance_monthly < ZERO:
        errors["settings.life_insurance_monthly"] = "must not be negative"
    if settings.insurance_financing_factor < ZERO:
        errors["settings.insurance_financing_factor"] = "must not be negative"
    if settings.insurance_coverage_months is not None and settings.insurance_coverage_months <= 0:
        errors["settings.insurance_coverage_months"] = "must be a positive number of months"
    if settings.affordability_ratio <= ZERO:
        errors["settings.affordability_ratio"] = "must be greater than zero"
    if settings.min_grace_days < 0:
        errors["settings.min_grace_days"] = "must not be negative"
    if settings.first_payment_rule not in FIRST_PAYMENT_RULES:
        errors["settings.first_payment_rule"] = f"must be one of {list(FIRST_PAYMENT_RULES)}"
    if settings.day_count not in DAY_COUNT_ALIASES:
        errors["settings.day_count"] = f"must be one of {sorted(DAY_COUNT_ALIASES)}"
    if settings.finance_insurance_mode not in INSURANCE_FINANCE_MODES:
        errors["settings.finance_insurance_mode"] = (
            f"must be one of {list(INSURANCE_FINANCE_MODES)}"
        )


def validate_quote(inputs: QuoteInputs, settings: Settings, strict_terms: bool = False) -> None:
    """Reject invalid inputs or settings.

    A zero or negative ``annual_nominal_rate`` is accepted: the schedule
    generator falls back to straight-line amortization for it.

    Raises
    ------
    InvalidQuoteInput
        Listing every offending field.
    """
    errors: Dict[str, str] = {}
    _check_inputs(inputs, errors, strict_terms)
    _check_settings(settings, errors)
    if errors:
        raise InvalidQuoteInput(errors)
