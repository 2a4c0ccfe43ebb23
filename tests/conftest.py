from datetime import date
from decimal import Decimal

import pytest

from credit_quote.data_models import CommissionChoice, InsuranceChoice, QuoteInputs, Settings


@pytest.fixture
def settings():
    """Tier C settings with no GPS installation fee."""
    return Settings(annual_nominal_rate=Decimal("0.45"))


@pytest.fixture
def scenario_a():
    """$405,900 vehicle, 30% down, 48 months, insurance and commission in cash."""
    return QuoteInputs(
        vehicle_price=Decimal("405900"),
        down_payment=Decimal("121770"),
        term_months=48,
        as_of=date(2025, 8, 11),
        insurance=InsuranceChoice(mode="cash", amount=Decimal("19000")),
        commission=CommissionChoice(mode="cash"),
    )


@pytest.fixture
def contract_payload():
    return {
        "vehicle_value": 405900,
        "down_payment_amount": 121770,
        "term_months": 48,
        "insurance": {"mode": "cash", "amount": 19000},
        "commission": {"mode": "cash"},
        "settings": {
            "annual_nominal_rate": 0.45,
            "iva": 0.16,
            "opening_fee_rate": 0.03,
            "gps_initial": 0,
            "gps_monthly": 400,
            "first_payment_rule": "next_quincena",
            "day_count": "A360",
            "finance_insurance_mode": "add_to_principal",
        },
        "as_of": "2025-08-11",
    }
