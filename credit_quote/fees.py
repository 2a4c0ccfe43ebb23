"""Ancillary charges billed alongside each loan payment.

Three add-ons ride with the financing payment: the GPS tracking device rent
(plus its tax, and the installation fee in the first period only), the
monthly charge of a financed insurance premium and a flat life insurance
premium.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from . import config
from .data_models import SUBLOAN_12M, AncillaryFees, FinancingStructure, Settings
from .utils import round_currency

ZERO = Decimal("0.00")


def insurance_coverage_months(settings: Settings) -> Optional[int]:
    """Number of periods carrying the insurance charge; ``None`` means all."""
    if settings.insurance_coverage_months is not None:
        return settings.insurance_coverage_months
    if settings.finance_insurance_mode == SUBLOAN_12M:
        return config.INSURANCE_COVERAGE_MONTHS
    return None


def insurance_monthly_charge(
    financed_insurance_amount: Decimal, settings: Settings, term_months: Optional[int] = None
) -> Decimal:
    """Monthly charge of a financed premium.

    The premium is grossed up by ``insurance_financing_factor`` and divided
    over the coverage months (12 unless configured otherwise). A premium kept
    out of the principal is repaid only by this charge, so with a loan shorter
    than the coverage it is divided over ``term_months`` instead.
    """
    if financed_insurance_amount <= 0:
        return ZERO
    months = settings.insurance_coverage_months or config.INSURANCE_COVERAGE_MONTHS
    if settings.finance_insurance_mode == SUBLOAN_12M and term_months is not None:
        months = min(months, term_months)
    return round_currency(
        financed_insurance_amount * settings.insurance_financing_factor / Decimal(months)
    )


def ancillary_fees(
    k: int, financing: FinancingStructure, settings: Settings, term_months: Optional[int] = None
) -> AncillaryFees:
    """Return the add-on charges of period ``k`` (1-based) of a ``term_months`` loan.

    The GPS installation fee is added to period 1 only and is not amortized.
    """
    gps_rent = settings.gps_monthly_fee
    if k == 1:
        gps_rent += settings.gps_initial_fee
    gps_rent = round_currency(gps_rent)

    insurance = insurance_monthly_charge(
        financing.financed_insurance_amount, settings, term_months=term_months
    )
    coverage = insurance_coverage_months(settings)
    if coverage is not None and k > coverage:
        insurance = ZERO

    return AncillaryFees(
        gps_rent=gps_rent,
        gps_rent_iva=round_currency(gps_rent * settings.iva_rate),
        insurance_monthly=insurance,
        life_insurance_monthly=round_currency(settings.life_insurance_monthly),
    )
