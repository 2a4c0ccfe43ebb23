"""Data models for the credit quote engine.

This module defines dataclasses representing the entities that flow through
the quoting pipeline: the commercial inputs of a quote, the settings that
parameterize the engine, the derived financing structure, individual rows of
the amortization schedule and the summary handed to downstream consumers.
All of them are frozen; each call to the engine produces fresh objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from . import config

CASH = "cash"
FINANCED = "financed"
PAYMENT_MODES = (CASH, FINANCED)

NEXT_QUINCENA = "next_quincena"
NEXT_MONTH = "next_month"
FIRST_PAYMENT_RULES = (NEXT_QUINCENA, NEXT_MONTH)

ADD_TO_PRINCIPAL = "add_to_principal"
SUBLOAN_12M = "12m_subloan"
INSURANCE_FINANCE_MODES = (ADD_TO_PRINCIPAL, SUBLOAN_12M)


@dataclass(frozen=True)
class InsuranceChoice:
    """Vehicle insurance premium and how the client pays it.

    Attributes
    ----------
    mode: str
        ``"cash"`` means the premium is paid at signing. ``"financed"`` means
        it is carried by the credit (see ``Settings.finance_insurance_mode``).
    amount: Decimal
        The premium amount.
    """

    mode: str = CASH
    amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class CommissionChoice:
    """How the opening fee (commission) is paid: ``"cash"`` or ``"financed"``."""

    mode: str = CASH


@dataclass(frozen=True)
class QuoteInputs:
    """Commercial inputs of one quote.

    ``as_of`` is the disbursement date; it is always passed explicitly so the
    engine never reads the system clock.
    """

    vehicle_price: Decimal
    down_payment: Decimal
    term_months: int
    as_of: date
    insurance: InsuranceChoice = field(default_factory=InsuranceChoice)
    commission: CommissionChoice = field(default_factory=CommissionChoice)
    rate_tier: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    """Engine configuration.

    The annual nominal rate is resolved from a rate tier by the caller. The
    remaining fields default to the business constants in ``config``.
    """

    annual_nominal_rate: Decimal
    iva_rate: Decimal = config.DEFAULT_IVA_RATE
    opening_fee_rate: Decimal = config.DEFAULT_OPENING_FEE_RATE
    gps_initial_fee: Decimal = config.DEFAULT_GPS_INITIAL
    gps_monthly_fee: Decimal = config.DEFAULT_GPS_MONTHLY
    first_payment_rule: str = NEXT_QUINCENA
    day_count: str = config.DEFAULT_DAY_COUNT
    finance_insurance_mode: str = ADD_TO_PRINCIPAL
    life_insurance_monthly: Decimal = config.LIFE_INSURANCE_MONTHLY
    insurance_financing_factor: Decimal = config.INSURANCE_FINANCING_FACTOR
    insurance_coverage_months: Optional[int] = None
    affordability_ratio: Decimal = config.AFFORDABILITY_RATIO
    min_grace_days: int = 0


@dataclass(frozen=True)
class FinancingStructure:
    """Principal to amortize and cash due at signing, derived from the inputs.

    ``principal_financed`` is the vehicle balance after the down payment;
    ``credit_amount`` adds the opening fee when the commission is financed and
    ``principal_total`` further adds a financed insurance premium.
    """

    principal_financed: Decimal
    opening_fee: Decimal
    opening_fee_iva: Decimal
    credit_amount: Decimal
    principal_total: Decimal
    initial_outlay: Decimal
    financed_insurance_amount: Decimal


@dataclass(frozen=True)
class AncillaryFees:
    """Add-on charges billed alongside one loan payment."""

    gps_rent: Decimal
    gps_rent_iva: Decimal
    insurance_monthly: Decimal
    life_insurance_monthly: Decimal

    @property
    def total(self) -> Decimal:
        return (
            self.gps_rent
            + self.gps_rent_iva
            + self.insurance_monthly
            + self.life_insurance_monthly
        )


@dataclass(frozen=True)
class AmortizationRow:
    """One period of the amortization schedule.

    Field names follow the output contract consumed by document rendering and
    export: ``saldo_ini``/``saldo_fin`` are the opening and closing balances,
    ``interes`` the interest accrued in the period, ``iva_interes`` the tax on
    it, ``pmt`` the financing cash (capital + interest + tax) and
    ``pago_total`` the full cash payment including ancillary fees.
    """

    k: int
    date: date
    days: int
    saldo_ini: Decimal
    interes: Decimal
    iva_interes: Decimal
    capital: Decimal
    pmt: Decimal
    gps_rent: Decimal
    gps_rent_iva: Decimal
    insurance_monthly: Decimal
    life_insurance_monthly: Decimal
    pago_total: Decimal
    saldo_fin: Decimal


@dataclass(frozen=True)
class Summary:
    """Fixed-shape aggregate of a computed quote."""

    pmt_base: Decimal
    pmt_total_month2: Decimal
    principal_financed: Decimal
    principal_total: Decimal
    initial_outlay: Decimal
    opening_fee: Decimal
    opening_fee_iva: Decimal
    gps: Decimal
    gps_iva: Decimal
    first_payment_date: date
    last_payment_date: date
    minimum_income: Decimal
    total_interest: Decimal
    total_iva_interes: Decimal
    total_capital: Decimal
    total_paid: Decimal
    cat: Optional[float]


@dataclass(frozen=True)
class QuoteResult:
    """Everything the engine produces for one (rate tier, term) pair."""

    inputs: QuoteInputs
    settings: Settings
    financing: FinancingStructure
    schedule: Tuple[AmortizationRow, ...]
    summary: Summary
