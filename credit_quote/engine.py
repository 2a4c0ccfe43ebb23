"""Core calculation engine for credit quotes.

This module implements the financial logic that turns a quote into a
month-by-month amortization schedule. A level payment is derived from the
annuity formula on the monthly rate, while the interest of each period is
accrued on the actual days elapsed under the configured day-count convention.
Tax is charged on the interest only, ancillary fees ride alongside every
payment and the final period absorbs any residual so the balance closes at
exactly zero.

The pipeline is a pure function of its inputs: ``compute_quote`` never reads
the system clock and shares no state between calls, so callers may run many
quotes concurrently.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, getcontext
from typing import Callable, List, Optional, Tuple

from .data_models import AmortizationRow, AncillaryFees, QuoteInputs, QuoteResult, Settings
from .dates import daily_rate, first_payment_date, period_dates, period_day_counts
from .exceptions import InvalidQuoteInput
from .fees import ancillary_fees
from .financing import build_financing_structure
from .metrics import compute_cat
from .summary import summarize
from .utils import round_currency
from .validation import validate_quote

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
NO_FEES = AncillaryFees(ZERO, ZERO, ZERO, ZERO)


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero or
    negative, the payment falls back to the straight-line ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month <= 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


def generate_schedule(
    principal: Decimal,
    annual_nominal_rate: Decimal,
    term_months: int,
    as_of: date,
    first_date: date,
    iva_rate: Decimal,
    day_count: str = "A360",
    fees_for_period: Optional[Callable[[int], AncillaryFees]] = None,
) -> Tuple[Decimal, List[AmortizationRow]]:
    """Build the amortization schedule of a loan.

    Parameters
    ----------
    principal: Decimal
        Amount to amortize.
    annual_nominal_rate: Decimal
        Annual nominal rate as a fraction (``0.45`` for 45 %). A rate of zero
        or less amortizes straight-line with no interest.
    term_months: int
        Number of monthly payments.
    as_of: date
        Disbursement date; interest of the first period accrues from here.
    first_date: date
        Date of the first payment. Later payments follow monthly.
    iva_rate: Decimal
        Tax rate charged on the interest of each period.
    day_count: str
        Day-count convention for the daily interest rate.
    fees_for_period: callable, optional
        Returns the ancillary charges of period ``k``; none when omitted.

    Returns
    -------
    pmt_base: Decimal
        The level financing payment (capital plus interest, no tax).
    rows: List[AmortizationRow]
        One row per period. Every currency field is rounded to cents as the
        row is built; the last row's capital equals its opening balance.

    Raises
    ------
    InvalidQuoteInput
        If ``term_months`` is not positive.
    """
    if term_months <= 0:
        raise InvalidQuoteInput({"term_months": "must be a positive number of months"})
    if fees_for_period is None:
        fees_for_period = lambda k: NO_FEES  # noqa: E731

    dates = period_dates(first_date, term_months)
    day_counts = period_day_counts(as_of, dates, day_count)
    rate_per_day = daily_rate(annual_nominal_rate, day_count)
    straight_line = annual_nominal_rate <= 0
    if straight_line:
        logger.debug(f"Non-positive rate {annual_nominal_rate}; amortizing straight-line")
    pmt_base = round_currency(
        _calculate_annuity_payment(principal, annual_nominal_rate / Decimal(12), term_months)
    )

    rows: List[AmortizationRow] = []
    balance = round_currency(principal)
    for k, (payment_date, days) in enumerate(zip(dates, day_counts), start=1):
        saldo_ini = balance
        if straight_line:
            interes = ZERO
        else:
            interes = round_currency(saldo_ini * rate_per_day * Decimal(days))

        if k == term_months:
            # Close the loan: the last capital absorbs every residual cent.
            capital = saldo_ini
            residual = capital - (pmt_base - interes)
            if residual != 0:
                logger.debug(f"Termination correction of {residual} on period {k}")
        else:
            capital = round_currency(pmt_base - interes)
            if capital < 0:
                capital = ZERO
            if capital >= saldo_ini:
                if saldo_ini > 0:
                    logger.debug(f"Balance paid off early on period {k} of {term_months}")
                capital = saldo_ini

        iva_interes = round_currency(interes * iva_rate)
        pmt = capital + interes + iva_interes
        saldo_fin = saldo_ini - capital
        fees = fees_for_period(k)

        rows.append(
            AmortizationRow(
                k=k,
                date=payment_date,
                days=days,
                saldo_ini=saldo_ini,
                interes=interes,
                iva_interes=iva_interes,
                capital=capital,
                pmt=pmt,
                gps_rent=fees.gps_rent,
                gps_rent_iva=fees.gps_rent_iva,
                insurance_monthly=fees.insurance_monthly,
                life_insurance_monthly=fees.life_insurance_monthly,
                pago_total=pmt + fees.total,
                saldo_fin=saldo_fin,
            )
        )
        balance = saldo_fin

    return pmt_base, rows


def compute_quote(inputs: QuoteInputs, settings: Settings, strict_terms: bool = False) -> QuoteResult:
    """Compute the financing structure, schedule and summary of one quote.

    Parameters
    ----------
    inputs: QuoteInputs
        Commercial inputs, including the explicit disbursement date.
    settings: Settings
        Engine settings with the annual rate already resolved from the tier.
    strict_terms: bool
        When True, only the commercially offered terms are accepted.

    Raises
    ------
    InvalidQuoteInput
        If any input or setting is invalid; nothing is computed in that case.
    """
    validate_quote(inputs, settings, strict_terms=strict_terms)
    logger.debug(
        f"Computing quote: price={inputs.vehicle_price} down={inputs.down_payment} "
        f"term={inputs.term_months} rate={settings.annual_nominal_rate} as_of={inputs.as_of}"
    )

    financing = build_financing_structure(inputs, settings)
    first_date = first_payment_date(
        inputs.as_of, settings.first_payment_rule, settings.min_grace_days
    )
    pmt_base, rows = generate_schedule(
        principal=financing.principal_total,
        annual_nominal_rate=settings.annual_nominal_rate,
        term_months=inputs.term_months,
        as_of=inputs.as_of,
        first_date=first_date,
        iva_rate=settings.iva_rate,
        day_count=settings.day_count,
        fees_for_period=lambda k: ancillary_fees(k, financing, settings, inputs.term_months),
    )
    schedule = tuple(rows)
    summary = summarize(
        financing,
        schedule,
        settings,
        pmt_base=pmt_base,
        cat=compute_cat(financing, schedule, commission_mode=inputs.commission.mode),
    )
    return QuoteResult(
        inputs=inputs,
        settings=settings,
        financing=financing,
        schedule=schedule,
        summary=summary,
    )
