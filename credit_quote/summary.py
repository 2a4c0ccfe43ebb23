"""Reduce a full schedule to the fixed-shape summary consumed downstream."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from .data_models import AmortizationRow, FinancingStructure, Settings, Summary
from .utils import round_currency


def summarize(
    financing: FinancingStructure,
    schedule: Sequence[AmortizationRow],
    settings: Settings,
    pmt_base: Decimal,
    cat: Optional[float] = None,
) -> Summary:
    """Aggregate a schedule.

    ``pmt_total_month2`` is the total payment of period 2, the steady-state
    headline figure: period 1 may carry the GPS installation fee and a short
    interest period. A one-period loan reports period 1 instead.
    ``minimum_income`` is that payment divided by the affordability ratio.
    """
    if not schedule:
        raise ValueError("Cannot summarize an empty schedule")
    steady = schedule[1] if len(schedule) > 1 else schedule[0]
    pmt_total_month2 = steady.pago_total
    gps = round_currency(settings.gps_monthly_fee)

    return Summary(
        pmt_base=pmt_base,
        pmt_total_month2=pmt_total_month2,
        principal_financed=financing.principal_financed,
        principal_total=financing.principal_total,
        initial_outlay=financing.initial_outlay,
        opening_fee=financing.opening_fee,
        opening_fee_iva=financing.opening_fee_iva,
        gps=gps,
        gps_iva=round_currency(gps * settings.iva_rate),
        first_payment_date=schedule[0].date,
        last_payment_date=schedule[-1].date,
        minimum_income=round_currency(pmt_total_month2 / settings.affordability_ratio),
        total_interest=sum((row.interes for row in schedule), Decimal("0.00")),
        total_iva_interes=sum((row.iva_interes for row in schedule), Decimal("0.00")),
        total_capital=sum((row.capital for row in schedule), Decimal("0.00")),
        total_paid=sum((row.pago_total for row in schedule), Decimal("0.00")),
        cat=cat,
    )
