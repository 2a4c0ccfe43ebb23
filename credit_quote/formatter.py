"""Output helpers for the credit quote engine.

This module provides simple functions to render quote summaries, amortization
schedules and plans matrices in a tabular text format using built-in printing
and string formatting.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .data_models import AmortizationRow, Summary
from .matrix import Matrix


def print_summary(summary: Summary) -> None:
    """Print the summary of a quote in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Vehicle balance     : {summary.principal_financed:.2f}")
    print(f"Principal total     : {summary.principal_total:.2f}")
    print(f"Opening fee         : {summary.opening_fee:.2f} (+ IVA {summary.opening_fee_iva:.2f})")
    print(f"Initial outlay      : {summary.initial_outlay:.2f}")
    print(f"Base payment (PMT)  : {summary.pmt_base:.2f}")
    print(f"Monthly payment     : {summary.pmt_total_month2:.2f}")
    print(f"GPS rent            : {summary.gps:.2f} (+ IVA {summary.gps_iva:.2f})")
    print(f"Minimum income      : {summary.minimum_income:.2f}")
    print(f"Total interest      : {summary.total_interest:.2f}")
    print(f"Total paid          : {summary.total_paid:.2f}")
    if summary.cat is not None:
        print(f"CAT                 : {summary.cat * 100:.2f}%")
    print(f"First payment       : {summary.first_payment_date.isoformat()}")
    print(f"Last payment        : {summary.last_payment_date.isoformat()}")
    print("-" * 72)


def print_schedule(schedule: Iterable[AmortizationRow], show_insurance: bool = False) -> None:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[AmortizationRow]
        The schedule rows to print.
    show_insurance: bool
        Whether to include the insurance columns. They are hidden by default
        because they are constant across the schedule.
    """
    headers = [
        "K",
        "Date",
        "Days",
        "StartBal",
        "Interest",
        "IVA",
        "Capital",
        "PMT",
        "GPS",
        "GPS_IVA",
    ]
    if show_insurance:
        headers.extend(["Insurance", "Life"])
    headers.extend(["Total", "EndBal"])
    print("\t".join(headers))
    for row in schedule:
        cells = [
            str(row.k),
            row.date.isoformat(),
            str(row.days),
            f"{row.saldo_ini:.2f}",
            f"{row.interes:.2f}",
            f"{row.iva_interes:.2f}",
            f"{row.capital:.2f}",
            f"{row.pmt:.2f}",
            f"{row.gps_rent:.2f}",
            f"{row.gps_rent_iva:.2f}",
        ]
        if show_insurance:
            cells.extend([f"{row.insurance_monthly:.2f}", f"{row.life_insurance_monthly:.2f}"])
        cells.extend([f"{row.pago_total:.2f}", f"{row.saldo_fin:.2f}"])
        print("\t".join(cells))


def print_matrix(matrix: Matrix, terms: Sequence[int]) -> None:
    """Print the monthly payment of each (tier, term) pair.

    Each cell shows the steady-state total payment followed by the minimum
    income it requires.
    """
    print("Plans")
    print("=" * 72)
    header = f"{'Tier':6s}" + "".join(f"{f'{term} months':>22s}" for term in terms)
    print(header)
    for tier, by_term in matrix.items():
        cells = []
        for term in terms:
            result = by_term.get(term)
            if result is None:
                cells.append(f"{'-':>22s}")
                continue
            s = result.summary
            cells.append(f"{s.pmt_total_month2:>11.2f} ({s.minimum_income:>8.0f})")
        print(f"{tier:6s}" + "".join(cells))
    print("=" * 72)
