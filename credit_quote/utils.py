"""Utility functions for the credit quote engine.

This module provides helpers for parsing user input into Python data types,
for rounding currency amounts and for month arithmetic on ``datetime.date``
instances.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")


def round_currency(value: Decimal) -> Decimal:
    """Round a currency amount to cents, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_iso_date(value: Union[str, date]) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``.

    A trailing time component (``2025-08-11T10:00:00Z``) is ignored, so
    timestamps produced by browsers are accepted as dates.

    Raises
    ------
    ValueError
        If the string is not a valid ISO date.
    """
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def last_day_of_month(dt: date) -> date:
    return date(dt.year, dt.month, calendar.monthrange(dt.year, dt.month)[1])


def is_last_day_of_month(dt: date) -> bool:
    return dt.day == calendar.monthrange(dt.year, dt.month)[1]


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def decimal_from_str(value: Union[str, int, float, Decimal]) -> Decimal:
    """Convert a numeric value into a ``Decimal``.

    Strings may carry thousands separators (``"405,900"``). Floats are
    converted through their shortest ``repr`` so that ``0.45`` becomes
    ``Decimal("0.45")`` rather than its binary expansion. It raises
    ``ValueError`` if conversion fails.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = repr(value)
    try:
        cleaned = str(value).replace(",", "").strip()
        result = Decimal(cleaned)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result
