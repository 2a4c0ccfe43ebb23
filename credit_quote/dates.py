"""Day-count and payment calendar helpers.

Payments fall on a quincena (the 15th or the last day of a month) or one
calendar month after disbursement, and repeat monthly from there. Interest is
accrued per day, so this module also converts an annual nominal rate into a
daily rate under the configured day-count convention.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator, List

from .data_models import NEXT_MONTH, NEXT_QUINCENA
from .utils import add_months, is_last_day_of_month, last_day_of_month

ACTUAL_360 = "actual_360"
ACTUAL_365 = "actual_365"
THIRTY_360 = "thirty_360"

# Spellings accepted from callers, mapped to the canonical convention.
DAY_COUNT_ALIASES = {
    "A360": ACTUAL_360,
    "ACT360": ACTUAL_360,
    "actual_360": ACTUAL_360,
    "A365": ACTUAL_365,
    "ACT365": ACTUAL_365,
    "actual_365": ACTUAL_365,
    "D30360": THIRTY_360,
    "30/360": THIRTY_360,
    "thirty_360": THIRTY_360,
}

_BASES = {ACTUAL_360: 360, ACTUAL_365: 365, THIRTY_360: 360}


def normalize_day_count(day_count: str) -> str:
    """Return the canonical name of a day-count convention.

    Raises
    ------
    ValueError
        If the convention is not supported.
    """
    try:
        return DAY_COUNT_ALIASES[day_count]
    except KeyError:
        raise ValueError(f"Unsupported day count convention: {day_count}") from None


def day_count_base(day_count: str) -> int:
    """Return the year length (360 or 365) used as the daily rate denominator."""
    return _BASES[normalize_day_count(day_count)]


def daily_rate(annual_nominal_rate: Decimal, day_count: str) -> Decimal:
    return annual_nominal_rate / Decimal(day_count_base(day_count))


def days_360(start: date, end: date) -> int:
    """Count days between two dates with the 30/360 rule.

    Every month counts as 30 days; a start on the 31st is moved to the 30th,
    and an end on the 31st is moved to the 30th when the start is on or after
    the 30th.
    """
    start_day = min(start.day, 30)
    end_day = end.day
    if end_day == 31 and start_day >= 30:
        end_day = 30
    return (
        (end.year - start.year) * 360
        + (end.month - start.month) * 30
        + (end_day - start_day)
    )


def days_between(start: date, end: date, day_count: str = ACTUAL_360) -> int:
    """Return the number of days from ``start`` to ``end`` (end exclusive).

    Actual conventions count calendar days; ``thirty_360`` counts with
    :func:`days_360`.
    """
    if normalize_day_count(day_count) == THIRTY_360:
        return days_360(start, end)
    return (end - start).days


def next_quincena(from_date: date) -> date:
    """Round forward to the 15th or to the last day of the month.

    Days 1 to 15 map to the 15th of the same month; later days map to the
    last day of the month.
    """
    if from_date.day <= 15:
        return from_date.replace(day=15)
    return last_day_of_month(from_date)


def first_payment_date(as_of: date, rule: str, min_grace_days: int = 0) -> date:
    """Derive the first payment date from the disbursement date.

    Parameters
    ----------
    as_of: date
        Disbursement date.
    rule: str
        ``"next_quincena"`` picks the soonest quincena on or after
        ``as_of + min_grace_days``; ``"next_month"`` adds one calendar month
        to that date, clamping to the end of shorter months.
    min_grace_days: int
        Minimum number of days between disbursement and the first payment.
    """
    earliest = as_of + timedelta(days=min_grace_days)
    if rule == NEXT_QUINCENA:
        return next_quincena(earliest)
    if rule == NEXT_MONTH:
        return add_months(earliest, 1)
    raise ValueError(f"Unsupported first payment rule: {rule}")


class PeriodDates:
    """The payment dates of a loan, one calendar month apart.

    Each date is computed as an offset from the first payment date rather than
    from the previous date, so clamping a 31st to a shorter month never drifts
    into later months. When the first payment falls on the last day of a
    month, every payment falls on the last day of its month. The object can
    be iterated any number of times.
    """

    def __init__(self, first: date, term_months: int) -> None:
        if term_months <= 0:
            raise ValueError("Term must be positive")
        self.first = first
        self.term_months = term_months
        self._month_end = is_last_day_of_month(first)

    def __len__(self) -> int:
        return self.term_months

    def __getitem__(self, index: int) -> date:
        if index < 0:
            index += self.term_months
        if not 0 <= index < self.term_months:
            raise IndexError("period index out of range")
        dt = add_months(self.first, index)
        if self._month_end:
            dt = last_day_of_month(dt)
        return dt

    def __iter__(self) -> Iterator[date]:
        for index in range(self.term_months):
            yield self[index]


def period_dates(first: date, term_months: int) -> PeriodDates:
    return PeriodDates(first, term_months)


def period_day_counts(as_of: date, dates: PeriodDates, day_count: str) -> List[int]:
    """Days accrued in each period: disbursement to the first payment, then
    between consecutive payment dates."""
    counts: List[int] = []
    previous = as_of
    for dt in dates:
        counts.append(days_between(previous, dt, day_count))
        previous = dt
    return counts
