"""Calendar arithmetic per time unit.

Compute the begin and end of the calendar unit containing a timestamp, shift
timestamps by whole units and render bucket keys and labels. All functions
operate on naive local ``datetime`` values and are pure.

Weeks follow ISO numbering (Monday=1 .. Sunday=7). WEEK_OF_MONTH buckets are
ISO weeks clipped to the boundaries of the month they start in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable

from .errors import UnsupportedUnitError
from .time_units import WEEKDAY_LABELS, TimeUnit

__all__ = [
    "UnitStrategy",
    "begin_of",
    "end_of",
    "format_key",
    "generate_time_period",
    "is_between",
    "is_leap_year",
    "label",
    "last_day_of_month",
    "monday_of_first_week_of_month",
    "offset",
    "offset_and_begin_of",
    "offset_and_end_of",
    "quarter_of",
    "strategy_for",
    "sunday_of_last_week_of_month",
    "week_of_month",
]

TRUNCATED_END_OF_DAY = time(23, 59, 59)

# Month lengths for a common year, index 0 unused
_MONTH_LENGTHS = (0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    """Gregorian leap-year rule."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def last_day_of_month(year: int, month: int) -> int:
    """Return the last day (28..31) of ``month`` in ``year``."""
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_LENGTHS[month]


def quarter_of(t: datetime) -> int:
    """Return the quarter (1..4) containing ``t``."""
    return (t.month - 1) // 3 + 1


def is_between(t: datetime | None, begin: datetime, end: datetime) -> bool:
    """Closed-interval membership test; ``None`` is never inside."""
    if t is None:
        return False
    return begin <= t <= end


# ---------------------------------------------------------------------------
# Begin / end of unit
# ---------------------------------------------------------------------------


def _end_of_day(t: datetime, truncate: bool) -> datetime:
    return datetime.combine(t.date(), TRUNCATED_END_OF_DAY if truncate else time.max)


def begin_of_hour(t: datetime) -> datetime:
    return t.replace(minute=0, second=0, microsecond=0)


def end_of_hour(t: datetime, truncate: bool = False) -> datetime:
    return t.replace(minute=59, second=59, microsecond=0 if truncate else 999999)


def begin_of_day(t: datetime) -> datetime:
    return datetime.combine(t.date(), time.min)


def end_of_day(t: datetime, truncate: bool = False) -> datetime:
    return _end_of_day(t, truncate)


def begin_of_week(t: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing ``t``."""
    return begin_of_day(t - timedelta(days=t.isoweekday() - 1))


def end_of_week(t: datetime, truncate: bool = False) -> datetime:
    """Sunday end-of-day of the ISO week containing ``t``."""
    return _end_of_day(t + timedelta(days=7 - t.isoweekday()), truncate)


def begin_of_month(t: datetime) -> datetime:
    return datetime(t.year, t.month, 1)


def end_of_month(t: datetime, truncate: bool = False) -> datetime:
    last = t.replace(day=last_day_of_month(t.year, t.month))
    return _end_of_day(last, truncate)


def begin_of_quarter(t: datetime) -> datetime:
    return datetime(t.year, (quarter_of(t) - 1) * 3 + 1, 1)


def end_of_quarter(t: datetime, truncate: bool = False) -> datetime:
    last_month = quarter_of(t) * 3
    last = datetime(t.year, last_month, last_day_of_month(t.year, last_month))
    return _end_of_day(last, truncate)


def begin_of_year(t: datetime) -> datetime:
    return datetime(t.year, 1, 1)


def end_of_year(t: datetime, truncate: bool = False) -> datetime:
    return _end_of_day(datetime(t.year, 12, 31), truncate)


def monday_of_first_week_of_month(t: datetime) -> datetime:
    """Start of the first week belonging to ``t``'s month.

    The first week is the one containing the 1st. Its Monday is used when it
    falls inside the month; otherwise the boundary is pulled in to the 1st.
    """
    first_day = begin_of_month(t)
    monday = begin_of_week(first_day)
    return monday if monday >= first_day else first_day


def sunday_of_last_week_of_month(t: datetime, truncate: bool = False) -> datetime:
    """End of the last week belonging to ``t``'s month.

    The last week is the one containing the month's last day. Its Sunday is
    used when it falls inside the month; otherwise the boundary is pulled in
    to the last day.
    """
    last_day = end_of_month(t, truncate)
    sunday = end_of_week(last_day, truncate)
    return sunday if sunday <= last_day else last_day


def begin_of_week_of_month(t: datetime) -> datetime:
    return max(begin_of_week(t), monday_of_first_week_of_month(t))


def end_of_week_of_month(t: datetime, truncate: bool = False) -> datetime:
    return min(end_of_week(t, truncate), sunday_of_last_week_of_month(t, truncate))


def week_of_month(t: datetime) -> int:
    """1-based index of ``t``'s week within its month.

    Counts week starts from :func:`monday_of_first_week_of_month`, so a month
    starting mid-week has a short first week numbered 1.
    """
    first_week = begin_of_week(monday_of_first_week_of_month(t))
    return (begin_of_week(t) - first_week).days // 7 + 1


# ---------------------------------------------------------------------------
# Offsets
# ---------------------------------------------------------------------------


def _add_months(t: datetime, months: int) -> datetime:
    # Day is clamped to the target month's length (Jan 31 + 1 month -> Feb 28/29)
    index = t.year * 12 + (t.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return t.replace(year=year, month=month, day=min(t.day, last_day_of_month(year, month)))


def _offset_hours(t: datetime, amount: int) -> datetime:
    return t + timedelta(hours=amount)


def _offset_days(t: datetime, amount: int) -> datetime:
    return t + timedelta(days=amount)


def _offset_weeks(t: datetime, amount: int) -> datetime:
    return t + timedelta(weeks=amount)


def _offset_months(t: datetime, amount: int) -> datetime:
    return _add_months(t, amount)


def _offset_quarters(t: datetime, amount: int) -> datetime:
    return _add_months(t, amount * 3)


def _offset_years(t: datetime, amount: int) -> datetime:
    return _add_months(t, amount * 12)


def _offset_day_of_week(t: datetime, amount: int) -> datetime:
    # Clamped to the current Monday..Sunday, never wraps into adjacent weeks
    weekday = t.isoweekday()
    if amount > 7 - weekday:
        return t + timedelta(days=7 - weekday)
    if amount < 1 - weekday:
        return t - timedelta(days=weekday - 1)
    return t + timedelta(days=amount)


def _offset_week_of_month(t: datetime, amount: int) -> datetime:
    # Clamped to the weeks belonging to t's month, never rolls into another month
    if amount > 0:
        shifted = t + timedelta(weeks=amount)
        return min(shifted, sunday_of_last_week_of_month(t))
    if amount < 0:
        shifted = t + timedelta(weeks=amount)
        return max(shifted, monday_of_first_week_of_month(t))
    return t


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def _label_year(t: datetime) -> str:
    return TimeUnit.YEAR.label_template.format(year=t.year)


def _label_quarter(t: datetime) -> str:
    return TimeUnit.QUARTER.label_template.format(quarter=quarter_of(t))


def _label_month(t: datetime) -> str:
    return TimeUnit.MONTH.label_template.format(month=t.month)


def _label_day(t: datetime) -> str:
    return TimeUnit.DAY.label_template.format(day=t.day)


def _label_day_of_week(t: datetime) -> str:
    return WEEKDAY_LABELS[t.isoweekday()]


def _label_week(t: datetime) -> str:
    return TimeUnit.WEEK.label_template.format(month=t.month, week=week_of_month(t))


def _label_hour(t: datetime) -> str:
    return TimeUnit.HOUR.label_template.format(hour=t.hour)


# ---------------------------------------------------------------------------
# Strategy table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UnitStrategy:
    """Calendar behaviour of one time unit."""

    begin_of: Callable[[datetime], datetime]
    end_of: Callable[[datetime, bool], datetime]
    offset: Callable[[datetime, int], datetime]
    label: Callable[[datetime], str]


_STRATEGIES: dict[TimeUnit, UnitStrategy] = {
    TimeUnit.YEAR: UnitStrategy(begin_of_year, end_of_year, _offset_years, _label_year),
    TimeUnit.QUARTER: UnitStrategy(begin_of_quarter, end_of_quarter, _offset_quarters, _label_quarter),
    TimeUnit.MONTH: UnitStrategy(begin_of_month, end_of_month, _offset_months, _label_month),
    TimeUnit.DAY: UnitStrategy(begin_of_day, end_of_day, _offset_days, _label_day),
    TimeUnit.DAY_OF_WEEK: UnitStrategy(begin_of_day, end_of_day, _offset_day_of_week, _label_day_of_week),
    TimeUnit.WEEK: UnitStrategy(begin_of_week, end_of_week, _offset_weeks, _label_week),
    TimeUnit.WEEK_OF_MONTH: UnitStrategy(
        begin_of_week_of_month, end_of_week_of_month, _offset_week_of_month, _label_week
    ),
    TimeUnit.HOUR: UnitStrategy(begin_of_hour, end_of_hour, _offset_hours, _label_hour),
}


def strategy_for(unit: TimeUnit) -> UnitStrategy:
    """Return the calendar strategy for ``unit``.

    Raises
    ------
    UnsupportedUnitError
        If ``unit`` is not a :class:`TimeUnit` member
    """
    try:
        return _STRATEGIES[unit]
    except (KeyError, TypeError):
        raise UnsupportedUnitError(unit) from None


def begin_of(unit: TimeUnit, t: datetime) -> datetime:
    """Start of the ``unit`` containing ``t``."""
    return strategy_for(unit).begin_of(t)


def end_of(unit: TimeUnit, t: datetime, truncate: bool = False) -> datetime:
    """End of the ``unit`` containing ``t``.

    Parameters
    ----------
    unit
        Calendar unit
    t
        Benchmark timestamp
    truncate
        End at ``23:59:59`` (``HH:59:59`` for HOUR) instead of the last
        representable microsecond
    """
    return strategy_for(unit).end_of(t, truncate)


def offset(t: datetime, amount: int, unit: TimeUnit) -> datetime:
    """Shift ``t`` by ``amount`` units.

    DAY_OF_WEEK stays inside ``t``'s week and WEEK_OF_MONTH stays inside the
    weeks of ``t``'s month; both clamp at the edge instead of wrapping.
    """
    return strategy_for(unit).offset(t, amount)


def label(unit: TimeUnit, t: datetime) -> str:
    """Display label of the bucket starting at ``t``."""
    return strategy_for(unit).label(t)


def format_key(unit: TimeUnit, t: datetime) -> str:
    """Bucket key of ``t`` under ``unit``'s key format."""
    strategy_for(unit)
    return t.strftime(unit.key_format.replace("{quarter}", str(quarter_of(t))))


def offset_and_begin_of(t: datetime, amount: int, unit: TimeUnit) -> datetime:
    """Begin of the unit ``amount`` units away from ``t``."""
    return begin_of(unit, offset(t, amount, unit))


def offset_and_end_of(t: datetime, amount: int, unit: TimeUnit, truncate: bool = False) -> datetime:
    """End of the unit ``amount`` units away from ``t``."""
    return end_of(unit, offset(t, amount, unit), truncate)


def generate_time_period(
    unit: TimeUnit,
    amount: int = 0,
    benchmark: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Build a ``(begin, end)`` range spanning ``amount`` units around a benchmark.

    Parameters
    ----------
    unit
        Calendar unit
    amount
        Negative reaches into the past (begin moves back, end is the end of
        the current unit), positive into the future (begin is the start of
        the current unit, end moves forward), zero is the current unit
    benchmark
        Reference timestamp (default: now)

    Returns
    -------
    tuple[datetime, datetime]
        Inclusive range boundaries

    Examples
    --------
    >>> generate_time_period(TimeUnit.MONTH, -2, datetime(2024, 3, 15))
    (datetime.datetime(2024, 1, 1, 0, 0), datetime.datetime(2024, 3, 31, 23, 59, 59, 999999))
    """
    if benchmark is None:
        benchmark = datetime.now()

    if amount < 0:
        return offset_and_begin_of(benchmark, amount, unit), end_of(unit, benchmark)
    if amount > 0:
        return begin_of(unit, benchmark), offset_and_end_of(benchmark, amount, unit)
    return begin_of(unit, benchmark), end_of(unit, benchmark)
