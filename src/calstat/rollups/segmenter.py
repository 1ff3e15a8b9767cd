"""Split a time range into calendar-aligned buckets.

Buckets are contiguous: each one begins where the previous unit ended, the
first begins at the range start and the last is clipped to the range end.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from ..core import calendar
from ..core.time_units import TimeUnit
from ..observability.loguru_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = [
    "Interval",
    "current_period_segments",
    "iter_segments",
    "segment",
]

logger = get_logger("segmenter")

_RESOLUTION = timedelta(microseconds=1)


@dataclass(frozen=True)
class Interval:
    """One time bucket.

    Attributes
    ----------
    begin : datetime
        Inclusive start
    end : datetime
        Inclusive end
    key : str
        Bucket key formatted from ``begin``
    label : str
        Display label of the bucket
    """

    begin: datetime
    end: datetime
    key: str
    label: str

    def __post_init__(self) -> None:
        if self.begin > self.end:
            raise ValueError(f"Interval begin {self.begin} is after end {self.end}")

    def contains(self, t: datetime | None) -> bool:
        """Closed-interval membership test."""
        return calendar.is_between(t, self.begin, self.end)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "begin": self.begin.isoformat(),
            "end": self.end.isoformat(),
        }


def _normalize(begin: datetime, end: datetime, truncate: bool) -> tuple[datetime, datetime]:
    if not truncate:
        return begin, end
    return calendar.begin_of_day(begin), calendar.end_of_day(end, truncate=True)


def iter_segments(
    begin: datetime,
    end: datetime,
    unit: TimeUnit,
    truncate: bool = False,
) -> Iterator[Interval]:
    """Lazily yield the buckets of ``[begin, end]``.

    Parameters
    ----------
    begin
        Range start
    end
        Range end
    unit
        Bucket granularity
    truncate
        Normalize the range to whole days (``begin`` to 00:00:00, ``end`` to
        23:59:59) and end each bucket at whole seconds

    Yields
    ------
    Interval
        Buckets in chronological order; nothing when ``begin >= end``
    """
    strategy = calendar.strategy_for(unit)
    begin, end = _normalize(begin, end, truncate)

    cursor = begin
    while cursor < end:
        unit_end = strategy.end_of(cursor, False)
        yield Interval(
            begin=cursor,
            end=min(strategy.end_of(cursor, truncate), end),
            key=calendar.format_key(unit, cursor),
            label=strategy.label(cursor),
        )
        if unit_end >= end:
            break
        # Successor bucket starts right after the untruncated end of this unit
        cursor = strategy.begin_of(unit_end + _RESOLUTION)


def segment(
    begin: datetime,
    end: datetime,
    unit: TimeUnit,
    truncate: bool = False,
) -> list[Interval]:
    """Split ``[begin, end]`` into ``unit`` buckets.

    See :func:`iter_segments` for parameters.

    Examples
    --------
    >>> [i.key for i in segment(datetime(2024, 1, 15), datetime(2024, 3, 10), TimeUnit.MONTH)]
    ['2024-01', '2024-02', '2024-03']
    """
    intervals = list(iter_segments(begin, end, unit, truncate))
    logger.debug(
        f"Segmented range into {len(intervals)} {unit.code} buckets",
        unit=unit.code,
        begin=begin.isoformat(),
        end=end.isoformat(),
        buckets=len(intervals),
    )
    return intervals


def current_period_segments(
    unit: TimeUnit,
    now: datetime | None = None,
    truncate: bool = False,
) -> list[Interval]:
    """Segment the ``unit`` containing ``now`` (default: now).

    The range is ``[begin_of(unit, now), end_of(unit, now)]``, so the result
    is the single bucket of the current period.
    """
    now = now or datetime.now()
    return segment(calendar.begin_of(unit, now), calendar.end_of(unit, now, truncate), unit, truncate)
