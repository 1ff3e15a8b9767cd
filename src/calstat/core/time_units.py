"""Calendar granularities used for bucketing.

Each unit carries a stable code, the ``strftime`` pattern used to build bucket
keys and the template used to build display labels.
"""

from __future__ import annotations

from enum import Enum

from .errors import UnsupportedUnitError

__all__ = ["TimeUnit", "WEEKDAY_LABELS"]

# Indexed by ISO weekday (Monday=1 .. Sunday=7), slot 0 unused
WEEKDAY_LABELS = ("", "周一", "周二", "周三", "周四", "周五", "周六", "周日")


class TimeUnit(Enum):
    """Closed set of calendar units.

    Attributes
    ----------
    code : str
        Stable identifier used in job files and serialized output
    key_format : str
        ``strftime`` pattern for bucket keys; ``{quarter}`` is substituted
        with the quarter number before formatting
    label_template : str | None
        ``str.format`` template for labels; ``None`` for DAY_OF_WEEK, which is
        labelled with weekday short names
    """

    YEAR = ("year", "%Y", "{year}年")
    QUARTER = ("quarter", "%Y-{quarter}", "{quarter}季度")
    MONTH = ("month", "%Y-%m", "{month}月")
    DAY = ("day", "%Y-%m-%d", "{day}日")
    DAY_OF_WEEK = ("dayOfWeek", "%Y-%m-%d", None)
    WEEK = ("week", "%Y-%m-%d", "{month}月第{week}周")
    WEEK_OF_MONTH = ("weekOfMonth", "%Y-%m-%d", "{month}月第{week}周")
    HOUR = ("hour", "%Y-%m-%d %H", "{hour}时")

    def __init__(self, code: str, key_format: str, label_template: str | None) -> None:
        self.code = code
        self.key_format = key_format
        self.label_template = label_template

    @classmethod
    def contains(cls, code: str) -> bool:
        """Return True if ``code`` names a unit."""
        return any(unit.code == code for unit in cls)

    @classmethod
    def from_code(cls, code: str) -> TimeUnit:
        """Look up a unit by its code.

        Raises
        ------
        UnsupportedUnitError
            If no unit has this code
        """
        for unit in cls:
            if unit.code == code:
                return unit
        raise UnsupportedUnitError(code)

    @classmethod
    def coerce(cls, value: TimeUnit | str) -> TimeUnit:
        """Accept a member, a code (``"weekOfMonth"``) or a member name
        (``"week_of_month"``, case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if cls.contains(value):
                return cls.from_code(value)
            name = value.strip().upper()
            if name in cls.__members__:
                return cls.__members__[name]
        raise UnsupportedUnitError(value)
