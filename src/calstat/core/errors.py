"""Exception hierarchy for calstat.

Every error raised by the engine derives from :class:`CalstatError` so callers
can catch the whole family at the top-level aggregation call.
"""

from __future__ import annotations

__all__ = [
    "CalstatError",
    "ConfigurationError",
    "DecimalConversionError",
    "UnsupportedUnitError",
]


class CalstatError(Exception):
    """Base class for calstat errors."""


class ConfigurationError(CalstatError):
    """Raised when a statistics configuration, settings or job file is missing
    a required field or is inconsistent with its declared mode."""


class DecimalConversionError(CalstatError, ArithmeticError):
    """Raised when a value cannot be interpreted as a decimal for SUM/AVG."""

    def __init__(self, value: object, reason: str | None = None) -> None:
        self.value = value
        message = f"Cannot convert {value!r} ({type(value).__name__}) to a decimal"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedUnitError(CalstatError, ValueError):
    """Raised when a value outside the closed TimeUnit set reaches calendar code."""

    def __init__(self, unit: object) -> None:
        self.unit = unit
        super().__init__(f"Unsupported time unit: {unit!r}")
