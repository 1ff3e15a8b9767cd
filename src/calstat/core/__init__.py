"""Calendar arithmetic, decimal helpers and the error hierarchy."""

from .calendar import (
    begin_of,
    end_of,
    format_key,
    generate_time_period,
    is_between,
    label,
    offset,
    offset_and_begin_of,
    offset_and_end_of,
)
from .errors import CalstatError, ConfigurationError, DecimalConversionError, UnsupportedUnitError
from .time_units import TimeUnit

__all__ = [
    # Units
    "TimeUnit",
    # Calendar
    "begin_of",
    "end_of",
    "offset",
    "label",
    "format_key",
    "offset_and_begin_of",
    "offset_and_end_of",
    "generate_time_period",
    "is_between",
    # Errors
    "CalstatError",
    "ConfigurationError",
    "DecimalConversionError",
    "UnsupportedUnitError",
]
