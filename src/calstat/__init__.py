"""calstat: calendar-aware time bucketing and statistical aggregation."""

from .core.calendar import (
    begin_of,
    end_of,
    format_key,
    generate_time_period,
    label,
    offset,
    offset_and_begin_of,
    offset_and_end_of,
)
from .core.errors import CalstatError, ConfigurationError, DecimalConversionError, UnsupportedUnitError
from .core.time_units import TimeUnit
from .rollups.aggregator import (
    aggregate_cycle,
    aggregate_total,
    compute_aggregate,
    matches_bucket,
    merge,
    run_multi_dimension,
    run_single_dimension,
)
from .rollups.config import AggregationMode, MatchPolicy, SingleDimension, StatisticsConfig, StatisticsKind
from .rollups.results import CycleBucket, CycleStatisticsResult, ItemDetail, TotalStatisticsResult
from .rollups.segmenter import Interval, current_period_segments, iter_segments, segment

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Calendar
    "TimeUnit",
    "begin_of",
    "end_of",
    "offset",
    "label",
    "format_key",
    "offset_and_begin_of",
    "offset_and_end_of",
    "generate_time_period",
    # Segmentation
    "Interval",
    "segment",
    "iter_segments",
    "current_period_segments",
    # Aggregation
    "AggregationMode",
    "MatchPolicy",
    "SingleDimension",
    "StatisticsConfig",
    "StatisticsKind",
    "ItemDetail",
    "CycleBucket",
    "TotalStatisticsResult",
    "CycleStatisticsResult",
    "compute_aggregate",
    "matches_bucket",
    "run_single_dimension",
    "run_multi_dimension",
    "aggregate_total",
    "aggregate_cycle",
    "merge",
    # Errors
    "CalstatError",
    "ConfigurationError",
    "DecimalConversionError",
    "UnsupportedUnitError",
]
