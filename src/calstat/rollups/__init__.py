"""Time bucketing and statistical aggregation."""

from .aggregator import (
    aggregate_cycle,
    aggregate_total,
    compute_aggregate,
    matches_bucket,
    merge,
    run_multi_dimension,
    run_single_dimension,
)
from .config import AggregationMode, MatchPolicy, SingleDimension, StatisticsConfig, StatisticsKind
from .results import CycleBucket, CycleStatisticsResult, ItemDetail, TotalStatisticsResult
from .segmenter import Interval, current_period_segments, iter_segments, segment

__all__ = [
    # Segmentation
    "Interval",
    "segment",
    "iter_segments",
    "current_period_segments",
    # Configuration
    "AggregationMode",
    "MatchPolicy",
    "SingleDimension",
    "StatisticsConfig",
    "StatisticsKind",
    # Results
    "ItemDetail",
    "CycleBucket",
    "TotalStatisticsResult",
    "CycleStatisticsResult",
    # Aggregation
    "compute_aggregate",
    "matches_bucket",
    "run_single_dimension",
    "run_multi_dimension",
    "aggregate_total",
    "aggregate_cycle",
    "merge",
]
