"""Aggregation engine.

Reduce record values per group (SUM, AVG, COUNT, DISTINCT_COUNT), tag the
results by a single descriptor or by dimension, and repeat per time bucket
for cyclical statistics.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ..core import decimal_math
from ..core.errors import ConfigurationError
from ..observability.loguru_config import get_logger, timing_context
from .config import AggregationMode, MatchPolicy, SingleDimension, StatisticsConfig, StatisticsKind
from .results import (
    CycleBucket,
    CycleStatisticsResult,
    ItemDetail,
    StatisticsResult,
    TotalStatisticsResult,
)
from .results import merge as merge_results
from .segmenter import Interval, iter_segments

if TYPE_CHECKING:
    from .config import DimensionExtractor, TimeExtractor, ValueExtractor

__all__ = [
    "aggregate_cycle",
    "aggregate_total",
    "compute_aggregate",
    "matches_bucket",
    "merge",
    "run_multi_dimension",
    "run_single_dimension",
]

logger = get_logger("aggregator")

EMPTY_VALUE = "0"


def _distinct_count(values: Sequence[Any]) -> int:
    hashable: set[Any] = set()
    others: list[Any] = []
    for value in values:
        try:
            hashable.add(value)
        except TypeError:
            if value not in others:
                others.append(value)
    return len(hashable) + len(others)


def compute_aggregate(values: Sequence[Any], mode: AggregationMode) -> str:
    """Reduce ``values`` to a plain decimal string.

    Parameters
    ----------
    values
        Extracted values of one group
    mode
        SUM and AVG read values as decimals and round half-up to two
        places; COUNT and DISTINCT_COUNT count entries

    Returns
    -------
    str
        ``"0"`` for an empty group, otherwise the result without trailing
        zeros (``"20"``, ``"3.33"``)

    Raises
    ------
    DecimalConversionError
        If SUM/AVG meets a value that is not a number
    """
    if not values:
        return EMPTY_VALUE

    if mode is AggregationMode.COUNT:
        return str(len(values))
    if mode is AggregationMode.DISTINCT_COUNT:
        return str(_distinct_count(values))

    total = decimal_math.add(*values)
    if mode is AggregationMode.SUM:
        return decimal_math.to_plain_string(decimal_math.scale_half_up(total))
    if total == 0:
        return EMPTY_VALUE
    return decimal_math.to_plain_string(decimal_math.divide(total, len(values)))


def matches_bucket(
    record: Any,
    interval: Interval,
    extractors: Sequence[TimeExtractor],
    policy: MatchPolicy = MatchPolicy.AND,
) -> bool:
    """Return True if ``record`` belongs to ``interval``.

    With one extractor the policy is ignored. With several, AND requires
    every timestamp inside the bucket and OR requires at least one.
    Missing timestamps never match.
    """
    if len(extractors) == 1:
        return interval.contains(extractors[0](record))
    hits = (interval.contains(extractor(record)) for extractor in extractors)
    if policy is MatchPolicy.OR:
        return any(hits)
    return all(hits)


def run_single_dimension(
    records: Iterable[Any],
    value_extractor: ValueExtractor,
    mode: AggregationMode,
    tag: SingleDimension,
) -> list[ItemDetail]:
    """Aggregate all records into one item tagged with ``tag``."""
    values = [value_extractor(record) for record in records]
    return [ItemDetail(tag.tag_code, tag.tag_name, compute_aggregate(values, mode))]


def run_multi_dimension(
    records: Iterable[Any],
    value_extractor: ValueExtractor,
    dimension_extractor: DimensionExtractor,
    tag_dictionary: Mapping[Hashable, str],
    mode: AggregationMode,
) -> list[ItemDetail]:
    """Aggregate records per dimension key.

    Emits one item per ``tag_dictionary`` entry, in dictionary order. Keys
    without records get ``"0"``; records whose key is not in the dictionary
    are dropped.
    """
    groups: dict[Hashable, list[Any]] = {key: [] for key in tag_dictionary}
    dropped = 0
    for record in records:
        key = dimension_extractor(record)
        if key in groups:
            groups[key].append(value_extractor(record))
        else:
            dropped += 1

    if dropped:
        logger.debug(f"Dropped {dropped} records with unknown dimension keys", dropped=dropped)

    return [
        ItemDetail(str(key), name, compute_aggregate(groups[key], mode))
        for key, name in tag_dictionary.items()
    ]


def _run(config: StatisticsConfig, records: Iterable[Any]) -> list[ItemDetail]:
    if config.multidimensional:
        return run_multi_dimension(
            records,
            config.value_extractor,
            config.dimension_extractor,
            config.tag_dictionary,
            config.mode,
        )
    return run_single_dimension(records, config.value_extractor, config.mode, config.tag)


def aggregate_total(config: StatisticsConfig) -> TotalStatisticsResult:
    """Aggregate the whole record collection of ``config``."""
    with timing_context("aggregate_total", component="aggregator", mode=config.mode.value) as ctx:
        items = _run(config, config.records)
        ctx["records"] = len(config.records)
        ctx["items"] = len(items)
    return TotalStatisticsResult(items=tuple(items))


def aggregate_cycle(config: StatisticsConfig) -> CycleStatisticsResult:
    """Aggregate ``config``'s records per time bucket.

    Raises
    ------
    ConfigurationError
        If ``config`` is not a cyclical configuration
    """
    if config.kind is not StatisticsKind.CYCLE:
        raise ConfigurationError("aggregate_cycle requires a cyclical statistics configuration")

    with timing_context(
        "aggregate_cycle",
        component="aggregator",
        mode=config.mode.value,
        unit=config.unit.code,
    ) as ctx:
        buckets = []
        for interval in iter_segments(config.begin, config.end, config.unit, config.truncate_subsecond):
            members = [
                record
                for record in config.records
                if matches_bucket(record, interval, config.time_extractors, config.policy)
            ]
            buckets.append(CycleBucket(interval.key, interval.label, tuple(_run(config, members))))
        ctx["records"] = len(config.records)
        ctx["buckets"] = len(buckets)

    logger.info(
        f"Aggregated {len(config.records)} records into {len(buckets)} {config.unit.code} buckets",
        unit=config.unit.code,
        buckets=len(buckets),
    )
    return CycleStatisticsResult(buckets=tuple(buckets))


def merge(a: StatisticsResult, b: StatisticsResult) -> StatisticsResult:
    """Merge two results of the same kind; see :func:`calstat.rollups.results.merge`."""
    return merge_results(a, b)
