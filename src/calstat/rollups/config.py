"""Statistics configuration.

A :class:`StatisticsConfig` describes one aggregation request: the records,
how to read a value from each record, the aggregation mode, how results are
tagged and, for cyclical statistics, the bucketing range.

Configurations are immutable and validated once, on construction.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from ..core.errors import ConfigurationError
from ..core.time_units import TimeUnit

__all__ = [
    "AggregationMode",
    "MatchPolicy",
    "SingleDimension",
    "StatisticsConfig",
    "StatisticsKind",
]

ValueExtractor = Callable[[Any], Any]
DimensionExtractor = Callable[[Any], Hashable]
TimeExtractor = Callable[[Any], "datetime | None"]


class AggregationMode(Enum):
    """How the values of a group are reduced to one result."""

    SUM = "sum"
    AVG = "avg"
    COUNT = "count"
    DISTINCT_COUNT = "distinctCount"

    @classmethod
    def coerce(cls, value: AggregationMode | str) -> AggregationMode:
        """Accept a member, its value (``"distinctCount"``) or its name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for mode in cls:
                if value == mode.value or value.strip().upper() == mode.name:
                    return mode
        raise ConfigurationError(f"Unknown aggregation mode: {value!r}")


class MatchPolicy(Enum):
    """How several timestamps of one record are combined when bucketing."""

    AND = "and"
    OR = "or"

    @classmethod
    def coerce(cls, value: MatchPolicy | str) -> MatchPolicy:
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().upper() in cls.__members__:
            return cls.__members__[value.strip().upper()]
        raise ConfigurationError(f"Unknown match policy: {value!r}")


class StatisticsKind(Enum):
    TOTAL = "total"
    CYCLE = "cycle"


@dataclass(frozen=True)
class SingleDimension:
    """Tag attached to the only item of a single-dimensional result."""

    tag_code: str
    tag_name: str


@dataclass(frozen=True)
class StatisticsConfig:
    """Immutable aggregation request.

    Attributes
    ----------
    records : tuple
        Records to aggregate
    value_extractor : Callable
        Reads the aggregated value from a record
    mode : AggregationMode
        Reduction applied to each group
    kind : StatisticsKind
        TOTAL (whole collection) or CYCLE (per time bucket)
    multidimensional : bool
        Group by ``dimension_extractor`` instead of tagging with ``tag``
    tag : SingleDimension | None
        Tag of the single item when not multidimensional
    dimension_extractor : Callable | None
        Reads the dimension key from a record
    tag_dictionary : Mapping
        Dimension key -> display name; its order drives output order
    unit : TimeUnit | None
        Bucket granularity (CYCLE)
    begin, end : datetime | None
        Bucketed range (CYCLE)
    time_extractors : tuple
        Read the timestamps matched against each bucket (CYCLE)
    policy : MatchPolicy | None
        Combination of several timestamps (CYCLE)
    truncate_subsecond : bool
        End buckets at whole seconds (CYCLE)

    Raises
    ------
    ConfigurationError
        When a required field is missing or inconsistent with the mode
    """

    records: Sequence[Any]
    value_extractor: ValueExtractor | None
    mode: AggregationMode | None
    kind: StatisticsKind = StatisticsKind.TOTAL
    multidimensional: bool = False
    tag: SingleDimension | None = None
    dimension_extractor: DimensionExtractor | None = None
    tag_dictionary: Mapping[Hashable, str] = field(default_factory=dict)
    unit: TimeUnit | None = None
    begin: datetime | None = None
    end: datetime | None = None
    time_extractors: Sequence[TimeExtractor] = ()
    policy: MatchPolicy | None = None
    truncate_subsecond: bool = False

    def __post_init__(self) -> None:
        if self.records is None:
            raise ConfigurationError("records are required")
        if self.value_extractor is None:
            raise ConfigurationError("value_extractor is required")
        if self.mode is None:
            raise ConfigurationError("mode is required")

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "records", tuple(self.records))
        object.__setattr__(self, "mode", AggregationMode.coerce(self.mode))
        object.__setattr__(self, "tag_dictionary", MappingProxyType(dict(self.tag_dictionary or {})))
        object.__setattr__(self, "time_extractors", tuple(self.time_extractors or ()))

        if self.multidimensional:
            if self.dimension_extractor is None:
                raise ConfigurationError("dimension_extractor is required for multidimensional statistics")
            if not self.tag_dictionary:
                raise ConfigurationError("tag_dictionary must not be empty for multidimensional statistics")
        elif self.tag is None:
            raise ConfigurationError("tag is required for single-dimensional statistics")

        if self.kind is StatisticsKind.CYCLE:
            self._validate_cycle()

    def _validate_cycle(self) -> None:
        if self.unit is None:
            raise ConfigurationError("unit is required for cyclical statistics")
        object.__setattr__(self, "unit", TimeUnit.coerce(self.unit))
        if self.begin is None or self.end is None:
            raise ConfigurationError("begin and end are required for cyclical statistics")
        if not self.time_extractors:
            raise ConfigurationError("at least one time extractor is required for cyclical statistics")
        if self.policy is None:
            raise ConfigurationError("policy is required for cyclical statistics")
        object.__setattr__(self, "policy", MatchPolicy.coerce(self.policy))

    @classmethod
    def total(
        cls,
        records: Iterable[Any],
        value_extractor: ValueExtractor,
        mode: AggregationMode | str,
        *,
        tag: SingleDimension | None = None,
        dimension_extractor: DimensionExtractor | None = None,
        tag_dictionary: Mapping[Hashable, str] | None = None,
    ) -> StatisticsConfig:
        """Build a whole-collection configuration.

        Passing ``dimension_extractor`` makes the configuration
        multidimensional.
        """
        return cls(
            records=tuple(records),
            value_extractor=value_extractor,
            mode=mode,
            kind=StatisticsKind.TOTAL,
            multidimensional=dimension_extractor is not None,
            tag=tag,
            dimension_extractor=dimension_extractor,
            tag_dictionary=tag_dictionary or {},
        )

    @classmethod
    def cycle(
        cls,
        records: Iterable[Any],
        value_extractor: ValueExtractor,
        mode: AggregationMode | str,
        *,
        unit: TimeUnit | str,
        begin: datetime,
        end: datetime,
        time_extractors: Sequence[TimeExtractor] | TimeExtractor,
        policy: MatchPolicy | str = MatchPolicy.AND,
        truncate_subsecond: bool = False,
        tag: SingleDimension | None = None,
        dimension_extractor: DimensionExtractor | None = None,
        tag_dictionary: Mapping[Hashable, str] | None = None,
    ) -> StatisticsConfig:
        """Build a per-bucket configuration.

        Parameters
        ----------
        records
            Records to aggregate
        value_extractor
            Reads the aggregated value
        mode
            Aggregation mode
        unit
            Bucket granularity
        begin, end
            Bucketed range
        time_extractors
            One extractor or a sequence of them
        policy
            AND (all timestamps inside the bucket) or OR (any)
        truncate_subsecond
            End buckets at whole seconds
        tag, dimension_extractor, tag_dictionary
            As in :meth:`total`
        """
        if callable(time_extractors):
            time_extractors = (time_extractors,)
        return cls(
            records=tuple(records),
            value_extractor=value_extractor,
            mode=mode,
            kind=StatisticsKind.CYCLE,
            multidimensional=dimension_extractor is not None,
            tag=tag,
            dimension_extractor=dimension_extractor,
            tag_dictionary=tag_dictionary or {},
            unit=unit,
            begin=begin,
            end=end,
            time_extractors=time_extractors,
            policy=policy,
            truncate_subsecond=truncate_subsecond,
        )
