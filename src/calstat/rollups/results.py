"""Immutable statistics results and their JSON shapes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

__all__ = [
    "CycleBucket",
    "CycleStatisticsResult",
    "ItemDetail",
    "StatisticsResult",
    "TotalStatisticsResult",
    "merge",
]


@dataclass(frozen=True)
class ItemDetail:
    """One aggregated value with its tag."""

    tag_code: str
    tag_name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"tagCode": self.tag_code, "tagName": self.tag_name, "value": self.value}


@dataclass(frozen=True)
class CycleBucket:
    """Items of one time bucket."""

    key: str
    label: str
    items: tuple[ItemDetail, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class TotalStatisticsResult:
    """Items aggregated over the whole record collection."""

    items: tuple[ItemDetail, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"items": [item.to_dict() for item in self.items]}

    def merge(self, other: TotalStatisticsResult) -> TotalStatisticsResult:
        """Concatenate the items of ``self`` and ``other``."""
        if not isinstance(other, TotalStatisticsResult):
            raise TypeError(f"Cannot merge TotalStatisticsResult with {type(other).__name__}")
        return TotalStatisticsResult(items=self.items + other.items)


@dataclass(frozen=True)
class CycleStatisticsResult:
    """Ordered per-bucket items."""

    buckets: tuple[CycleBucket, ...] = ()

    def to_dict(self) -> list[dict[str, Any]]:
        return [bucket.to_dict() for bucket in self.buckets]

    def keys(self) -> list[str]:
        return [bucket.key for bucket in self.buckets]

    def get(self, key: str) -> CycleBucket | None:
        for bucket in self.buckets:
            if bucket.key == key:
                return bucket
        return None

    def merge(self, other: CycleStatisticsResult) -> CycleStatisticsResult:
        """Union buckets by key.

        Buckets of ``self`` keep their order and gain the items of the
        same-key bucket in ``other`` (duplicate tags are kept). Buckets only
        present in ``other`` follow, in ``other``'s order.
        """
        if not isinstance(other, CycleStatisticsResult):
            raise TypeError(f"Cannot merge CycleStatisticsResult with {type(other).__name__}")

        extra_items: dict[str, list[ItemDetail]] = {}
        for bucket in other.buckets:
            extra_items.setdefault(bucket.key, []).extend(bucket.items)

        merged = []
        seen = set()
        for bucket in self.buckets:
            seen.add(bucket.key)
            merged.append(
                CycleBucket(bucket.key, bucket.label, bucket.items + tuple(extra_items.get(bucket.key, ())))
            )
        for bucket in other.buckets:
            if bucket.key not in seen:
                seen.add(bucket.key)
                merged.append(CycleBucket(bucket.key, bucket.label, tuple(extra_items[bucket.key])))
        return CycleStatisticsResult(buckets=tuple(merged))


StatisticsResult = Union[TotalStatisticsResult, CycleStatisticsResult]


def merge(a: StatisticsResult, b: StatisticsResult) -> StatisticsResult:
    """Merge two results of the same kind.

    Raises
    ------
    TypeError
        If the results are of different kinds
    """
    if type(a) is not type(b):
        raise TypeError(f"Cannot merge {type(a).__name__} with {type(b).__name__}")
    return a.merge(b)
