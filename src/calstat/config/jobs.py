"""Job files: YAML descriptions of one statistics run.

A job names a record file, the field to aggregate, the aggregation mode, how
the result is tagged and optionally the bucketing cycle::

    records: orders.csv
    value: amount
    mode: sum
    dimension:
      field: channel
      tags: {web: Web, store: Store}
    cycle:
      unit: month
      begin: 2024-01-01
      end: 2024-03-31
      time_fields: [created_at]
      policy: and
      truncate: false

Relative record paths are resolved against the job file's directory.
"""

from __future__ import annotations

import copy
import csv
import json
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Callable

import yaml
from jsonschema import Draft7Validator

from ..core.errors import ConfigurationError
from ..core.time_units import TimeUnit
from ..observability.loguru_config import get_logger
from ..rollups.aggregator import aggregate_cycle, aggregate_total
from ..rollups.config import AggregationMode, SingleDimension, StatisticsConfig
from ..rollups.results import StatisticsResult

__all__ = [
    "JOB_SCHEMA",
    "Job",
    "build_config",
    "get_job_schema",
    "load_job",
    "load_records",
    "parse_timestamp",
    "run_job",
    "validate_job",
]

logger = get_logger("cli")

RECORD_SUFFIXES = (".json", ".jsonl", ".csv")

JOB_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["records", "value", "mode"],
    "additionalProperties": False,
    "oneOf": [
        {"required": ["tag"], "not": {"required": ["dimension"]}},
        {"required": ["dimension"], "not": {"required": ["tag"]}},
    ],
    "properties": {
        "records": {
            "type": "string",
            "pattern": "\\.(json|jsonl|csv)$",
            "description": "Record file (.json array, .jsonl or .csv).",
        },
        "value": {
            "type": "string",
            "minLength": 1,
            "description": "Field holding the aggregated value.",
        },
        "mode": {
            "type": "string",
            "enum": [mode.value for mode in AggregationMode],
        },
        "tag": {
            "type": "object",
            "required": ["code", "name"],
            "additionalProperties": False,
            "properties": {
                "code": {"type": "string"},
                "name": {"type": "string"},
            },
        },
        "dimension": {
            "type": "object",
            "required": ["field", "tags"],
            "additionalProperties": False,
            "properties": {
                "field": {"type": "string", "minLength": 1},
                "tags": {
                    "type": "object",
                    "minProperties": 1,
                    "additionalProperties": {"type": "string"},
                    "description": "Dimension key -> display name, in output order.",
                },
            },
        },
        "cycle": {
            "type": "object",
            "required": ["unit", "begin", "end", "time_fields"],
            "additionalProperties": False,
            "properties": {
                "unit": {"type": "string", "enum": [unit.code for unit in TimeUnit]},
                # YAML may already load these as dates
                "begin": {},
                "end": {},
                "time_fields": {
                    "type": "array",
                    "items": {"type": "string", "minLength": 1},
                    "minItems": 1,
                },
                "policy": {"type": "string", "enum": ["and", "or"]},
                "truncate": {"type": "boolean"},
            },
        },
    },
}

_validator = Draft7Validator(JOB_SCHEMA)


@dataclass(frozen=True)
class Job:
    """Validated job file contents."""

    path: Path
    data: dict[str, Any]

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    @property
    def is_cycle(self) -> bool:
        return "cycle" in self.data


def get_job_schema() -> dict[str, Any]:
    """Return a deep copy of :data:`JOB_SCHEMA`."""
    return copy.deepcopy(JOB_SCHEMA)


def validate_job(data: Any) -> list[str]:
    """Return human readable schema violations of ``data``."""
    collected = []
    for error in sorted(_validator.iter_errors(data), key=lambda err: list(map(str, err.absolute_path))):
        location = " -> ".join(str(part) for part in error.absolute_path) or "<root>"
        collected.append(f"[{error.validator}] {error.message} (path: {location})")
    return collected


def load_job(path: str | Path) -> Job:
    """Read and validate a job file.

    Raises
    ------
    OSError
        If the file cannot be read
    ConfigurationError
        If the file is not valid YAML or violates :data:`JOB_SCHEMA`
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    errors = validate_job(data)
    if errors:
        raise ConfigurationError(f"Invalid job file {path}:\n  " + "\n  ".join(errors))

    logger.debug(f"Loaded job {path}", job=str(path))
    return Job(path=path, data=data)


def parse_timestamp(value: Any, *, end: bool = False) -> datetime | None:
    """Interpret ``value`` as a naive timestamp.

    Accepts ``datetime``, ``date`` and ISO-8601 strings. Date-only values
    mean the start of the day, or its last instant when ``end`` is set.
    Empty values give ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end else time.min)
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), time.max if end else time.min)
        return datetime.fromisoformat(text)
    raise ValueError(f"Cannot interpret {value!r} as a timestamp")


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """Load records from a ``.json`` array, ``.jsonl`` or ``.csv`` file."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in RECORD_SUFFIXES:
        raise ConfigurationError(f"Unsupported record file type: {path.suffix!r}")

    with open(path, encoding="utf-8", newline="") as f:
        if suffix == ".csv":
            records = list(csv.DictReader(f))
        elif suffix == ".jsonl":
            records = [json.loads(line) for line in f if line.strip()]
        else:
            records = json.load(f)

    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ConfigurationError(f"{path} must contain a list of objects")
    return records


def _field(name: str) -> Callable[[dict[str, Any]], Any]:
    return lambda record: record.get(name)


def _dimension_field(name: str) -> Callable[[dict[str, Any]], str | None]:
    def extract(record: dict[str, Any]) -> str | None:
        value = record.get(name)
        return None if value is None else str(value)

    return extract


def _time_field(name: str) -> Callable[[dict[str, Any]], datetime | None]:
    return lambda record: parse_timestamp(record.get(name))


def build_config(job: Job, records: list[dict[str, Any]] | None = None) -> StatisticsConfig:
    """Translate a job into a :class:`StatisticsConfig`.

    Parameters
    ----------
    job
        Validated job
    records
        Records to use instead of reading the job's record file
    """
    data = job.data
    if records is None:
        records = load_records(job.base_dir / data["records"])

    common: dict[str, Any] = {}
    if "tag" in data:
        common["tag"] = SingleDimension(str(data["tag"]["code"]), str(data["tag"]["name"]))
    else:
        dimension = data["dimension"]
        common["dimension_extractor"] = _dimension_field(dimension["field"])
        common["tag_dictionary"] = {str(key): name for key, name in dimension["tags"].items()}

    if not job.is_cycle:
        return StatisticsConfig.total(records, _field(data["value"]), data["mode"], **common)

    cycle = data["cycle"]
    try:
        begin = parse_timestamp(cycle["begin"])
        end = parse_timestamp(cycle["end"], end=True)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid cycle range: {exc}") from exc

    return StatisticsConfig.cycle(
        records,
        _field(data["value"]),
        data["mode"],
        unit=cycle["unit"],
        begin=begin,
        end=end,
        time_extractors=[_time_field(name) for name in cycle["time_fields"]],
        policy=cycle.get("policy", "and"),
        truncate_subsecond=cycle.get("truncate", False),
        **common,
    )


def run_job(path: str | Path) -> StatisticsResult:
    """Load, build and run a job file."""
    job = load_job(path)
    config = build_config(job)
    if job.is_cycle:
        return aggregate_cycle(config)
    return aggregate_total(config)
