#!/usr/bin/env python3
"""Command line entry point for calstat."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import click

from ..config.jobs import parse_timestamp, run_job
from ..config.settings import get_settings, load_settings
from ..core import calendar
from ..core.errors import CalstatError
from ..core.time_units import TimeUnit
from ..observability.loguru_config import configure_logging
from ..rollups.results import CycleStatisticsResult
from ..rollups.segmenter import segment
from .cli_common import CLIContext, cli_command, exit_code_for, handle_cli_error, handle_cli_success

__all__ = ["cli", "main"]

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  calstat units                                   # List time units
  calstat segment -u month --begin 2024-01-15 --end 2024-03-10
  calstat run jobs/orders.yaml --json             # Run a job file
  calstat period -u quarter --offset -1           # Previous and current quarter
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="calstat - calendar bucketing and statistics",
    epilog=EPILOG,
)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: .env in the current directory)",
)
def cli(env_file: Path | None) -> None:
    """Root command: load settings and configure logging."""
    settings = load_settings(env_file) if env_file else get_settings()
    configure_logging(level=settings.log_level, log_dir=settings.log_dir, serialize=settings.log_json)


def _apply_verbosity(ctx: CLIContext) -> None:
    if ctx.verbose:
        settings = get_settings()
        configure_logging(level="DEBUG", log_dir=settings.log_dir, serialize=settings.log_json)


def _resolve_unit(unit: str | None) -> TimeUnit:
    if unit is None:
        return get_settings().default_unit
    return TimeUnit.coerce(unit)


def _format_intervals(data: list[dict[str, Any]]) -> list[str]:
    return [f"{item['key']}\t{item['label']}\t{item['begin']} .. {item['end']}" for item in data]


def _format_items(items: list[dict[str, str]], indent: str = "") -> list[str]:
    return [f"{indent}{item['tagName']} ({item['tagCode']}): {item['value']}" for item in items]


def _format_result(data: Any) -> list[str]:
    if isinstance(data, dict):
        return _format_items(data["items"])
    lines = []
    for bucket in data:
        lines.append(f"{bucket['key']}  {bucket['label']}")
        lines.extend(_format_items(bucket["items"], indent="  "))
    return lines


@cli.command("units")
@cli_command
def units_command(ctx: CLIContext) -> int:
    """List supported time units."""
    data = [{"code": unit.code, "name": unit.name} for unit in TimeUnit]
    return handle_cli_success(
        ctx, data, formatter=lambda rows: [f"{row['code']:<12} {row['name']}" for row in rows]
    )


@cli.command("segment")
@click.option("--unit", "-u", type=str, default=None, help="Time unit code (default: CALSTAT_DEFAULT_UNIT)")
@click.option("--begin", "-b", required=True, help="Range start (ISO-8601)")
@click.option("--end", "-e", required=True, help="Range end (ISO-8601; a date means end of day)")
@click.option("--truncate/--no-truncate", default=None, help="End buckets at whole seconds")
@cli_command
def segment_command(ctx: CLIContext, unit: str | None, begin: str, end: str, truncate: bool | None) -> int:
    """Split a time range into calendar buckets."""
    _apply_verbosity(ctx)
    try:
        time_unit = _resolve_unit(unit)
        if truncate is None:
            truncate = get_settings().truncate_subsecond
        intervals = segment(parse_timestamp(begin), parse_timestamp(end, end=True), time_unit, truncate)
        data = [interval.to_dict() for interval in intervals]
        return handle_cli_success(
            ctx,
            data,
            meta={"unit": time_unit.code, "buckets": len(data)},
            formatter=_format_intervals,
        )
    except Exception as exc:
        return handle_cli_error(ctx, exc, "segment")


@cli.command("run")
@click.argument("job", type=click.Path(dir_okay=False, path_type=Path))
@cli_command
def run_command(ctx: CLIContext, job: Path) -> int:
    """Run a YAML job file and print its statistics."""
    _apply_verbosity(ctx)
    try:
        result = run_job(job)
        kind = "cycle" if isinstance(result, CycleStatisticsResult) else "total"
        return handle_cli_success(
            ctx,
            result.to_dict(),
            meta={"job": str(job), "kind": kind},
            formatter=_format_result,
        )
    except Exception as exc:
        return handle_cli_error(ctx, exc, "run")


@cli.command("period")
@click.option("--unit", "-u", type=str, default=None, help="Time unit code (default: CALSTAT_DEFAULT_UNIT)")
@click.option("--offset", "-o", "amount", type=int, default=0, help="Units into the past (<0) or future (>0)")
@click.option("--benchmark", type=str, default=None, help="Reference timestamp (default: now)")
@cli_command
def period_command(ctx: CLIContext, unit: str | None, amount: int, benchmark: str | None) -> int:
    """Show the range spanning --offset units around a benchmark."""
    _apply_verbosity(ctx)
    try:
        time_unit = _resolve_unit(unit)
        reference = parse_timestamp(benchmark) if benchmark else datetime.now()
        begin, end = calendar.generate_time_period(time_unit, amount, reference)
        data = {"unit": time_unit.code, "begin": begin.isoformat(), "end": end.isoformat()}
        return handle_cli_success(ctx, data)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "period")


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    if args is None:
        args = sys.argv[1:]

    try:
        return cli.main(args=list(args), prog_name="calstat", standalone_mode=False) or 0
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except CalstatError as exc:
        click.echo(f"Error: {exc}", err=True)
        return int(exit_code_for(exc))
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 0


if __name__ == "__main__":
    sys.exit(main())
