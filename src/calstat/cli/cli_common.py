"""Common CLI utilities: JSON output envelope, stable exit codes and error mapping."""

from __future__ import annotations

import functools
import json
import traceback
import uuid
from enum import IntEnum
from typing import Any, Callable

import click

from ..core.errors import ConfigurationError, UnsupportedUnitError
from ..observability.loguru_config import get_logger

__all__ = [
    "CLIContext",
    "ExitCode",
    "cli_command",
    "exit_code_for",
    "handle_cli_error",
    "handle_cli_success",
]

logger = get_logger("cli")


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0  # Successful execution
    VALUE_ERROR = 2  # Bad value or arithmetic error
    UNSUPPORTED_UNIT = 3  # Unknown time unit
    IO_ERROR = 5  # Record or job file cannot be read
    CONFIG_ERROR = 6  # Invalid settings, job file or statistics configuration
    UNKNOWN_ERROR = 7  # Unknown/unexpected error


class CLIContext:
    """Context for CLI execution with JSON output and a trace ID."""

    def __init__(
        self,
        json_output: bool = False,
        trace_id: str | None = None,
        verbose: bool = False,
    ) -> None:
        self.json_output = json_output
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"
        self.verbose = verbose

    def output(
        self,
        data: Any,
        status: str = "success",
        error: str | None = None,
        meta: dict[str, Any] | None = None,
        formatter: Callable[[Any], list[str]] | None = None,
    ) -> None:
        """Output result in the selected format.

        Parameters
        ----------
        data
            Result data (JSON serializable)
        status
            "success" or "error"
        error
            Error message if status is error
        meta
            Additional metadata
        formatter
            Renders ``data`` as lines for human-readable output
        """
        if self.json_output:
            result: dict[str, Any] = {"status": status, "trace_id": self.trace_id}
            if error:
                result["error"] = error
            else:
                result["data"] = data
            if meta:
                result["meta"] = meta
            click.echo(json.dumps(result, ensure_ascii=False, indent=2))
            return

        if status == "error":
            click.echo(f"Error: {error}", err=True)
        elif formatter is not None:
            for line in formatter(data):
                click.echo(line)
        elif isinstance(data, dict):
            for key, value in data.items():
                click.echo(f"{key}: {value}")
        elif isinstance(data, list):
            for item in data:
                click.echo(f"  - {item}")
        else:
            click.echo(data)


def cli_command(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to add common CLI options to commands.

    Adds ``--json``, ``--trace-id`` and ``--verbose`` and injects a
    :class:`CLIContext` as the first argument.
    """

    @click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
    @click.option("--trace-id", type=str, help="Trace ID for correlation")
    @click.option("--verbose", "-v", is_flag=True, help="Verbose output")
    @functools.wraps(func)
    def wrapper(json_output: bool, trace_id: str | None, verbose: bool, *args: Any, **kwargs: Any) -> Any:
        ctx = CLIContext(json_output=json_output, trace_id=trace_id, verbose=verbose)
        return func(ctx, *args, **kwargs)

    return wrapper


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map an exception to its stable exit code."""
    if isinstance(exc, UnsupportedUnitError):
        return ExitCode.UNSUPPORTED_UNIT
    if isinstance(exc, ConfigurationError):
        return ExitCode.CONFIG_ERROR
    if isinstance(exc, OSError):
        return ExitCode.IO_ERROR
    if isinstance(exc, (ArithmeticError, ValueError)):
        return ExitCode.VALUE_ERROR
    return ExitCode.UNKNOWN_ERROR


def handle_cli_error(ctx: CLIContext, exc: Exception, cmd: str) -> int:
    """Report ``exc`` and return the matching exit code."""
    exit_code = exit_code_for(exc)
    error_msg = str(exc)

    logger.bind(trace_id=ctx.trace_id).debug(
        f"{cmd} failed: {error_msg}",
        command=cmd,
        error_type=type(exc).__name__,
        exit_code=int(exit_code),
    )

    meta: dict[str, Any] = {"exit_code": int(exit_code), "error_type": type(exc).__name__}
    if ctx.verbose and ctx.json_output:
        meta["traceback"] = traceback.format_exc()

    ctx.output(None, status="error", error=error_msg, meta=meta)

    if ctx.verbose and not ctx.json_output:
        click.echo("\nTraceback:", err=True)
        click.echo(traceback.format_exc(), err=True)

    return int(exit_code)


def handle_cli_success(
    ctx: CLIContext,
    data: Any,
    meta: dict[str, Any] | None = None,
    formatter: Callable[[Any], list[str]] | None = None,
) -> int:
    """Output ``data`` and return the success code."""
    ctx.output(data, status="success", meta=meta, formatter=formatter)
    return int(ExitCode.SUCCESS)
