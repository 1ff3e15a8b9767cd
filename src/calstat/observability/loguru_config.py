"""Loguru configuration and timing helpers.

This module provides centralized loguru configuration with:
- Console output for interactive runs
- Optional structured JSON log files
- Context managers and decorators for timing aggregation calls
"""

from __future__ import annotations

import functools
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "COMPONENTS",
    "configure_logging",
    "get_logger",
    "log_timing",
    "timing_context",
]

F = TypeVar("F", bound=Callable[..., Any])

# Components that get their own log file when a log directory is configured
COMPONENTS = ("segmenter", "aggregator", "cli")


def configure_logging(
    *,
    level: str = "WARNING",
    log_dir: Path | None = None,
    enable_console: bool = True,
    serialize: bool = False,
    rotation: str = "50 MB",
    retention: str = "7 days",
) -> None:
    """Configure loguru sinks.

    Parameters
    ----------
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_dir
        Directory for JSONL log files; no files are written when ``None``
    enable_console
        Write records to stderr
    serialize
        Emit console records as JSON instead of the colored text format
    rotation
        Log rotation policy for files (e.g., "50 MB", "1 day")
    retention
        Log retention policy for files (e.g., "7 days")

    Example
    -------
    >>> from calstat.observability import configure_logging
    >>> configure_logging(level="DEBUG", log_dir=Path("logs"))
    """
    logger.remove()

    if enable_console:
        if serialize:
            logger.add(sys.stderr, level=level, serialize=True)
        else:
            logger.add(
                sys.stderr,
                format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[component]}</cyan> | "
                "<level>{message}</level>",
                level=level,
                colorize=True,
                filter=lambda record: "component" in record["extra"],
            )

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_dir / "calstat.jsonl",
            format="{message}",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=True,
        )

        logger.add(
            log_dir / "timing.jsonl",
            format="{message}",
            level="DEBUG",
            rotation=rotation,
            retention=retention,
            serialize=True,
            filter=lambda record: record["extra"].get("timing", False),
        )

        for component in COMPONENTS:
            logger.add(
                log_dir / f"{component}.jsonl",
                format="{message}",
                level=level,
                rotation=rotation,
                retention=retention,
                serialize=True,
                filter=lambda record, comp=component: record["extra"].get("component") == comp,
            )

    get_logger("cli").debug("Logging configured", level=level, log_dir=str(log_dir) if log_dir else None)


def get_logger(component: str = "calstat") -> Any:
    """Get logger instance bound to a component.

    Parameters
    ----------
    component
        Component name (segmenter, aggregator, cli)

    Returns
    -------
    Logger
        Loguru logger bound to component
    """
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "calstat",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Time a block and log START/END records.

    Parameters
    ----------
    operation
        Name of the operation being timed
    component
        Component name for filtering logs
    **metadata
        Additional fields attached to both records

    Yields
    ------
    dict
        Context dictionary; keys added inside the block are logged with END

    Example
    -------
    >>> with timing_context("aggregate_cycle", component="aggregator") as ctx:
    ...     result = aggregate_cycle(config)
    ...     ctx["buckets"] = len(result.buckets)
    """
    start_ns = time.perf_counter_ns()
    context: dict[str, Any] = {"operation": operation, "component": component, **metadata}
    bound = logger.bind(component=component, timing=True, operation=operation)

    bound.debug(f"START: {operation}", phase="start", **metadata)

    try:
        yield context
    finally:
        duration_ns = time.perf_counter_ns() - start_ns
        bound.debug(
            f"END: {operation}",
            phase="end",
            duration_ms=duration_ns / 1_000_000,
            duration_ns=duration_ns,
            **{k: v for k, v in context.items() if k not in ("operation", "component")},
        )


def log_timing(component: str = "calstat") -> Callable[[F], F]:
    """Decorator that wraps a function call in :func:`timing_context`.

    Example
    -------
    >>> @log_timing(component="segmenter")
    ... def segment(begin, end, unit):
    ...     ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with timing_context(f"{func.__module__}.{func.__name__}", component=component):
                return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
