"""Observability module for calstat.

Provides logging and timing instrumentation.
"""

from .loguru_config import COMPONENTS, configure_logging, get_logger, log_timing, timing_context

__all__ = [
    "COMPONENTS",
    "configure_logging",
    "get_logger",
    "timing_context",
    "log_timing",
]
