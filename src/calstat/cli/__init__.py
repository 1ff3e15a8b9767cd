"""calstat command line interface."""

from .cli_common import CLIContext, ExitCode
from .__main__ import cli, main

__all__ = ["CLIContext", "ExitCode", "cli", "main"]
