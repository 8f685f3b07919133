"""Command line interface for ledgerlens."""

from .__main__ import cli, main
from .cli_common import CLIContext, ExitCode

__all__ = ["CLIContext", "ExitCode", "cli", "main"]
