"""Common CLI utilities: JSON output, stable exit codes and record loading."""

from __future__ import annotations

import functools
import json
import traceback
import uuid
from enum import IntEnum
from pathlib import Path
from typing import Any

import click
import yaml

from ..config.settings import ConfigError
from ..observability.loguru_config import get_logger

log = get_logger("cli")


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0  # Successful execution
    VALIDATION_ERROR = 2  # Malformed input file or arguments
    IO_ERROR = 5  # File missing or unreadable
    CONFIG_ERROR = 6  # Configuration error
    UNKNOWN_ERROR = 7  # Unknown/unexpected error


class InputError(ValueError):
    """Raised when a records file does not have the expected shape."""


def _json_default(value: Any) -> Any:
    # YAML loads dates as date/datetime objects
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def to_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2, default=_json_default)


class CLIContext:
    """Context for CLI execution with JSON output and trace ID."""

    def __init__(
        self,
        json_output: bool = False,
        trace_id: str | None = None,
        verbose: bool = False,
    ):
        """Initialize CLI context.

        Args:
            json_output: Enable JSON output mode
            trace_id: Trace ID for correlation
            verbose: Verbose output
        """
        self.json_output = json_output
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"
        self.verbose = verbose

    def output(
        self, data: Any, status: str = "success", error: str | None = None, meta: dict[str, Any] | None = None
    ) -> None:
        """Output result in appropriate format.

        Args:
            data: Result data
            status: Status ("success", "error")
            error: Error message if status is error
            meta: Additional metadata
        """
        if self.json_output:
            result: dict[str, Any] = {"status": status, "trace_id": self.trace_id}

            if error:
                result["error"] = error
            else:
                result["data"] = data

            if meta:
                result["meta"] = meta

            click.echo(to_json(result))
            return

        if status == "error":
            click.echo(f"❌ {error}", err=True)
        elif isinstance(data, str):
            click.echo(data)
        else:
            click.echo(to_json(data))


def cli_command(func):
    """Decorator adding --json, --trace-id and --verbose to a command."""

    @click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
    @click.option("--trace-id", type=str, help="Trace ID for correlation")
    @click.option("--verbose", "-v", is_flag=True, help="Verbose output")
    @functools.wraps(func)
    def wrapper(json_output: bool, trace_id: str | None, verbose: bool, *args: Any, **kwargs: Any) -> Any:
        ctx = CLIContext(json_output=json_output, trace_id=trace_id, verbose=verbose)
        return func(ctx, *args, **kwargs)

    return wrapper


def handle_cli_error(ctx: CLIContext, exc: Exception, cmd: str) -> int:
    """Report an error and return the matching exit code."""
    if isinstance(exc, ConfigError):
        exit_code = ExitCode.CONFIG_ERROR
    elif isinstance(exc, (InputError, ValueError, yaml.YAMLError)):
        exit_code = ExitCode.VALIDATION_ERROR
    elif isinstance(exc, OSError):
        exit_code = ExitCode.IO_ERROR
    else:
        exit_code = ExitCode.UNKNOWN_ERROR

    log.bind(trace_id=ctx.trace_id).error(
        "Command failed", cmd=cmd, error=str(exc), error_type=type(exc).__name__, exit_code=int(exit_code)
    )

    ctx.output(None, status="error", error=str(exc), meta={"exit_code": int(exit_code)})

    if ctx.verbose and not ctx.json_output:
        click.echo("\nTraceback:", err=True)
        click.echo(traceback.format_exc(), err=True)

    return int(exit_code)


def handle_cli_success(ctx: CLIContext, data: Any, cmd: str, meta: dict[str, Any] | None = None) -> int:
    """Output a successful result and return the success code."""
    log.bind(trace_id=ctx.trace_id).debug("Command succeeded", cmd=cmd)
    ctx.output(data, status="success", meta=meta)
    return int(ExitCode.SUCCESS)


def load_document(path: Path) -> Any:
    """Load a JSON or YAML document (YAML is a superset of JSON)."""
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def load_records(path: Path) -> list[Any]:
    """Load a list of records: a top-level list or ``{"records": [...]}``.

    Raises
    ------
    InputError
        If the document holds no record list
    """
    document = load_document(path)

    if isinstance(document, dict) and "records" in document:
        document = document["records"]

    if not isinstance(document, list):
        raise InputError(f"{path}: expected a list of records or a 'records' key")

    return document


def load_collections(path: Path) -> dict[str, list[Any]]:
    """Load named collections: a mapping of collection name to record list.

    Raises
    ------
    InputError
        If the document is not a mapping of lists
    """
    document = load_document(path)

    if not isinstance(document, dict) or not document:
        raise InputError(f"{path}: expected a mapping of collection name to records")

    for name, records in document.items():
        if not isinstance(records, list):
            raise InputError(f"{path}: collection '{name}' is not a list")

    return {str(name): records for name, records in document.items()}
