"""Loguru configuration for ledgerlens.

Engine modules log through component-bound loggers (``query``, ``rollup``,
``cli``). Nothing is configured at import time: an application calls
``configure_loguru`` once, otherwise loguru's default stderr sink applies.
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
    "configure_loguru",
    "get_logger",
    "log_timing",
    "timing_context",
]

F = TypeVar("F", bound=Callable[..., Any])

COMPONENTS = ("query", "rollup", "cli")


def configure_loguru(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "50 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> None:
    """Configure loguru sinks.

    Parameters
    ----------
    log_dir
        Directory for JSON log files (None = console only)
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    rotation
        Log rotation policy (e.g., "50 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days")
    enable_console
        Enable stderr output

    Example
    -------
    >>> from ledgerlens.observability.loguru_config import configure_loguru
    >>> configure_loguru(level="DEBUG")
    """
    logger.remove()
    logger.configure(extra={"component": "ledgerlens"})

    if enable_console:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<level>{message}</level>",
            level=level,
            colorize=True,
        )

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_dir / "ledgerlens.jsonl",
            format="{message}",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=True,
        )

        # Timing records get their own file
        logger.add(
            log_dir / "timing.jsonl",
            format="{message}",
            level="DEBUG",
            rotation=rotation,
            retention=retention,
            serialize=True,
            filter=lambda record: record["extra"].get("timing", False),
        )

    logger.debug("Loguru configured", level=level, log_dir=str(log_dir) if log_dir else None)


def get_logger(component: str = "ledgerlens") -> Any:
    """Get a loguru logger bound to a component.

    Parameters
    ----------
    component
        Component name (query, rollup, cli)
    """
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "ledgerlens",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Time a block and log its duration at DEBUG.

    The yielded dict can be updated with result data to log alongside.

    Example
    -------
    >>> with timing_context("run_query", component="query") as ctx:
    ...     ctx["rows"] = 10
    """
    start_ns = time.perf_counter_ns()
    context: dict[str, Any] = dict(metadata)

    try:
        yield context
    finally:
        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        logger.bind(component=component, timing=True, operation=operation).debug(
            f"{operation} took {duration_ms:.3f} ms",
            duration_ms=duration_ms,
            **context,
        )


def log_timing(component: str = "ledgerlens") -> Callable[[F], F]:
    """Decorator form of :func:`timing_context`."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with timing_context(f"{func.__module__}.{func.__name__}", component=component):
                return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
