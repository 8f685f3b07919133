"""CLI command: time-windowed rollups over named collections."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import click

from ..core.time import resolve_timezone
from ..observability.loguru_config import get_logger
from ..rollups import TIME_WINDOWS, Collection, DerivedMetric, RollupResult, compute_rollups, net_metric
from .cli_common import CLIContext, InputError, cli_command, handle_cli_error, handle_cli_success, load_collections
from .ledgerlens_query import bootstrap, parse_now

log = get_logger("cli")


def parse_collection_fields(specs: tuple[str, ...]) -> dict[str, tuple[str, str]]:
    """Parse ``name=date_field:metric_field`` overrides."""
    fields: dict[str, tuple[str, str]] = {}
    for spec in specs:
        name, sep, rest = spec.partition("=")
        date_field, colon, metric_field = rest.partition(":")
        if not sep or not colon or not name.strip() or not date_field.strip() or not metric_field.strip():
            raise InputError(f"--collection expects name=date_field:metric_field, got {spec!r}")
        fields[name.strip()] = (date_field.strip(), metric_field.strip())
    return fields


def _split_net(rest: str, collection_names: set[str]) -> tuple[str, str] | None:
    splits = [
        (rest[:i].strip(), rest[i + 1 :].strip()) for i, char in enumerate(rest) if char == "-"
    ]
    splits = [(plus, minus) for plus, minus in splits if plus and minus]
    for plus, minus in splits:
        if plus in collection_names and minus in collection_names:
            return plus, minus
    return splits[0] if splits else None


def parse_net(specs: tuple[str, ...], collection_names: Iterable[str] = ()) -> dict[str, DerivedMetric]:
    """Parse ``name=plus-minus`` into net metrics (e.g. ``net=revenue-expense``).

    Collection names may contain hyphens: the split that names two known
    collections wins, otherwise the first hyphen separates the operands.
    """
    names = set(collection_names)
    derived: dict[str, DerivedMetric] = {}
    for spec in specs:
        name, sep, rest = spec.partition("=")
        operands = _split_net(rest, names)
        if not sep or not name.strip() or operands is None:
            raise InputError(f"--net expects name=plus-minus, got {spec!r}")
        derived[name.strip()] = net_metric(*operands)
    return derived


def render_rollups(results: list[RollupResult]) -> str:
    """Human-readable table: one row per window."""
    lines = []
    for result in results:
        if result.bounds is None:
            span = "all time"
        else:
            end = result.bounds.end.isoformat() if result.bounds.end else "..."
            span = f"{result.bounds.start.isoformat()} .. {end}"

        sums = "  ".join(
            f"{name}={total:.2f} ({result.counts[name]})" for name, total in result.per_collection.items()
        )
        derived = "  ".join(f"{name}={value:.2f}" for name, value in result.derived.items())

        line = f"{result.window:<8} [{span}]  {sums}"
        if derived:
            line += f"  | {derived}"
        lines.append(line)
    return "\n".join(lines)


@click.command("rollup")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--window", "windows", multiple=True, help="day, week, month, year or lifetime (repeatable)")
@click.option("--date-field", default="date", show_default=True, help="Default date field")
@click.option("--metric-field", default="amount", show_default=True, help="Default summed field")
@click.option("--collection", "collection_fields", multiple=True, help="Per-collection fields name=date:metric")
@click.option("--net", "net_specs", multiple=True, help="Derived metric name=plus-minus (repeatable)")
@click.option("--now", type=str, help="Reference instant (ISO-8601, default: current time)")
@click.option("--tz", type=str, help="Timezone the calendar is read in")
@click.option("--week-start", type=click.IntRange(0, 6), help="First day of the week (0=Monday)")
@cli_command
def rollup_command(
    ctx: CLIContext,
    file: Path,
    windows: tuple[str, ...],
    date_field: str,
    metric_field: str,
    collection_fields: tuple[str, ...],
    net_specs: tuple[str, ...],
    now: str | None,
    tz: str | None,
    week_start: int | None,
) -> int:
    """Sum the collections in FILE (a mapping of name to records) per time window."""
    cmd = "rollup"

    try:
        settings = bootstrap(ctx)
        timezone = tz or settings.default_timezone
        resolve_timezone(timezone)

        windows = windows or ("day", "month", "year", "lifetime")
        for window in windows:
            if window not in TIME_WINDOWS:
                raise InputError(f"Unknown window type: {window}")

        overrides = parse_collection_fields(collection_fields)

        documents = load_collections(file)
        derived = parse_net(net_specs, documents.keys())
        collections = [
            Collection(name, records, *overrides.get(name, (date_field, metric_field)))
            for name, records in documents.items()
        ]

        results = compute_rollups(
            collections,
            parse_now(now),
            windows,
            derived=derived,
            tz=timezone,
            week_start_on=week_start if week_start is not None else settings.week_start,
        )

        log.info("Rollups computed", file=str(file), windows=list(windows), collections=len(collections))

        meta: dict[str, Any] = {"file": str(file), "timezone": timezone}
        if not ctx.json_output:
            return handle_cli_success(ctx, render_rollups(results), cmd, meta)
        return handle_cli_success(ctx, [r.to_dict() for r in results], cmd, meta)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd)
