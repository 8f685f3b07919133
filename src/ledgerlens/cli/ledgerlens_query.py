"""CLI command: filter, sort and paginate a records file."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import click

from ..config.settings import Settings, get_settings
from ..core.time import coerce_datetime, resolve_timezone
from ..observability.loguru_config import configure_loguru, get_logger
from ..query import QueryState, normalize_filter, normalize_sort
from .cli_common import CLIContext, InputError, cli_command, handle_cli_error, handle_cli_success, load_records

log = get_logger("cli")


def bootstrap(ctx: CLIContext) -> Settings:
    """Load settings and configure logging for a command run."""
    settings = get_settings()
    configure_loguru(level="DEBUG" if ctx.verbose else settings.log_level, log_dir=settings.log_dir)
    return settings


def parse_now(now: str | None) -> Any:
    """Reference instant from ``--now`` (current time if absent)."""
    if now is None:
        return datetime.now(UTC)
    moment = coerce_datetime(now)
    if moment is None:
        raise InputError(f"--now is not an ISO-8601 date: {now!r}")
    return moment


def parse_where(where: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``field=value`` pairs into discrete selections.

    Repeating a field selects any of its values.
    """
    selections: dict[str, list[str]] = {}
    for item in where:
        field, sep, value = item.partition("=")
        if not sep or not field.strip():
            raise InputError(f"--where expects field=value, got {item!r}")
        selections.setdefault(field.strip(), []).append(value.strip())

    return {field: values[0] if len(values) == 1 else tuple(values) for field, values in selections.items()}


def build_payload(
    search: str | None,
    search_field: tuple[str, ...],
    where: tuple[str, ...],
    range_field: str | None,
    bucket: str | None,
    minimum: str | None,
    maximum: str | None,
    date_field: str | None,
    date_mode: str | None,
    day: str | None,
    month: str | None,
    year: str | None,
    start: str | None,
    end: str | None,
    preset: str | None,
) -> dict[str, Any]:
    """Raw filter payload in the shape ``normalize_filter`` accepts."""
    payload: dict[str, Any] = {
        "search": search or "",
        "search_fields": list(search_field),
        "discrete": parse_where(where),
    }

    if range_field:
        payload["range"] = {"field": range_field, "bucket": bucket, "min": minimum, "max": maximum}
    elif bucket or minimum or maximum:
        raise InputError("--bucket/--min/--max need --range-field")

    if date_mode is None:
        # Infer the mode from whichever control was given
        for mode, value in (("preset", preset), ("day", day), ("month", month), ("year", year)):
            if value:
                date_mode = mode
                break
        else:
            date_mode = "range" if (start or end) else "none"

    if date_mode != "none":
        payload["date"] = {
            "field": date_field,
            "mode": date_mode,
            "day": day,
            "month": month,
            "year": year,
            "start": start,
            "end": end,
            "preset": preset,
        }

    return payload


def render_items(items: list[Any], columns: list[str]) -> list[str]:
    """One line per record, restricted to `columns` for mapping records."""
    lines = []
    for item in items:
        if isinstance(item, dict) and columns:
            lines.append("  ".join(f"{c}={item.get(c, '')}" for c in columns))
        else:
            lines.append(str(item))
    return lines


def render_page(page_data: dict[str, Any], columns: list[str]) -> str:
    """Human-readable page: one line per record plus the page navigator."""
    lines = render_items(page_data["items"], columns)

    if page_data["total_items"]:
        lines.append("")
        lines.append(
            f"Showing {page_data['start_item']}-{page_data['end_item']} of {page_data['total_items']}"
        )
        markers = " ".join(
            f"[{m}]" if m == page_data["page_number"] else str(m) for m in page_data["page_numbers"]
        )
        lines.append(f"Pages: {markers}")
    else:
        lines.append("No records match")

    return "\n".join(lines)


@click.command("query")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--search", "-s", type=str, help="Case-insensitive substring search")
@click.option("--search-field", multiple=True, help="Field searched by --search (repeatable; default: every field)")
@click.option("--where", multiple=True, help="Discrete selection field=value (repeat a field for any-of)")
@click.option("--range-field", type=str, help="Numeric field for --bucket/--min/--max")
@click.option("--bucket", type=str, help="under_1000, 1000_5000, 5000_10000 or over_10000")
@click.option("--min", "minimum", type=str, help="Inclusive lower bound")
@click.option("--max", "maximum", type=str, help="Inclusive upper bound")
@click.option("--date-field", type=str, help="Date field for date filters")
@click.option("--date-mode", type=str, help="none, day, month, year, range or preset (inferred if omitted)")
@click.option("--day", type=str, help="Calendar day (YYYY-MM-DD)")
@click.option("--month", type=str, help="Calendar month (YYYY-MM)")
@click.option("--year", type=str, help="Calendar year (YYYY)")
@click.option("--start", type=str, help="Range start, inclusive")
@click.option("--end", type=str, help="Range end, inclusive (whole day for a date)")
@click.option("--preset", type=str, help="today, this_week, this_month, this_year or last_30_days")
@click.option("--now", type=str, help="Reference instant for presets (ISO-8601)")
@click.option("--tz", type=str, help="Timezone for calendar comparisons")
@click.option("--sort", "sort_keys", multiple=True, help="Sort key [-]field[:string|number|date] (repeatable)")
@click.option("--tie-breaker", type=str, help="Field used to order ties")
@click.option("--page", type=str, default="1", help="Page number")
@click.option("--page-size", type=str, help="Records per page")
@click.option("--all", "show_all", is_flag=True, help="Output the whole view instead of one page")
@click.option("--columns", type=str, help="Comma-separated fields for human output")
@cli_command
def query_command(
    ctx: CLIContext,
    file: Path,
    search: str | None,
    search_field: tuple[str, ...],
    where: tuple[str, ...],
    range_field: str | None,
    bucket: str | None,
    minimum: str | None,
    maximum: str | None,
    date_field: str | None,
    date_mode: str | None,
    day: str | None,
    month: str | None,
    year: str | None,
    start: str | None,
    end: str | None,
    preset: str | None,
    now: str | None,
    tz: str | None,
    sort_keys: tuple[str, ...],
    tie_breaker: str | None,
    page: str,
    page_size: str | None,
    show_all: bool,
    columns: str | None,
) -> int:
    """Filter, sort and paginate the records in FILE (JSON or YAML)."""
    cmd = "query"

    try:
        settings = bootstrap(ctx)
        timezone = tz or settings.default_timezone
        resolve_timezone(timezone)

        records = load_records(file)

        payload = build_payload(
            search, search_field, where, range_field, bucket, minimum, maximum,
            date_field, date_mode, day, month, year, start, end, preset,
        )
        filter_spec = normalize_filter(payload, tz=timezone)
        sort_spec = normalize_sort(list(sort_keys))

        state = QueryState(
            records,
            filter_spec=filter_spec,
            sort_spec=sort_spec,
            page_size=page_size if page_size is not None else settings.page_size,
            tie_breaker=tie_breaker,
            now=parse_now(now),
            max_visible=settings.max_visible_pages,
        )
        state.set_page(page)

        log.info("Query executed", file=str(file), total=len(records), matched=len(state.view))

        meta = {"file": str(file), "total_records": len(records)}
        if show_all:
            if not ctx.json_output:
                text = "\n".join(render_items(state.view, _columns(columns))) or "No records match"
                return handle_cli_success(ctx, text, cmd, meta)
            return handle_cli_success(ctx, {"items": state.view, "total_items": len(state.view)}, cmd, meta)

        page_data = state.page.to_dict()
        if not ctx.json_output:
            return handle_cli_success(ctx, render_page(page_data, _columns(columns)), cmd, meta)
        return handle_cli_success(ctx, page_data, cmd, meta)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd)


def _columns(columns: str | None) -> list[str]:
    return [c.strip() for c in columns.split(",") if c.strip()] if columns else []

