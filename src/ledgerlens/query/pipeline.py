"""Query pipeline: search, filter and sort a collection into a view.

The pipeline is pure. It never mutates the input collection and returns a
new list (the *view*), which is what pagination and exports consume.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Callable

from ..core.accessors import FieldRef, make_accessor
from ..observability.loguru_config import get_logger, log_timing
from ..rollups.time_windows import resolve_preset
from .comparators import Comparator, chain, compare_by, sort_records
from .predicates import (
    date_day_matches,
    date_month_matches,
    date_range_matches,
    date_year_matches,
    discrete_matches,
    is_sentinel,
    numeric_range_matches,
    text_matches,
)
from .specs import DateFilter, FilterSpec, RangeFilter, SortSpec

__all__ = [
    "build_predicate",
    "run_query",
]

log = get_logger("query")

Predicate = Callable[[Any], bool]


def _date_predicate(date_filter: DateFilter, now: Any, week_start_on: int) -> Predicate | None:
    if not date_filter.is_active:
        return None

    if date_filter.field is None:
        log.warning("Date filter has no date field, skipping", mode=date_filter.mode)
        return None

    date_of = make_accessor(date_filter.field)
    tz = date_filter.tz
    mode = date_filter.mode

    if mode == "day":
        target = date_filter.day
        if target is None:
            return None
        return lambda record: date_day_matches(date_of(record), target, tz)

    if mode == "month":
        target = date_filter.month
        if target is None:
            return None
        return lambda record: date_month_matches(date_of(record), target, tz)

    if mode == "year":
        target = date_filter.year
        if target is None:
            return None
        return lambda record: date_year_matches(date_of(record), target, tz)

    if mode == "range":
        start, end = date_filter.start, date_filter.end
        return lambda record: date_range_matches(date_of(record), start, end, tz)

    if mode == "preset":
        if date_filter.preset is None or is_sentinel(date_filter.preset):
            return None
        if now is None:
            log.warning("Date preset needs a reference instant, skipping", preset=date_filter.preset)
            return None
        try:
            bounds = resolve_preset(date_filter.preset, now, tz, week_start_on)
        except ValueError as exc:
            log.warning("Skipping date preset", preset=date_filter.preset, error=str(exc))
            return None
        return lambda record: bounds.contains(date_of(record))

    log.warning("Unknown date mode, skipping", mode=mode)
    return None


def _range_predicate(range_filter: RangeFilter | None) -> Predicate | None:
    if range_filter is None or not range_filter.is_active:
        return None

    value_of = make_accessor(range_filter.field)
    return lambda record: numeric_range_matches(
        value_of(record),
        range_filter.bucket,
        minimum=range_filter.minimum,
        maximum=range_filter.maximum,
    )


def build_predicate(
    filter_spec: FilterSpec,
    *,
    now: Any = None,
    week_start_on: int = 0,
) -> Predicate | None:
    """Compose the clauses of a FilterSpec into one predicate.

    Clauses run in order (search, discrete, range, date) and are combined
    with logical AND. Returns None when every clause is a no-op.
    """
    clauses: list[Predicate] = []

    if filter_spec.search.strip():
        fields = tuple(make_accessor(f) for f in filter_spec.search_fields)
        query = filter_spec.search
        clauses.append(lambda record: text_matches(record, fields, query))

    for key, selected in filter_spec.discrete.items():
        if is_sentinel(selected):
            continue
        value_of = make_accessor(key)
        clauses.append(lambda record, value_of=value_of, selected=selected: discrete_matches(value_of(record), selected))

    range_clause = _range_predicate(filter_spec.range)
    if range_clause is not None:
        clauses.append(range_clause)

    date_clause = _date_predicate(filter_spec.date, now, week_start_on)
    if date_clause is not None:
        clauses.append(date_clause)

    if not clauses:
        return None

    return lambda record: all(clause(record) for clause in clauses)


def _tie_break_comparator(tie_breaker: FieldRef | Comparator | None) -> Comparator | None:
    if tie_breaker is None:
        return None
    if isinstance(tie_breaker, str):
        return compare_by(tie_breaker)
    return tie_breaker


@log_timing("query")
def run_query(
    records: Iterable[Any],
    filter_spec: FilterSpec | None = None,
    sort_spec: SortSpec | None = None,
    *,
    tie_breaker: str | Comparator | None = None,
    now: Any = None,
    week_start_on: int = 0,
) -> list[Any]:
    """Filter and sort a collection into a new list.

    Parameters
    ----------
    records
        Source collection (never mutated)
    filter_spec
        Constraints to apply (None = keep everything)
    sort_spec
        Sort keys (None or empty = keep source order)
    tie_breaker
        Field name or comparator applied after the sort keys, typically a
        stable identifier
    now
        Reference instant for date presets
    week_start_on
        First day of the week for the "this_week" preset (0=Monday)

    Returns
    -------
    list
        The view: matching records in sort order

    Example
    -------
    >>> rows = [{"name": "Alpha", "status": "New"}, {"name": "Beta", "status": "Closed"}]
    >>> run_query(rows, FilterSpec(search="alp", search_fields=("name",)))
    [{'name': 'Alpha', 'status': 'New'}]
    """
    source = list(records)
    if not source:
        return []

    predicate = build_predicate(filter_spec, now=now, week_start_on=week_start_on) if filter_spec else None
    view = [record for record in source if predicate(record)] if predicate else source

    comparators = []
    if sort_spec is not None:
        primary = sort_spec.comparator()
        if primary is not None:
            comparators.append(primary)
    extra = _tie_break_comparator(tie_breaker)
    if extra is not None:
        comparators.append(extra)

    result = sort_records(view, chain(*comparators) if comparators else None)

    log.debug("Query produced view", source=len(source), matched=len(result))
    return result
