"""Record predicates for search, discrete, numeric range and date filters.

All predicates are total: missing or malformed values never raise. A filter
that is switched off (blank search, sentinel selection, no bounds) matches
every record; an active filter never matches a missing value.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time, timedelta
from typing import Any

from ..core.accessors import FieldRef, make_accessor
from ..core.numbers import parse_number
from ..core.time import TimezoneLike, coerce_datetime, to_wall_clock

__all__ = [
    "NUMERIC_BUCKETS",
    "SENTINELS",
    "date_day_matches",
    "date_month_matches",
    "date_range_matches",
    "date_year_matches",
    "discrete_matches",
    "is_sentinel",
    "numeric_range_matches",
    "parse_number",
    "text_matches",
]

# Selections meaning "no constraint"
SENTINELS = frozenset({"all", "none", ""})

# name -> (lower, lower_inclusive, upper, upper_inclusive)
NUMERIC_BUCKETS: dict[str, tuple[float, bool, float, bool]] = {
    "under_1000": (0.0, True, 1000.0, False),
    "1000_5000": (1000.0, True, 5000.0, True),
    "5000_10000": (5000.0, True, 10000.0, True),
    "over_10000": (10000.0, False, math.inf, False),
}


def text_matches(record: Any, fields: Sequence[FieldRef], query: str | None) -> bool:
    """Case-insensitive substring search across several fields.

    Parameters
    ----------
    record
        Record to test
    fields
        Field names or accessors whose values are searched; empty searches
        every value of the record
    query
        Search text; blank means "no filter"

    Returns
    -------
    bool
        True if the query is blank or any field value contains it
    """
    needle = (query or "").strip().lower()
    if not needle:
        return True

    for value in _searched_values(record, fields):
        if value is None:
            continue
        if needle in str(value).lower():
            return True

    return False


def _searched_values(record: Any, fields: Sequence[FieldRef]) -> list[Any]:
    if fields:
        return [make_accessor(field)(record) for field in fields]
    if isinstance(record, Mapping):
        return list(record.values())
    if hasattr(record, "__dict__"):
        return list(vars(record).values())
    return [record]


def is_sentinel(selected: Any) -> bool:
    """True if a discrete selection means "no constraint"."""
    if selected is None:
        return True
    if isinstance(selected, str):
        return selected.strip().lower() in SENTINELS
    if isinstance(selected, (list, tuple, set, frozenset)):
        return all(is_sentinel(item) for item in selected)
    return False


def _same(value: Any, selected: Any) -> bool:
    if isinstance(value, str) and isinstance(selected, str):
        return value.strip().lower() == selected.strip().lower()
    if isinstance(value, str) or isinstance(selected, str):
        # Selections arrive as text; "1" selects 1 and 1.0
        left, right = parse_number(value), parse_number(selected)
        if left is not None and right is not None:
            return left == right
        return str(value).strip().lower() == str(selected).strip().lower()
    return value == selected


def discrete_matches(value: Any, selected: Any) -> bool:
    """Equality filter with sentinel and multi-select support.

    ``"all"``, ``"none"``, ``""`` and None disable the filter. A list, tuple
    or set selection matches any of its (non-sentinel) members. Strings are
    compared case-insensitively.

    Example
    -------
    >>> discrete_matches("New", "all")
    True
    >>> discrete_matches("New", "new")
    True
    >>> discrete_matches("Closed", ["new", "contacted"])
    False
    """
    if is_sentinel(selected):
        return True
    if value is None:
        return False

    if isinstance(selected, (list, tuple, set, frozenset)):
        return any(_same(value, item) for item in selected if not is_sentinel(item))

    return _same(value, selected)


def numeric_range_matches(
    value: Any,
    bucket: str | None = None,
    *,
    minimum: Any = None,
    maximum: Any = None,
) -> bool:
    """Numeric range filter by named bucket or explicit bounds.

    Named buckets are half-open except where noted in ``NUMERIC_BUCKETS``;
    the top bucket is unbounded above. Explicit bounds are inclusive, and an
    omitted or unparseable bound is unbounded. An unknown bucket name is a
    no-op. A missing value does not match an active range.
    """
    if bucket is not None and not is_sentinel(bucket):
        limits = NUMERIC_BUCKETS.get(str(bucket).strip().lower())
        if limits is None:
            return True
        lower, lower_inclusive, upper, upper_inclusive = limits
    else:
        low = parse_number(minimum)
        high = parse_number(maximum)
        if low is None and high is None:
            return True
        lower = low if low is not None else -math.inf
        upper = high if high is not None else math.inf
        lower_inclusive = upper_inclusive = True

    number = parse_number(value)
    if number is None:
        return False

    above = number >= lower if lower_inclusive else number > lower
    below = number <= upper if upper_inclusive else number < upper
    return above and below


def date_day_matches(value: Any, day: Any, tz: TimezoneLike = None) -> bool:
    """True if ``value`` falls on the calendar day of ``day`` in ``tz``.

    Time of day is ignored.
    """
    actual = to_wall_clock(value, tz)
    target = to_wall_clock(day, tz)
    if actual is None or target is None:
        return False
    return actual.date() == target.date()


def date_month_matches(value: Any, month: Any, tz: TimezoneLike = None) -> bool:
    """True if ``value`` falls in the same calendar year and month as ``month``."""
    actual = to_wall_clock(value, tz)
    target = to_wall_clock(month, tz)
    if actual is None or target is None:
        return False
    return (actual.year, actual.month) == (target.year, target.month)


def date_year_matches(value: Any, year: Any, tz: TimezoneLike = None) -> bool:
    """True if ``value`` falls in ``year`` (an int or any date in that year)."""
    actual = to_wall_clock(value, tz)
    if actual is None:
        return False

    if isinstance(year, int) and not isinstance(year, bool):
        return actual.year == year

    target = to_wall_clock(year, tz)
    if target is None:
        return False
    return actual.year == target.year


def _range_end(end: Any, tz: TimezoneLike) -> datetime | None:
    # A bare date (or a date-only string) as end bound covers that whole day
    if isinstance(end, date) and not isinstance(end, datetime):
        return datetime.combine(end, time.min) + timedelta(days=1) - timedelta(microseconds=1)
    if isinstance(end, str) and "T" not in end.upper() and " " not in end.strip():
        parsed = coerce_datetime(end)
        if parsed is not None and parsed.time() == time.min and parsed.tzinfo is None:
            return parsed + timedelta(days=1) - timedelta(microseconds=1)
    return to_wall_clock(end, tz)


def date_range_matches(
    value: Any,
    start: Any = None,
    end: Any = None,
    tz: TimezoneLike = None,
) -> bool:
    """Inclusive date range filter.

    A missing ``start`` is unbounded past, a missing ``end`` unbounded future.
    With neither bound every record matches, dated or not. A plain date as
    ``end`` includes that entire calendar day.
    """
    lower = to_wall_clock(start, tz) if start is not None else None
    upper = _range_end(end, tz) if end is not None else None

    if lower is None and upper is None:
        return True

    actual = to_wall_clock(value, tz)
    if actual is None:
        return False

    if lower is not None and actual < lower:
        return False
    if upper is not None and actual > upper:
        return False
    return True
