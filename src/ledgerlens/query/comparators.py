"""Type-aware comparators composable into a stable multi-key sort."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Any, Callable, Literal

from ..core.accessors import FieldRef, make_accessor
from ..core.time import coerce_datetime
from ..core.numbers import parse_number

__all__ = [
    "Comparator",
    "Direction",
    "SortType",
    "chain",
    "compare_by",
    "sort_records",
]

Comparator = Callable[[Any, Any], int]
Direction = Literal["asc", "desc"]
SortType = Literal["string", "number", "date"]


def _string_key(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _date_key(value: Any) -> float | None:
    dt = coerce_datetime(value)
    if dt is None:
        return None
    if dt.tzinfo is not None:
        # Naive values are read as UTC so mixed collections stay ordered
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return (dt - datetime.min).total_seconds()


_KEY_FUNCS: dict[str, Callable[[Any], Any]] = {
    "string": _string_key,
    "number": parse_number,
    "date": _date_key,
}


def compare_by(key: FieldRef, direction: Direction = "asc", type: SortType = "string") -> Comparator:
    """Build a comparator over one field.

    Parameters
    ----------
    key
        Field name or accessor
    direction
        "asc" or "desc"; "desc" negates the ascending result
    type
        "string" (ordinal, case-sensitive), "number" or "date" (by instant)

    Returns
    -------
    Comparator
        cmp-style function returning -1, 0 or 1

    Raises
    ------
    ValueError
        If direction or type is unknown

    Notes
    -----
    Records whose value is missing (or does not parse as the sort type)
    sort after every present value regardless of direction.
    """
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction}")
    if type not in _KEY_FUNCS:
        raise ValueError(f"Unknown sort type: {type}")

    accessor = make_accessor(key)
    normalize = _KEY_FUNCS[type]
    sign = -1 if direction == "desc" else 1

    def compare(a: Any, b: Any) -> int:
        left = normalize(accessor(a))
        right = normalize(accessor(b))

        if left is None and right is None:
            return 0
        if left is None:
            return 1
        if right is None:
            return -1

        if left < right:
            return -sign
        if left > right:
            return sign
        return 0

    return compare


def chain(*comparators: Comparator) -> Comparator:
    """Combine comparators left to right; the first non-zero result wins."""

    def compare(a: Any, b: Any) -> int:
        for comparator in comparators:
            result = comparator(a, b)
            if result:
                return result
        return 0

    return compare


def sort_records(records: list[Any], comparator: Comparator | None) -> list[Any]:
    """Stable sort into a new list. No comparator keeps the input order."""
    if comparator is None:
        return list(records)
    return sorted(records, key=cmp_to_key(comparator))
