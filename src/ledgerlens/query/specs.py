"""Filter and sort descriptors, and normalization of raw UI payloads."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

from ..core.accessors import FieldRef
from ..core.numbers import parse_number
from ..core.time import TimezoneLike, coerce_datetime
from ..observability.loguru_config import get_logger
from .comparators import Comparator, chain, compare_by
from .predicates import is_sentinel

__all__ = [
    "DATE_MODES",
    "DateFilter",
    "DateMode",
    "FilterSpec",
    "RangeFilter",
    "SortKey",
    "SortSpec",
    "normalize_filter",
    "normalize_sort",
]

log = get_logger("query")

DateMode = Literal["none", "day", "month", "year", "range", "preset"]
DATE_MODES: tuple[str, ...] = ("none", "day", "month", "year", "range", "preset")


@dataclass(frozen=True)
class RangeFilter:
    """Numeric range over one field: a named bucket or explicit bounds."""

    field: FieldRef
    bucket: str | None = None
    minimum: Any = None
    maximum: Any = None

    @property
    def is_active(self) -> bool:
        if self.bucket is not None and not is_sentinel(self.bucket):
            return True
        return parse_number(self.minimum) is not None or parse_number(self.maximum) is not None


@dataclass(frozen=True)
class DateFilter:
    """Date constraint over one field.

    Attributes
    ----------
    field : FieldRef | None
        Field holding the record date
    mode : str
        "none", "day", "month", "year", "range" or "preset"
    day, month, year
        Targets for the calendar modes
    start, end
        Inclusive bounds for "range"
    preset : str | None
        today, this_week, this_month, this_year or last_30_days
    tz : TimezoneLike
        Timezone the calendar is read in (None = local wall clock)
    """

    field: FieldRef | None = None
    mode: DateMode = "none"
    day: Any = None
    month: Any = None
    year: Any = None
    start: Any = None
    end: Any = None
    preset: str | None = None
    tz: TimezoneLike = None

    @property
    def is_active(self) -> bool:
        return self.mode != "none"


@dataclass(frozen=True)
class FilterSpec:
    """Complete set of constraints applied by the query pipeline.

    Every field defaults to its neutral value, so ``FilterSpec()`` keeps
    every record.
    """

    search: str = ""
    search_fields: tuple[FieldRef, ...] = ()
    discrete: Mapping[str, Any] = field(default_factory=dict)
    range: RangeFilter | None = None
    date: DateFilter = field(default_factory=DateFilter)

    def __hash__(self) -> int:
        return hash((self.search, self.search_fields, _freeze(self.discrete), self.range, self.date))

    @property
    def is_neutral(self) -> bool:
        """True if no clause can exclude a record."""
        return (
            not self.search.strip()
            and all(is_sentinel(v) for v in self.discrete.values())
            and (self.range is None or not self.range.is_active)
            and not self.date.is_active
        )


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class SortKey:
    """One sort key: field, direction and value type."""

    key: FieldRef
    direction: Literal["asc", "desc"] = "asc"
    type: Literal["string", "number", "date"] = "string"

    def comparator(self) -> Comparator:
        return compare_by(self.key, self.direction, self.type)


@dataclass(frozen=True)
class SortSpec:
    """Ordered sort keys; the first is primary, the rest break ties."""

    keys: tuple[SortKey, ...] = ()

    @classmethod
    def by(cls, key: FieldRef, direction: str = "asc", type: str = "string") -> SortSpec:
        """Single-key shortcut."""
        return cls(keys=(SortKey(key, direction, type),))  # type: ignore[arg-type]

    def comparator(self) -> Comparator | None:
        """Chained comparator, or None when there is nothing to sort by."""
        if not self.keys:
            return None
        return chain(*(k.comparator() for k in self.keys))


def _parse_date(value: Any, control: str) -> Any:
    if value is None or value == "":
        return None
    if coerce_datetime(value) is None:
        log.debug("Ignoring malformed date control", control=control, value=repr(value))
        return None
    return value


def _parse_month(value: Any) -> Any:
    # "YYYY-MM" is what month pickers send; fromisoformat needs a day
    if isinstance(value, str):
        match = re.fullmatch(r"(\d{4})-(\d{1,2})", value.strip())
        if match:
            year, month = int(match.group(1)), int(match.group(2))
            return date(year, month, 1) if 1 <= month <= 12 else None
    return _parse_date(value, "month")


def _parse_year(value: Any) -> Any:
    if value is None or value == "":
        return None
    number = parse_number(value)
    if number is not None and number.is_integer():
        return int(number)
    return _parse_date(value, "year")


def normalize_filter(raw: Mapping[str, Any] | None, *, tz: TimezoneLike = None) -> FilterSpec:
    """Build a FilterSpec from a raw UI/CLI payload.

    Recognized keys: ``search``, ``search_fields``, ``discrete`` (mapping),
    ``range`` (``{"field", "bucket" | "min"/"max"}``) and ``date``
    (``{"field", "mode", "day", "month", "year", "start", "end", "preset"}``).

    Malformed controls are dropped rather than rejected: an unparseable bound
    becomes unbounded, an unknown date mode becomes "none".

    Example
    -------
    >>> spec = normalize_filter({"search": " alp ", "range": {"field": "amount", "min": "abc", "max": "500"}})
    >>> spec.search, spec.range.minimum, spec.range.maximum
    ('alp', None, 500.0)
    """
    raw = raw or {}

    search = str(raw.get("search") or "").strip()
    search_fields = tuple(str(f) for f in (raw.get("search_fields") or []) if f)

    discrete_raw = raw.get("discrete") or {}
    discrete: dict[str, Any] = {}
    if isinstance(discrete_raw, Mapping):
        for key, value in discrete_raw.items():
            if isinstance(value, (list, tuple, set)):
                value = tuple(v for v in value if v is not None)
            discrete[str(key)] = value

    range_filter = None
    range_raw = raw.get("range")
    if isinstance(range_raw, Mapping) and range_raw.get("field"):
        bucket = range_raw.get("bucket")
        range_filter = RangeFilter(
            field=str(range_raw["field"]),
            bucket=str(bucket) if bucket not in (None, "") else None,
            minimum=parse_number(range_raw.get("min", range_raw.get("minimum"))),
            maximum=parse_number(range_raw.get("max", range_raw.get("maximum"))),
        )

    date_filter = DateFilter(tz=tz)
    date_raw = raw.get("date")
    if isinstance(date_raw, Mapping):
        mode = str(date_raw.get("mode") or "none").strip().lower()
        if mode not in DATE_MODES:
            log.warning("Unknown date mode, date filter disabled", mode=mode)
            mode = "none"
        date_field = date_raw.get("field")
        if mode != "none" and not date_field:
            log.warning("Date filter without a date field, date filter disabled", mode=mode)
            mode = "none"
        date_filter = DateFilter(
            field=str(date_field) if date_field else None,
            mode=mode,  # type: ignore[arg-type]
            day=_parse_date(date_raw.get("day"), "day"),
            month=_parse_month(date_raw.get("month")),
            year=_parse_year(date_raw.get("year")),
            start=_parse_date(date_raw.get("start"), "start"),
            end=_parse_date(date_raw.get("end"), "end"),
            preset=str(date_raw["preset"]) if date_raw.get("preset") else None,
            tz=tz,
        )

    return FilterSpec(
        search=search,
        search_fields=search_fields,
        discrete=discrete,
        range=range_filter,
        date=date_filter,
    )


def normalize_sort(raw: Any) -> SortSpec:
    """Build a SortSpec from ``"field"``, ``"-field"``, a mapping, or a list of those.

    A leading ``-`` means descending. Mappings take ``key``, ``direction`` and
    ``type``. Entries with an unknown direction or type are skipped.

    Example
    -------
    >>> normalize_sort(["-amount:number", "name"]).keys[0]
    SortKey(key='amount', direction='desc', type='number')
    """
    if raw is None or raw == "":
        return SortSpec()

    entries = raw if isinstance(raw, (list, tuple)) else [raw]
    keys: list[SortKey] = []

    for entry in entries:
        if isinstance(entry, Mapping):
            key = entry.get("key")
            direction = str(entry.get("direction") or "asc").lower()
            sort_type = str(entry.get("type") or "string").lower()
        else:
            text = str(entry).strip()
            direction = "desc" if text.startswith("-") else "asc"
            text = text.lstrip("-+")
            key, _, sort_type = text.partition(":")
            sort_type = sort_type or "string"

        if not key or direction not in ("asc", "desc") or sort_type not in ("string", "number", "date"):
            log.warning("Skipping invalid sort key", entry=repr(entry))
            continue

        keys.append(SortKey(str(key), direction, sort_type))  # type: ignore[arg-type]

    return SortSpec(keys=tuple(keys))
