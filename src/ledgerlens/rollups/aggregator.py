"""Time-windowed rollups over independently dated collections.

Collections share no key: invoices and expenses are only related by falling
in the same window. Each window sums every collection on its own, then
derived metrics (e.g. ``net = revenue - expense``) are computed from that
window's sums only.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable

from ..core.accessors import FieldRef, make_accessor
from ..core.numbers import parse_number
from ..core.time import TimezoneLike
from ..observability.loguru_config import get_logger, log_timing
from .time_windows import WindowBounds, resolve_window

__all__ = [
    "Collection",
    "DerivedMetric",
    "RollupResult",
    "compute_rollup",
    "compute_rollups",
    "net_metric",
]

log = get_logger("rollup")

DerivedMetric = Callable[[Mapping[str, float]], float]


@dataclass(frozen=True)
class Collection:
    """A named collection with its date and metric accessors.

    Attributes
    ----------
    name : str
        Collection name (e.g. "revenue", "expense")
    records : Sequence
        Records to aggregate
    date_of : FieldRef
        Field name or accessor giving the record date
    metric_of : FieldRef
        Field name or accessor giving the summed value
    """

    name: str
    records: Sequence[Any]
    date_of: FieldRef
    metric_of: FieldRef


class RollupResult:
    """Sums for one window.

    Attributes
    ----------
    window : str
        Window name ("day", "week", "month", "year", "lifetime")
    bounds : WindowBounds | None
        Resolved interval (None for lifetime)
    per_collection : dict
        Metric sum by collection name
    counts : dict
        Number of records counted by collection name
    derived : dict
        Derived metric values by name
    """

    def __init__(self, window: str, bounds: WindowBounds | None) -> None:
        self.window = window
        self.bounds = bounds

        self.per_collection: dict[str, float] = {}
        self.counts: dict[str, int] = {}
        self.derived: dict[str, float] = {}

    def add_collection(self, name: str, total: float, count: int) -> None:
        """Record the sum for a collection."""
        self.per_collection[name] = total
        self.counts[name] = count

    def __repr__(self) -> str:
        return f"RollupResult(window={self.window!r}, per_collection={self.per_collection!r}, derived={self.derived!r})"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "window": self.window,
            "bounds": self.bounds.to_dict() if self.bounds else None,
            "per_collection": dict(self.per_collection),
            "counts": dict(self.counts),
            "derived": dict(self.derived),
        }


def net_metric(plus: str, minus: str) -> DerivedMetric:
    """Derived metric ``sum(plus) - sum(minus)``.

    Example
    -------
    >>> net_metric("revenue", "expense")({"revenue": 100.0, "expense": 40.0})
    60.0
    """

    def net(sums: Mapping[str, float]) -> float:
        return sums.get(plus, 0.0) - sums.get(minus, 0.0)

    return net


def _metric(value: Any) -> float:
    number = parse_number(value)
    return 0.0 if number is None else number


def _sum_collection(collection: Collection, bounds: WindowBounds | None) -> tuple[float, int]:
    metric_of = make_accessor(collection.metric_of)

    if bounds is None:
        # Lifetime: every record, dated or not
        values = [metric_of(record) for record in collection.records]
    else:
        date_of = make_accessor(collection.date_of)
        values = [metric_of(record) for record in collection.records if bounds.contains(date_of(record))]

    return sum(_metric(v) for v in values), len(values)


def compute_rollup(
    collections: Iterable[Collection],
    now: Any,
    window: str,
    derived: Mapping[str, DerivedMetric] | None = None,
    tz: TimezoneLike = None,
    week_start_on: int = 0,
) -> RollupResult:
    """Compute rollup for a single window.

    Parameters
    ----------
    collections
        Collections to sum
    now
        Reference instant the window is anchored to
    window
        "day", "week", "month", "year" or "lifetime"
    derived
        Derived metrics by name, computed from this window's sums
    tz
        Timezone the calendar is read in (None = local wall clock)
    week_start_on
        First day of the week (0=Monday)

    Returns
    -------
    RollupResult
        Sums, counts and derived metrics

    Raises
    ------
    ValueError
        If the window name is unknown
    """
    bounds = resolve_window(window, now, tz, week_start_on)
    result = RollupResult(window=window, bounds=bounds)

    for collection in collections:
        total, count = _sum_collection(collection, bounds)
        result.add_collection(collection.name, total, count)

    for name, metric in (derived or {}).items():
        result.derived[name] = metric(dict(result.per_collection))

    return result


@log_timing("rollup")
def compute_rollups(
    collections: Iterable[Collection],
    now: Any,
    windows: Iterable[str] = ("day", "month", "year", "lifetime"),
    derived: Mapping[str, DerivedMetric] | None = None,
    tz: TimezoneLike = None,
    week_start_on: int = 0,
) -> list[RollupResult]:
    """Compute rollups for several windows, one result per window in order.

    Nothing is cached: callers needing stable results across repeated calls
    memoize on (collections, now, windows).

    Example
    -------
    >>> from datetime import datetime
    >>> revenue = Collection("revenue", [{"at": "2024-03-01", "amount": 100}], "at", "amount")
    >>> expense = Collection("expense", [{"at": "2024-03-01", "amount": 40}], "at", "amount")
    >>> [r.derived["net"] for r in compute_rollups(
    ...     [revenue, expense], datetime(2024, 3, 1, 18), ["day", "month"],
    ...     derived={"net": net_metric("revenue", "expense")})]
    [60.0, 60.0]
    """
    collections = list(collections)
    results = [
        compute_rollup(collections, now, window, derived, tz, week_start_on)
        for window in windows
    ]

    log.debug(
        "Computed rollups",
        windows=[r.window for r in results],
        collections=[c.name for c in collections],
    )
    return results
