"""Recomputation and page-reset rules for repeatedly queried views.

A table page re-derives its view whenever the operator types, picks a
filter, changes the sort or the page size, or the data reloads. ``QueryState``
owns those inputs and applies two rules:

- the view is recomputed lazily, only after an input actually changed
- any change to filter, sort, page size or source data resets the page
  number to 1 before the next page is built

Clamping in ``paginate`` stays as a safety net only. A view that shrinks
from "page 5 of 7" to two pages shows page 1, not a clamped page 2.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from ..core.time import TimezoneLike
from ..observability.loguru_config import get_logger
from ..rollups.aggregator import Collection, DerivedMetric, RollupResult, compute_rollups
from .comparators import Comparator
from .paginator import DEFAULT_PAGE_SIZE, Page, coerce_page_number, coerce_page_size, paginate
from .pipeline import run_query
from .specs import FilterSpec, SortSpec

__all__ = [
    "QueryState",
    "RollupMemo",
]

log = get_logger("query")


class QueryState:
    """Inputs and derived view/page of one table.

    Parameters
    ----------
    records
        Source collection
    filter_spec
        Initial filter (default: neutral)
    sort_spec
        Initial sort (default: source order)
    page_size
        Records per page
    version
        Optional data version; a new version counts as new data even when the
        same list object is passed again
    tie_breaker
        Field name or comparator used after the sort keys
    now
        Reference instant for date presets
    max_visible
        Width of the page-number window

    Example
    -------
    >>> state = QueryState(list(range(50)), page_size=10)
    >>> state.set_page(5)
    >>> state.page.page_number
    5
    >>> state.set_filter(FilterSpec())  # equal spec, no reset
    >>> state.page.page_number
    5
    >>> state.set_sort(SortSpec.by("value", "desc", "number"))
    >>> state.page.page_number
    1
    """

    def __init__(
        self,
        records: Sequence[Any],
        *,
        filter_spec: FilterSpec | None = None,
        sort_spec: SortSpec | None = None,
        page_size: Any = DEFAULT_PAGE_SIZE,
        version: Any = None,
        tie_breaker: str | Comparator | None = None,
        now: Any = None,
        max_visible: int = 5,
    ) -> None:
        self._records = records
        self._version = version
        self._filter = filter_spec or FilterSpec()
        self._sort = sort_spec or SortSpec()
        self._page_size = coerce_page_size(page_size)
        self._page_number = 1
        self._tie_breaker = tie_breaker
        self._now = now
        self._max_visible = max_visible

        self._view: list[Any] | None = None
        self.recompute_count = 0

    # Inputs

    @property
    def filter_spec(self) -> FilterSpec:
        return self._filter

    @property
    def sort_spec(self) -> SortSpec:
        return self._sort

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def page_number(self) -> int:
        """Requested page number (before clamping)."""
        return self._page_number

    def _invalidate(self, reason: str) -> None:
        self._view = None
        if self._page_number != 1:
            log.debug("Resetting page to 1", reason=reason, previous=self._page_number)
        self._page_number = 1

    def set_records(self, records: Sequence[Any], version: Any = None) -> None:
        """Replace the source data. Same object and same version is a no-op."""
        if records is self._records and version == self._version:
            return
        self._records = records
        self._version = version
        self._invalidate("records")

    def set_filter(self, filter_spec: FilterSpec) -> None:
        if filter_spec == self._filter:
            return
        self._filter = filter_spec
        self._invalidate("filter")

    def set_sort(self, sort_spec: SortSpec) -> None:
        if sort_spec == self._sort:
            return
        self._sort = sort_spec
        self._invalidate("sort")

    def set_page_size(self, page_size: Any) -> None:
        size = coerce_page_size(page_size)
        if size == self._page_size:
            return
        self._page_size = size
        # The view itself is unchanged; only the page position resets
        self._page_number = 1

    def set_now(self, now: Any) -> None:
        """Move the reference instant used by date presets."""
        if now == self._now:
            return
        self._now = now
        if self._filter.date.mode == "preset":
            self._invalidate("now")

    def set_page(self, page_number: Any) -> None:
        """Navigate to a page. Navigation never resets anything else."""
        self._page_number = max(coerce_page_number(page_number), 1)

    # Derived

    @property
    def view(self) -> list[Any]:
        """The filtered and sorted, unpaginated view (what exports consume)."""
        if self._view is None:
            self._view = run_query(
                self._records,
                self._filter,
                self._sort,
                tie_breaker=self._tie_breaker,
                now=self._now,
            )
            self.recompute_count += 1
        return self._view

    @property
    def page(self) -> Page[Any]:
        return paginate(self.view, self._page_number, self._page_size, max_visible=self._max_visible)


class RollupMemo:
    """Caller-side memo for ``compute_rollups``.

    Results are keyed by the identity and version of every collection's
    records, plus ``now``, the windows and the timezone. Derived metrics are
    fixed per memo.
    """

    def __init__(
        self,
        derived: dict[str, DerivedMetric] | None = None,
        tz: TimezoneLike = None,
        week_start_on: int = 0,
    ) -> None:
        self.derived = derived or {}
        self.tz = tz
        self.week_start_on = week_start_on
        self._key: tuple[Any, ...] | None = None
        self._results: list[RollupResult] = []
        # Holding the collections keeps their ids from being reused
        self._collections: list[Collection] = []
        self.hits = 0
        self.misses = 0

    def get(
        self,
        collections: Iterable[Collection],
        now: Any,
        windows: Iterable[str] = ("day", "month", "year", "lifetime"),
        versions: dict[str, Any] | None = None,
    ) -> list[RollupResult]:
        """Return cached results for the same inputs, computing them otherwise."""
        collections = list(collections)
        windows = tuple(windows)
        versions = versions or {}

        key = (
            tuple((c.name, id(c.records), versions.get(c.name)) for c in collections),
            now,
            windows,
            str(self.tz),
        )
        if key == self._key:
            self.hits += 1
            return self._results

        self.misses += 1
        self._results = compute_rollups(
            collections,
            now,
            windows,
            derived=self.derived,
            tz=self.tz,
            week_start_on=self.week_start_on,
        )
        self._key = key
        self._collections = collections
        return self._results
