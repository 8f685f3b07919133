"""ledgerlens: in-memory query and rollup engine for tabular console pages.

Search, filter, sort and paginate a collection into pages, and sum several
independently dated collections over day/week/month/year/lifetime windows.
"""

from .query import (
    ELLIPSIS,
    DateFilter,
    FilterSpec,
    Page,
    QueryState,
    RangeFilter,
    RollupMemo,
    SortKey,
    SortSpec,
    chain,
    compare_by,
    normalize_filter,
    normalize_sort,
    page_window,
    paginate,
    run_query,
)
from .rollups import Collection, RollupResult, WindowBounds, compute_rollups, net_metric, resolve_window

__version__ = "0.1.0"

__all__ = [
    "Collection",
    "DateFilter",
    "ELLIPSIS",
    "FilterSpec",
    "Page",
    "QueryState",
    "RangeFilter",
    "RollupMemo",
    "RollupResult",
    "SortKey",
    "SortSpec",
    "WindowBounds",
    "chain",
    "compare_by",
    "compute_rollups",
    "net_metric",
    "normalize_filter",
    "normalize_sort",
    "page_window",
    "paginate",
    "resolve_window",
    "run_query",
]
