"""Search, filter, sort and paginate in-memory collections."""

from .comparators import Comparator, chain, compare_by, sort_records
from .paginator import DEFAULT_PAGE_SIZE, ELLIPSIS, Page, page_window, paginate
from .pipeline import build_predicate, run_query
from .predicates import (
    NUMERIC_BUCKETS,
    SENTINELS,
    date_day_matches,
    date_month_matches,
    date_range_matches,
    date_year_matches,
    discrete_matches,
    is_sentinel,
    numeric_range_matches,
    text_matches,
)
from .specs import DateFilter, FilterSpec, RangeFilter, SortKey, SortSpec, normalize_filter, normalize_sort
from .state import QueryState, RollupMemo

__all__ = [
    # Predicates
    "NUMERIC_BUCKETS",
    "SENTINELS",
    "date_day_matches",
    "date_month_matches",
    "date_range_matches",
    "date_year_matches",
    "discrete_matches",
    "is_sentinel",
    "numeric_range_matches",
    "text_matches",
    # Comparators
    "Comparator",
    "chain",
    "compare_by",
    "sort_records",
    # Specs
    "DateFilter",
    "FilterSpec",
    "RangeFilter",
    "SortKey",
    "SortSpec",
    "normalize_filter",
    "normalize_sort",
    # Pipeline and pagination
    "build_predicate",
    "run_query",
    "DEFAULT_PAGE_SIZE",
    "ELLIPSIS",
    "Page",
    "page_window",
    "paginate",
    # Recomputation
    "QueryState",
    "RollupMemo",
]
