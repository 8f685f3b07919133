"""Time-based rollups and aggregations."""

from .aggregator import Collection, DerivedMetric, RollupResult, compute_rollup, compute_rollups, net_metric
from .time_windows import (
    DATE_PRESETS,
    TIME_WINDOWS,
    TimeWindow,
    WindowBounds,
    compute_day_bounds,
    compute_month_bounds,
    compute_week_bounds,
    compute_year_bounds,
    get_week_start,
    resolve_preset,
    resolve_window,
)

__all__ = [
    # Time windows
    "DATE_PRESETS",
    "TIME_WINDOWS",
    "TimeWindow",
    "WindowBounds",
    "compute_day_bounds",
    "compute_week_bounds",
    "compute_month_bounds",
    "compute_year_bounds",
    "get_week_start",
    "resolve_preset",
    "resolve_window",
    # Aggregation
    "Collection",
    "DerivedMetric",
    "RollupResult",
    "compute_rollup",
    "compute_rollups",
    "net_metric",
]
