"""Time window calculations.

Resolve named windows (day, week, month, year, lifetime) and date presets
against an explicit reference instant. Boundaries are wall-clock values in
one timezone, half-open ``[start, end)``; ``to_utc`` gives the DST-aware UTC
boundaries of the same window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Literal, cast

from ..core.time import TimezoneLike, format_utc_iso8601, localize_wall_clock, to_wall_clock

__all__ = [
    "DATE_PRESETS",
    "TIME_WINDOWS",
    "DatePreset",
    "TimeWindow",
    "WindowBounds",
    "compute_day_bounds",
    "compute_month_bounds",
    "compute_week_bounds",
    "compute_year_bounds",
    "get_week_start",
    "resolve_preset",
    "resolve_window",
]

TimeWindow = Literal["day", "week", "month", "year", "lifetime"]
DatePreset = Literal["today", "this_week", "this_month", "this_year", "last_30_days"]

TIME_WINDOWS: tuple[str, ...] = ("day", "week", "month", "year", "lifetime")
DATE_PRESETS: tuple[str, ...] = ("today", "this_week", "this_month", "this_year", "last_30_days")


@dataclass(frozen=True)
class WindowBounds:
    """Resolved window ``[start, end)`` in wall-clock time of ``tz``.

    Attributes
    ----------
    window : str
        Window or preset name
    start : datetime
        Inclusive start (naive wall clock)
    end : datetime | None
        Exclusive end (naive wall clock); None is unbounded
    tz : TimezoneLike
        Timezone the wall clock is read in (None = local)
    """

    window: str
    start: datetime
    end: datetime | None
    tz: TimezoneLike = None

    def contains(self, value: Any) -> bool:
        """Check if a date value falls within the window.

        Missing or malformed dates are outside every bounded window.
        """
        moment = to_wall_clock(value, self.tz)
        if moment is None:
            return False
        if moment < self.start:
            return False
        return self.end is None or moment < self.end

    def to_utc(self) -> tuple[str, str | None]:
        """UTC boundaries as ISO-8601 strings.

        A local day may be 23, 24 or 25 hours long in UTC around DST changes.
        """
        start_utc = format_utc_iso8601(localize_wall_clock(self.start, self.tz))
        if self.end is None:
            return start_utc, None
        return start_utc, format_utc_iso8601(localize_wall_clock(self.end, self.tz))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        start_utc, end_utc = self.to_utc()
        return {
            "window": self.window,
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end else None,
            "start_utc": start_utc,
            "end_utc": end_utc,
        }


def get_week_start(dt: datetime, start_on: int = 0) -> datetime:
    """Get start of week for a datetime.

    Parameters
    ----------
    dt
        Datetime to get week start for
    start_on
        Day of week to start on (0=Monday, 6=Sunday)

    Returns
    -------
    datetime
        Start of week (same time as input)
    """
    days_since_start = (dt.weekday() - start_on) % 7
    return dt - timedelta(days=days_since_start)


def _midnight(dt: datetime) -> datetime:
    return datetime(dt.year, dt.month, dt.day)


def compute_day_bounds(local: datetime) -> tuple[datetime, datetime]:
    """Calendar day containing ``local``: midnight to next midnight."""
    start = _midnight(local)
    return start, start + timedelta(days=1)


def compute_week_bounds(local: datetime, start_on: int = 0) -> tuple[datetime, datetime]:
    """Calendar week containing ``local``."""
    start = _midnight(get_week_start(local, start_on=start_on))
    return start, start + timedelta(days=7)


def compute_month_bounds(local: datetime) -> tuple[datetime, datetime]:
    """Calendar month containing ``local``: first of month to first of next month."""
    start = datetime(local.year, local.month, 1)

    if local.month == 12:
        end = datetime(local.year + 1, 1, 1)
    else:
        end = datetime(local.year, local.month + 1, 1)

    return start, end


def compute_year_bounds(local: datetime) -> tuple[datetime, datetime]:
    """Calendar year containing ``local``."""
    return datetime(local.year, 1, 1), datetime(local.year + 1, 1, 1)


def _local_now(now: Any, tz: TimezoneLike) -> datetime:
    local = to_wall_clock(now, tz)
    if local is None:
        raise ValueError(f"Reference instant is not a date: {now!r}")
    return local


def resolve_window(
    window: str,
    now: Any,
    tz: TimezoneLike = None,
    week_start_on: int = 0,
) -> WindowBounds | None:
    """Resolve a named window against ``now``.

    Parameters
    ----------
    window
        "day", "week", "month", "year" or "lifetime"
    now
        Reference instant (datetime, date or ISO-8601 string)
    tz
        Timezone the calendar is read in (None = local wall clock)
    week_start_on
        Day of week weeks start on (0=Monday, 6=Sunday)

    Returns
    -------
    WindowBounds | None
        Bounds, or None for the unbounded lifetime window

    Raises
    ------
    ValueError
        If the window name is unknown or ``now`` is not a date

    Examples
    --------
    >>> bounds = resolve_window("month", datetime(2024, 3, 15, 9, 30))
    >>> bounds.start, bounds.end
    (datetime.datetime(2024, 3, 1, 0, 0), datetime.datetime(2024, 4, 1, 0, 0))
    """
    if window == "lifetime":
        return None

    local = _local_now(now, tz)

    if window == "day":
        start, end = compute_day_bounds(local)
    elif window == "week":
        start, end = compute_week_bounds(local, week_start_on)
    elif window == "month":
        start, end = compute_month_bounds(local)
    elif window == "year":
        start, end = compute_year_bounds(local)
    else:
        raise ValueError(f"Unknown window type: {window}")

    return WindowBounds(window=window, start=start, end=end, tz=tz)


def resolve_preset(
    preset: str,
    now: Any,
    tz: TimezoneLike = None,
    week_start_on: int = 0,
) -> WindowBounds:
    """Resolve a date-filter preset against ``now``.

    ``today``/``this_week``/``this_month``/``this_year`` are the calendar
    windows containing ``now``; ``last_30_days`` starts 30 days before
    ``now`` and is open-ended.

    Raises
    ------
    ValueError
        If the preset name is unknown
    """
    if preset == "last_30_days":
        local = _local_now(now, tz)
        return WindowBounds(window=preset, start=local - timedelta(days=30), end=None, tz=tz)

    windows = {"today": "day", "this_week": "week", "this_month": "month", "this_year": "year"}
    if preset not in windows:
        raise ValueError(f"Unknown date preset: {preset}")

    # Only "lifetime" resolves to None
    bounds = cast(WindowBounds, resolve_window(windows[preset], now, tz, week_start_on))
    return WindowBounds(window=preset, start=bounds.start, end=bounds.end, tz=tz)
