"""Time and timezone utilities for ledgerlens.

Every date comparison in the engine happens on *wall-clock* values in one
explicitly chosen timezone:

- naive datetimes are taken as already expressed in that timezone
- aware datetimes are converted into it
- ``tz=None`` means the local wall clock of the process

The engine never reads the current time itself; callers pass ``now``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Union

import pytz

__all__ = [
    "TimezoneLike",
    "coerce_datetime",
    "format_utc_iso8601",
    "localize_wall_clock",
    "parse_iso8601",
    "resolve_timezone",
    "to_wall_clock",
]

TimezoneLike = Union[str, tzinfo, None]


def resolve_timezone(tz: TimezoneLike) -> tzinfo | None:
    """Resolve a timezone name or object.

    Parameters
    ----------
    tz
        IANA timezone name (e.g. "Asia/Kolkata"), a tzinfo instance, or None

    Returns
    -------
    tzinfo | None
        Timezone object, or None for the local wall clock

    Raises
    ------
    ValueError
        If the timezone name is unknown
    """
    if tz is None or isinstance(tz, tzinfo):
        return tz

    try:
        return pytz.timezone(str(tz))
    except pytz.UnknownTimeZoneError as exc:
        raise ValueError(f"Invalid timezone: {tz}") from exc


def parse_iso8601(value: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime string.

    Returns None for blank or malformed input instead of raising.

    Example
    -------
    >>> parse_iso8601("2024-03-01T10:30:00Z").tzinfo is not None
    True
    >>> parse_iso8601("not a date") is None
    True
    """
    text = value.strip()
    if not text:
        return None

    # Handle 'Z' suffix (Zulu time = UTC)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def coerce_datetime(value: Any) -> datetime | None:
    """Coerce a record's date value to a datetime.

    Accepts datetimes, dates (midnight of that day) and ISO-8601 strings.
    Anything else, including None, yields None.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        return parse_iso8601(value)
    return None


def to_wall_clock(value: Any, tz: TimezoneLike = None) -> datetime | None:
    """Express a date value as a naive wall-clock datetime in ``tz``.

    Parameters
    ----------
    value
        datetime, date or ISO-8601 string
    tz
        Timezone to read the calendar in (None = local wall clock)

    Returns
    -------
    datetime | None
        Naive datetime, or None if the value is missing or malformed
    """
    dt = coerce_datetime(value)
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt

    zone = resolve_timezone(tz)
    if zone is None:
        # Aware value, local wall clock requested
        return dt.astimezone().replace(tzinfo=None)

    return dt.astimezone(zone).replace(tzinfo=None)


def localize_wall_clock(wall: datetime, tz: TimezoneLike = None) -> datetime:
    """Attach ``tz`` to a naive wall-clock datetime.

    pytz zones are localized (DST-correct); other tzinfo objects are attached
    directly; None uses the system local zone.
    """
    zone = resolve_timezone(tz)
    if zone is None:
        return wall.astimezone()

    localize = getattr(zone, "localize", None)
    if localize is not None:
        return localize(wall)

    return wall.replace(tzinfo=zone)


def format_utc_iso8601(dt: datetime) -> str:
    """Format an aware datetime as ISO-8601 in UTC.

    Raises
    ------
    ValueError
        If datetime is naive (no timezone)

    Example
    -------
    >>> format_utc_iso8601(datetime(2024, 3, 1, 12, tzinfo=timezone.utc))
    '2024-03-01T12:00:00+00:00'
    """
    if dt.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")

    return dt.astimezone(timezone.utc).isoformat()
