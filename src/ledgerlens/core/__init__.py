"""Record field access and time utilities shared by query and rollup code."""

from .accessors import Accessor, FieldRef, get_field, make_accessor
from .numbers import parse_number
from .time import (
    TimezoneLike,
    coerce_datetime,
    format_utc_iso8601,
    localize_wall_clock,
    parse_iso8601,
    resolve_timezone,
    to_wall_clock,
)

__all__ = [
    # Field access
    "Accessor",
    "FieldRef",
    "get_field",
    "make_accessor",
    "parse_number",
    # Time
    "TimezoneLike",
    "coerce_datetime",
    "format_utc_iso8601",
    "localize_wall_clock",
    "parse_iso8601",
    "resolve_timezone",
    "to_wall_clock",
]
