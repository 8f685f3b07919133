"""Lenient numeric parsing for record values and filter controls."""

from __future__ import annotations

import math
from typing import Any

__all__ = ["parse_number"]


def parse_number(value: Any) -> float | None:
    """Parse a numeric value; None for missing, malformed or NaN input.

    Strings may carry surrounding whitespace and thousands separators.

    Example
    -------
    >>> parse_number(" 1,250.50 ")
    1250.5
    >>> parse_number("abc") is None
    True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(number):
        return None
    return number
