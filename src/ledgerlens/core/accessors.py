"""Field access over opaque records.

The engine never assumes a record shape. Callers pass either a callable
``record -> value`` or a field name; names resolve against mappings
(``record.get(name)``) and against plain objects (``getattr``). Dotted names
walk nested values. Resolution never raises: a missing field is None.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Union

__all__ = [
    "Accessor",
    "FieldRef",
    "get_field",
    "make_accessor",
]

Accessor = Callable[[Any], Any]
FieldRef = Union[str, Accessor]


def _lookup(value: Any, name: str) -> Any:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def get_field(record: Any, name: str) -> Any:
    """Read a (possibly dotted) field from a record.

    Example
    -------
    >>> get_field({"member": {"name": "Asha"}}, "member.name")
    'Asha'
    >>> get_field({"name": "Asha"}, "email") is None
    True
    """
    if isinstance(record, Mapping) and name in record:
        return record[name]

    value = record
    for part in name.split("."):
        value = _lookup(value, part)
        if value is None:
            return None
    return value


def make_accessor(field: FieldRef) -> Accessor:
    """Turn a field name or callable into an accessor.

    Callables are wrapped so that an exception raised by the caller's
    accessor reads as a missing value.
    """
    if isinstance(field, str):
        return lambda record: get_field(record, field)

    if not callable(field):
        raise ValueError(f"Field must be a name or a callable, got {type(field).__name__}")

    def safe(record: Any) -> Any:
        try:
            return field(record)
        except (AttributeError, KeyError, IndexError, TypeError, ValueError):
            return None

    return safe
