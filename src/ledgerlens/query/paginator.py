"""Pagination of a view and the page-number window shown under a table."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "ELLIPSIS",
    "Page",
    "coerce_page_number",
    "coerce_page_size",
    "paginate",
    "page_window",
]

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
ELLIPSIS = "..."

PageMarker = Union[int, str]


def coerce_page_size(page_size: Any, default: int = DEFAULT_PAGE_SIZE) -> int:
    """Truncate to int; fall back to ``default`` when unparseable or below 1."""
    try:
        size = int(float(page_size))
    except (TypeError, ValueError, OverflowError):
        return default
    return size if size >= 1 else default


def coerce_page_number(page_number: Any) -> int:
    """Truncate to int; unparseable input is page 1. Clamping happens in ``paginate``."""
    try:
        return int(float(page_number))
    except (TypeError, ValueError, OverflowError):
        return 1


def page_window(total_pages: int, current_page: int, max_visible: int = 5) -> list[PageMarker]:
    """Page numbers to display, with ``"..."`` bridging hidden ranges.

    Up to ``max_visible`` pages are listed in full. Beyond that the first
    and last page are always shown, plus a block around the current page:
    the first four pages near the start, the last four near the end, or the
    current page with one neighbour on each side. A hidden range of two or
    more pages becomes a single ellipsis; a single hidden page is shown.

    Examples
    --------
    >>> page_window(10, 1)
    [1, 2, 3, 4, '...', 10]
    >>> page_window(10, 5)
    [1, '...', 4, 5, 6, '...', 10]
    >>> page_window(10, 10)
    [1, '...', 7, 8, 9, 10]
    """
    if total_pages <= 0:
        return []

    current = min(max(current_page, 1), total_pages)

    if total_pages <= max_visible:
        return list(range(1, total_pages + 1))

    if current <= 3:
        block = range(1, 5)
    elif current >= total_pages - 2:
        block = range(total_pages - 3, total_pages + 1)
    else:
        block = range(current - 1, current + 2)

    shown = sorted({1, total_pages, *block})

    window: list[PageMarker] = []
    previous = 0
    for page in shown:
        gap = page - previous - 1
        if gap == 1:
            window.append(previous + 1)
        elif gap >= 2:
            window.append(ELLIPSIS)
        window.append(page)
        previous = page

    return window


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a view.

    Attributes
    ----------
    items : list
        Records on this page
    page_number : int
        Effective (clamped) page number, 1-based
    page_size : int
        Records per page
    total_items : int
        Length of the whole view
    total_pages : int
        Number of pages (0 for an empty view)
    start_item, end_item : int
        1-based positions of the first and last record shown (0 when empty)
    """

    items: list[T]
    page_number: int
    page_size: int
    total_items: int
    total_pages: int
    start_item: int
    end_item: int
    max_visible: int = field(default=5, repr=False)

    @property
    def page_numbers(self) -> list[PageMarker]:
        return page_window(self.total_pages, self.page_number, self.max_visible)

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (items included as-is)."""
        return {
            "items": list(self.items),
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
            "start_item": self.start_item,
            "end_item": self.end_item,
            "page_numbers": self.page_numbers,
        }


def paginate(
    view: Sequence[T],
    page_number: Any = 1,
    page_size: Any = DEFAULT_PAGE_SIZE,
    *,
    max_visible: int = 5,
) -> Page[T]:
    """Slice a view into one page.

    Never raises: the page number is clamped to ``[1, max(1, total_pages)]``
    and a bad page size falls back to the default.

    Parameters
    ----------
    view
        Filtered and sorted records
    page_number
        Requested 1-based page
    page_size
        Records per page
    max_visible
        Width of the page-number window

    Returns
    -------
    Page
        The requested page
    """
    size = coerce_page_size(page_size)
    total_items = len(view)
    total_pages = math.ceil(total_items / size) if total_items else 0

    effective = min(max(coerce_page_number(page_number), 1), max(1, total_pages))

    offset = (effective - 1) * size
    items = list(view[offset : offset + size])

    return Page(
        items=items,
        page_number=effective,
        page_size=size,
        total_items=total_items,
        total_pages=total_pages,
        start_item=offset + 1 if total_items else 0,
        end_item=min(effective * size, total_items),
        max_visible=max_visible,
    )
