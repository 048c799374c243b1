"""Fixed-size page windows over a filtered and sorted row sequence."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar, Union

T = TypeVar("T")

#: Rows-per-page choices offered to the user.
PAGE_SIZES = (5, 10, 20, 50)

ELLIPSIS = "..."

# Page indices are listed in full up to this many pages.
MAX_FULL_PAGE_LIST = 5

PageMarker = Union[int, str]


def validate_page_size(page_size: int) -> int:
    if page_size not in PAGE_SIZES:
        raise ValueError(f"Page size must be one of {PAGE_SIZES}, got {page_size}")
    return page_size


def total_pages(row_count: int, page_size: int) -> int:
    """Number of pages needed for ``row_count`` rows, never less than 1.

    Examples
    --------
    >>> total_pages(0, 10), total_pages(10, 10), total_pages(11, 10)
    (1, 1, 2)
    """
    validate_page_size(page_size)
    if row_count < 0:
        raise ValueError(f"Row count cannot be negative: {row_count}")
    return max(1, math.ceil(row_count / page_size))


def clamp_page(page: int, pages: int) -> int:
    """Clamp a 1-based page number into ``[1, pages]``."""
    return max(1, min(page, max(1, pages)))


def page_numbers(current: int, pages: int) -> list[PageMarker]:
    """Compressed page index for navigation controls.

    Up to five pages are all listed. Beyond that the list holds the first
    page, the three pages centred on ``current``, the last page, and an
    ellipsis wherever pages are skipped.

    Examples
    --------
    >>> page_numbers(1, 3)
    [1, 2, 3]
    >>> page_numbers(5, 10)
    [1, '...', 4, 5, 6, '...', 10]
    >>> page_numbers(2, 10)
    [1, 2, 3, '...', 10]
    """
    pages = max(1, pages)
    current = clamp_page(current, pages)
    if pages <= MAX_FULL_PAGE_LIST:
        return list(range(1, pages + 1))

    left = max(1, current - 1)
    right = min(pages, current + 1)
    markers: list[PageMarker] = []
    if left > 1:
        markers.append(1)
    if left > 2:
        markers.append(ELLIPSIS)
    markers.extend(range(left, right + 1))
    if right < pages - 1:
        markers.append(ELLIPSIS)
    if right < pages:
        markers.append(pages)
    return markers


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of rows plus the metadata navigation controls need."""

    rows: list[T]
    page: int
    page_size: int
    total_pages: int
    total_rows: int

    @property
    def page_numbers(self) -> list[PageMarker]:
        return page_numbers(self.page, self.total_pages)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def first_index(self) -> int:
        """0-based index of the first row on this page within the full sequence."""
        return (self.page - 1) * self.page_size


def paginate(rows: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Slice ``rows`` to the requested page, clamping the page number first.

    Concatenating every page in order reproduces ``rows`` exactly.
    """
    pages = total_pages(len(rows), page_size)
    current = clamp_page(page, pages)
    start = (current - 1) * page_size
    return Page(
        rows=list(rows[start : start + page_size]),
        page=current,
        page_size=page_size,
        total_pages=pages,
        total_rows=len(rows),
    )
