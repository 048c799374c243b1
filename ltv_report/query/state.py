"""Transient search, sort and pagination parameters of a session.

Search and sort changes follow different page rules: a new search term
sends the user back to page 1, a sort change keeps the current page.
Each transition returns a new :class:`QueryState`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ltv_report.query.pagination import clamp_page, validate_page_size
from ltv_report.query.sorting import SortState

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class QueryState:
    """Search term, sort column and direction, page and page size."""

    search: str = ""
    sort_key: str = ""
    ascending: bool = True
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        validate_page_size(self.page_size)
        if self.page < 1:
            raise ValueError(f"Page numbers start at 1, got {self.page}")

    @property
    def sort(self) -> SortState:
        return SortState(key=self.sort_key, ascending=self.ascending)

    def with_search(self, term: str) -> "QueryState":
        """Change the search term; the page resets only if the term changed."""
        if term == self.search:
            return self
        return replace(self, search=term, page=1)

    def with_sort(self, key: str) -> "QueryState":
        """Select a sort column (toggle if already active); page is kept."""
        sort = self.sort.select(key)
        return replace(self, sort_key=sort.key, ascending=sort.ascending)

    def with_page(self, page: int) -> "QueryState":
        return replace(self, page=max(1, page))

    def with_page_size(self, page_size: int) -> "QueryState":
        """Change rows per page without repositioning.

        The page is clamped later if it no longer exists.
        """
        return replace(self, page_size=validate_page_size(page_size))

    def next_page(self, total_pages: int) -> "QueryState":
        return replace(self, page=clamp_page(self.page + 1, total_pages))

    def previous_page(self, total_pages: int) -> "QueryState":
        return replace(self, page=clamp_page(self.page - 1, total_pages))

    def clamped(self, total_pages: int) -> "QueryState":
        """State whose page lies within ``[1, total_pages]``."""
        page = clamp_page(self.page, total_pages)
        if page == self.page:
            return self
        return replace(self, page=page)
