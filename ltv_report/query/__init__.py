"""Search, sort and pagination over report rows."""

from .pagination import (
    ELLIPSIS,
    PAGE_SIZES,
    Page,
    clamp_page,
    page_numbers,
    paginate,
    total_pages,
)
from .search import row_matches, search_rows
from .sorting import SortState, compare_values, sort_rows
from .state import QueryState

__all__ = [
    "ELLIPSIS",
    "PAGE_SIZES",
    "Page",
    "QueryState",
    "SortState",
    "clamp_page",
    "compare_values",
    "page_numbers",
    "paginate",
    "row_matches",
    "search_rows",
    "sort_rows",
    "total_pages",
]
