"""Case-insensitive substring search across every field of a row."""

from __future__ import annotations

from typing import Any, Mapping, Sequence, TypeVar

from ltv_report.foundation.values import display_text

Row = TypeVar("Row", bound=Mapping[str, Any])


def row_matches(row: Mapping[str, Any], query: str) -> bool:
    """True when any field's text contains ``query`` (case-insensitive)."""
    needle = query.lower()
    return any(needle in display_text(value).lower() for value in row.values())


def search_rows(rows: Sequence[Row], query: str) -> list[Row]:
    """Rows with at least one field containing ``query``.

    An empty query keeps every row. The result is a new list holding the
    same row objects in their original order; rows are never modified.

    Examples
    --------
    >>> rows = [{"CustomerID": "Acme"}, {"CustomerID": "Globex"}]
    >>> search_rows(rows, "ACM")
    [{'CustomerID': 'Acme'}]
    """
    if not query:
        return list(rows)
    return [row for row in rows if row_matches(row, query)]
