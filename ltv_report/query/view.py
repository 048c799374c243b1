"""Pure derivation of the displayed report view from a snapshot.

The view is recomputed from scratch (search, then sort, then paginate)
whenever the snapshot or the query state changes; nothing is maintained
incrementally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from ltv_report.foundation.records import Snapshot
from ltv_report.query.pagination import Page, paginate
from ltv_report.query.search import search_rows
from ltv_report.query.sorting import sort_rows
from ltv_report.query.state import QueryState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportView:
    """Everything the presentation layer needs to draw the report table.

    Attributes
    ----------
    snapshot_version:
        Version of the snapshot the view was derived from.
    state:
        Query state actually applied, with the page clamped into range.
    filtered:
        All rows matching the search, in sort order. This is what the CSV
        export writes.
    page:
        The visible window of ``filtered``.
    """

    snapshot_version: int
    state: QueryState
    filtered: list[dict[str, Any]]
    page: Page[dict[str, Any]]

    @property
    def is_empty(self) -> bool:
        """True when no row matches the current search."""
        return not self.filtered

    @property
    def columns(self) -> list[str]:
        return list(self.filtered[0].keys()) if self.filtered else []

    def detached(self) -> ReportView:
        """Copy of the view whose row dicts and lists can be modified freely."""
        filtered = [dict(row) for row in self.filtered]
        start = self.page.first_index
        rows = filtered[start : start + len(self.page.rows)]
        return replace(self, filtered=filtered, page=replace(self.page, rows=rows))


def derive_report_view(snapshot: Snapshot, state: QueryState) -> ReportView:
    """Apply search, sort and pagination to the snapshot's report rows."""
    rows = snapshot.row_dicts()
    filtered = search_rows(rows, state.search)
    ordered = sort_rows(filtered, state.sort_key, state.ascending)
    page = paginate(ordered, state.page, state.page_size)
    effective = state.clamped(page.total_pages)
    if effective is not state:
        logger.debug(
            "Clamped page %d to %d (%d pages after search %r)",
            state.page,
            effective.page,
            page.total_pages,
            state.search,
        )
    return ReportView(
        snapshot_version=snapshot.version,
        state=effective,
        filtered=ordered,
        page=page,
    )
