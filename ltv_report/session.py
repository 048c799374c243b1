"""Interactive report session.

A session owns the current snapshot and the query state and exposes the
operations a user interface performs: upload a file, search, sort, page,
open a customer's detail view and export. Derived views are recomputed
from the snapshot on demand (memoised per snapshot version and query
state); the customer history is recomputed on every request.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from ltv_report.config import Settings
from ltv_report.errors import DEFAULT_UPLOAD_ERROR, ExportError, LTVReportError
from ltv_report.exports.document import DetailView, DocumentOptions, export_history_pdf
from ltv_report.exports.tabular import DEFAULT_CSV_FILENAME, export_rows_csv
from ltv_report.foundation.records import ReportRow, Snapshot, parse_upload_payload
from ltv_report.history.monthly import CustomerHistory, group_customer_transactions
from ltv_report.query.state import QueryState
from ltv_report.query.view import ReportView
from ltv_report.query.view_cache import ViewCache
from ltv_report.upload import HttpUploader, Uploader

logger = structlog.get_logger(__name__)


class ReportSession:
    """State and operations of one user's report dashboard.

    Concurrent uploads are not serialised: if a second upload is started
    before the first finishes, whichever completes last wins.
    """

    def __init__(self, settings: Settings | None = None, uploader: Uploader | None = None):
        self.settings = settings or Settings()
        self.uploader = uploader or HttpUploader(
            self.settings.api_url, timeout=self.settings.upload_timeout
        )
        self.snapshot = Snapshot.empty()
        self.state = QueryState(page_size=self.settings.default_page_size)
        self.loading = False
        self.error = ""
        self.selected: ReportRow | None = None
        self.detail_view: DetailView | None = None
        self._views = ViewCache(max_size=self.settings.view_cache_size)

    # Snapshot

    async def upload(self, path: str | Path) -> bool:
        """Upload a file and install the resulting snapshot.

        Returns True on success. On failure the previous snapshot is kept,
        :attr:`error` holds the message to show, and False is returned.
        """
        self.loading = True
        self.error = ""
        try:
            body = await self.uploader.upload(Path(path))
            snapshot = parse_upload_payload(body)
        except LTVReportError as exc:
            self.error = str(exc) or DEFAULT_UPLOAD_ERROR
            logger.warning("upload_failed", file=str(path), error=self.error)
            return False
        except OSError as exc:
            self.error = DEFAULT_UPLOAD_ERROR
            logger.warning("upload_failed", file=str(path), error=str(exc))
            return False
        finally:
            self.loading = False

        self.install_snapshot(snapshot)
        return True

    def install_snapshot(self, snapshot: Snapshot) -> None:
        """Replace the current snapshot wholesale."""
        self.snapshot = snapshot
        self._views.clear()
        if self.selected is not None and snapshot.find_row(self.selected.customer_id) is None:
            self.close_detail()
        logger.info(
            "snapshot_installed",
            version=snapshot.version,
            report_rows=len(snapshot.report_rows),
            transactions=len(snapshot.transactions),
        )

    # Query state

    def view(self) -> ReportView:
        """Current report view. The stored page is clamped to what exists."""
        view = self._views.get_view(self.snapshot, self.state)
        self.state = view.state
        return view

    def set_search(self, term: str) -> ReportView:
        self.state = self.state.with_search(term)
        return self.view()

    def sort_by(self, key: str) -> ReportView:
        self.state = self.state.with_sort(key)
        return self.view()

    def go_to_page(self, page: int) -> ReportView:
        self.state = self.state.with_page(page)
        return self.view()

    def next_page(self) -> ReportView:
        self.state = self.state.next_page(self.view().page.total_pages)
        return self.view()

    def previous_page(self) -> ReportView:
        self.state = self.state.previous_page(self.view().page.total_pages)
        return self.view()

    def set_page_size(self, page_size: int) -> ReportView:
        self.state = self.state.with_page_size(page_size)
        return self.view()

    # Customer detail

    def select_customer(self, customer_id: str) -> CustomerHistory:
        """Open the detail view of a customer and return their history.

        Raises
        ------
        KeyError
            If the customer is not in the current snapshot.
        """
        row = self.snapshot.find_row(customer_id)
        if row is None:
            raise KeyError(f"Unknown customer: {customer_id!r}")
        self.selected = row
        self.detail_view = DetailView(customer_id=row.customer_id)
        return self.customer_history()

    def customer_history(self) -> CustomerHistory:
        if self.selected is None:
            return CustomerHistory(customer_id="")
        return group_customer_transactions(
            self.snapshot.transactions, self.selected.customer_id
        )

    def close_detail(self) -> None:
        self.selected = None
        self.detail_view = None

    # Exports

    def export_csv(self, output_path: str | Path = DEFAULT_CSV_FILENAME) -> Path:
        """Write the filtered and sorted rows (all pages) to CSV.

        Raises
        ------
        NothingToExportError
            If no row matches the current search.
        """
        return export_rows_csv(self.view().filtered, output_path)

    async def export_pdf(
        self,
        output_dir: str | Path = ".",
        options: DocumentOptions | None = None,
    ) -> Path:
        """Export the open detail view as a PDF document."""
        if self.detail_view is None:
            raise ExportError("No customer selected")
        return await export_history_pdf(
            self.detail_view,
            self.customer_history(),
            output_dir,
            options,
            currency=self.settings.currency,
        )
