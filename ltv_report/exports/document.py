"""Paginated PDF export of a customer's monthly transaction history.

The export mirrors the interactive detail view: while it runs the view is
switched into print mode (expanded, order listing hidden) and the original
layout is put back afterwards, whether rendering succeeded or not.
"""

from __future__ import annotations

import asyncio
import io
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator
from xml.sax.saxutils import escape

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for headless environments
import matplotlib.pyplot as plt
import structlog
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape, legal, letter, portrait
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ltv_report.errors import ExportError, ExportInProgressError
from ltv_report.foundation.values import DEFAULT_CURRENCY, format_currency
from ltv_report.history.monthly import CustomerHistory, MonthlySummary

logger = structlog.get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]+')
_WHITESPACE = re.compile(r"\s+")

FALLBACK_DOCUMENT_NAME = "transaction-report"
DOCUMENT_SUFFIX = "_transaction_history.pdf"

PAGE_SIZES = {"letter": letter, "legal": legal, "a4": A4}
ORIENTATIONS = {"portrait": portrait, "landscape": landscape}

CHART_COLORS = ["#3b82f6", "#22c55e", "#f97316", "#ef4444", "#a855f7"]

# Layout applied to the detail view for the duration of an export.
PRINT_MAX_HEIGHT = None
PRINT_OVERFLOW_Y = "visible"


def safe_filename(name: str | None) -> str:
    """Filesystem-safe stem derived from a customer's display name.

    Examples
    --------
    >>> safe_filename('Acme: "West" Branch')
    'Acme_West_Branch'
    """
    stripped = _UNSAFE_FILENAME_CHARS.sub("", name or "")
    collapsed = _WHITESPACE.sub("_", stripped.strip())
    return collapsed or FALLBACK_DOCUMENT_NAME


def document_filename(name: str | None) -> str:
    return f"{safe_filename(name)}{DOCUMENT_SUFFIX}"


@dataclass(frozen=True)
class DocumentOptions:
    """Page geometry and image fidelity of the exported document.

    Attributes
    ----------
    margin_in:
        Margin on every side, in inches.
    image_quality:
        JPEG quality of embedded images, 0-1.
    render_scale:
        Resolution multiplier for embedded images (1 = 72 dpi).
    page_size:
        ``letter``, ``legal`` or ``a4``.
    orientation:
        ``portrait`` or ``landscape``.
    """

    margin_in: float = 0.5
    image_quality: float = 0.98
    render_scale: float = 2.0
    page_size: str = "letter"
    orientation: str = "portrait"

    def __post_init__(self) -> None:
        if self.margin_in < 0:
            raise ValueError(f"Margin cannot be negative: {self.margin_in}")
        if not 0 < self.image_quality <= 1:
            raise ValueError(f"Image quality must be in (0, 1]: {self.image_quality}")
        if self.render_scale <= 0:
            raise ValueError(f"Render scale must be positive: {self.render_scale}")
        if self.page_size not in PAGE_SIZES:
            raise ValueError(f"Unknown page size {self.page_size!r}; use one of {sorted(PAGE_SIZES)}")
        if self.orientation not in ORIENTATIONS:
            raise ValueError(f"Unknown orientation {self.orientation!r}")

    @property
    def pagesize(self) -> tuple[float, float]:
        return ORIENTATIONS[self.orientation](PAGE_SIZES[self.page_size])


@dataclass
class DetailView:
    """Interactive state of an open customer detail view.

    ``max_height`` and ``overflow_y`` describe the scroll container; the
    export temporarily expands them so the whole history is rendered.
    ``is_printing`` disables the export action and hides the per-order
    listing while an export runs.
    """

    customer_id: str
    max_height: str | None = "90vh"
    overflow_y: str = "auto"
    is_printing: bool = False

    @property
    def show_order_list(self) -> bool:
        return not self.is_printing

    @property
    def can_export(self) -> bool:
        return not self.is_printing


@asynccontextmanager
async def print_mode(view: DetailView) -> AsyncIterator[DetailView]:
    """Switch ``view`` into print layout, restoring it on every exit path.

    Raises
    ------
    ExportInProgressError
        If the view is already being exported.
    """
    if view.is_printing:
        raise ExportInProgressError(f"An export of {view.customer_id!r} is already running")

    original_max_height = view.max_height
    original_overflow_y = view.overflow_y
    view.is_printing = True
    view.max_height = PRINT_MAX_HEIGHT
    view.overflow_y = PRINT_OVERFLOW_Y
    try:
        yield view
    finally:
        view.max_height = original_max_height
        view.overflow_y = original_overflow_y
        view.is_printing = False


def render_chart_image(history: CustomerHistory, options: DocumentOptions) -> bytes:
    """Pie chart of transactions per month, encoded as JPEG."""
    months = [row.month for row in history.summary]
    counts = [row.transaction_count for row in history.summary]
    palette = [CHART_COLORS[i % len(CHART_COLORS)] for i in range(len(months))]

    fig, ax = plt.subplots(figsize=(6, 2.5))
    try:
        ax.pie(
            counts,
            labels=[str(count) for count in counts],
            colors=palette,
            startangle=90,
            counterclock=False,
        )
        ax.legend(months, loc="center left", bbox_to_anchor=(1.0, 0.5), frameon=False)
        ax.axis("equal")
        buffer = io.BytesIO()
        fig.savefig(
            buffer,
            format="jpeg",
            dpi=72 * options.render_scale,
            bbox_inches="tight",
            pil_kwargs={"quality": max(1, round(options.image_quality * 100))},
        )
    finally:
        plt.close(fig)
    return buffer.getvalue()


def _detail_table(row: MonthlySummary, width: float) -> Table:
    def joined(values: list[str]) -> str:
        return ", ".join(values) or "-"

    data = [
        ["Sales Rep", joined(row.sales_reps)],
        ["Estimator", joined(row.estimators)],
        ["CSR", joined(row.csrs)],
        ["Created By", joined(row.creators)],
    ]
    tbl = Table(data, colWidths=[1.2 * inch, width - 1.2 * inch])
    tbl.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("ROWBACKGROUNDS", (0, 0), (-1, -1), [colors.whitesmoke, colors.white]),
            ]
        )
    )
    return tbl


def _order_table(row: MonthlySummary, width: float) -> Table:
    data = [["SO#", "Date"]]
    data.extend([order, day] for order, day in zip(row.order_list, row.dates))
    tbl = Table(data, colWidths=[width / 2, width / 2], repeatRows=1)
    tbl.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
            ]
        )
    )
    return tbl


def render_history_pdf(
    history: CustomerHistory,
    output_path: str | Path,
    options: DocumentOptions | None = None,
    *,
    title: str | None = None,
    currency: str = DEFAULT_CURRENCY,
    show_order_list: bool = True,
) -> Path:
    """Write the monthly history of one customer to a PDF file.

    The document holds a title, a pie chart of transactions per month, one
    section per month with its count, revenue and people involved (and the
    SO#/date listing when ``show_order_list`` is set), then the total
    transaction count. Long histories flow onto additional pages.
    """
    options = options or DocumentOptions()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    margin = options.margin_in * inch
    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=options.pagesize,
        leftMargin=margin,
        rightMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=title or f"Transaction History: {history.customer_id}",
    )
    styles = getSampleStyleSheet()
    width = doc.width

    story = []
    story.append(
        Paragraph(escape(title or f"Transaction History: {history.customer_id}"), styles["Title"])
    )
    story.append(Spacer(1, 0.06 * inch))
    story.append(
        Paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}", styles["Normal"])
    )
    story.append(Spacer(1, 0.12 * inch))

    if history.is_empty:
        story.append(Paragraph("No dated transactions found for this customer.", styles["Normal"]))
    else:
        chart = render_chart_image(history, options)
        story.append(Image(io.BytesIO(chart), width=width, height=width * 2.5 / 6, kind="proportional"))
        story.append(Spacer(1, 0.12 * inch))

    for row in history.summary:
        story.append(
            Paragraph(
                f"<b>{escape(row.month)}</b> &nbsp; {row.transaction_count} Transactions"
                f" &nbsp; {escape(format_currency(row.total_sales, currency))}",
                styles["Heading3"],
            )
        )
        story.append(Spacer(1, 0.03 * inch))
        if show_order_list:
            story.append(_order_table(row, width))
            story.append(Spacer(1, 0.05 * inch))
        story.append(_detail_table(row, width))
        story.append(Spacer(1, 0.12 * inch))

    story.append(
        Paragraph(f"<b>Total Transactions: {history.total_transactions}</b>", styles["Normal"])
    )
    doc.build(story)
    return output_path


async def export_history_pdf(
    view: DetailView,
    history: CustomerHistory,
    output_dir: str | Path = ".",
    options: DocumentOptions | None = None,
    *,
    currency: str = DEFAULT_CURRENCY,
) -> Path:
    """Export the detail view's history to ``<name>_transaction_history.pdf``.

    Rendering runs in a worker thread. The view stays in print mode for the
    duration and its layout is restored before this coroutine returns or
    raises.

    Raises
    ------
    ExportInProgressError
        If the view is already being exported.
    ExportError
        If rendering or writing the document fails.
    """
    output_path = Path(output_dir) / document_filename(view.customer_id or history.customer_id)
    async with print_mode(view):
        logger.info("pdf_export_started", customer=view.customer_id, path=str(output_path))
        try:
            written = await asyncio.to_thread(
                render_history_pdf,
                history,
                output_path,
                options,
                title=f"Transaction History: {view.customer_id}",
                currency=currency,
                show_order_list=view.show_order_list,
            )
        except Exception as exc:
            logger.error("pdf_export_failed", customer=view.customer_id, error=str(exc))
            raise ExportError(f"PDF export failed for {view.customer_id!r}: {exc}") from exc
    logger.info("pdf_export_finished", customer=view.customer_id, path=str(written))
    return written
