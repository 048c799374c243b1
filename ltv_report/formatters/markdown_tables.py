"""Markdown table formatters for report views and customer histories.

Used by the command line to print the current report page and a
customer's monthly drill-down in a form any markdown renderer displays.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Sequence

from ltv_report.foundation.records import DISPLAY_HEADERS, display_row
from ltv_report.foundation.values import DEFAULT_CURRENCY, format_currency

if TYPE_CHECKING:
    from ltv_report.history.monthly import CustomerHistory
    from ltv_report.query.view import ReportView


def _cell(value: Any) -> str:
    text = "" if value is None else str(value)
    return text.replace("|", "\\|").replace("\n", " ")


def _table(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    lines = [
        "| " + " | ".join(_cell(h) for h in headers) + " |",
        "|" + "|".join("-" * (len(_cell(h)) + 2) for h in headers) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_cell(value) for value in row) + " |")
    return "\n".join(lines) + "\n"


def format_pagination(view: ReportView) -> str:
    """Navigation line such as ``Page 2 of 7: 1 2 [3] 4 ... 7``."""
    page = view.page
    markers = " ".join(
        f"[{marker}]" if marker == page.page else str(marker) for marker in page.page_numbers
    )
    return f"Page {page.page} of {page.total_pages} ({page.total_rows:,} rows): {markers}"


def format_report_table(view: ReportView, currency: str = DEFAULT_CURRENCY) -> str:
    """Format the visible page of the report as a markdown table.

    Monetary columns are shown as currency and retention with two decimals;
    the active sort column carries a direction arrow.
    """
    if view.is_empty:
        if view.state.search:
            return f"No customers match {view.state.search!r}.\n"
        return "No report data loaded.\n"

    sort = view.state.sort
    headers = []
    for key in view.columns:
        label = DISPLAY_HEADERS.get(key, key)
        if key == sort.key:
            label = f"{label} {sort.indicator}"
        headers.append(label)

    body = []
    for row in view.page.rows:
        shown = display_row(row, currency=currency)
        body.append([shown[key] for key in view.columns])

    return _table(headers, body) + "\n" + format_pagination(view) + "\n"


def format_history_table(
    history: CustomerHistory,
    currency: str = DEFAULT_CURRENCY,
    show_order_list: bool = True,
) -> str:
    """Format a customer's monthly history as markdown.

    One summary table lists every month; when ``show_order_list`` is set a
    section per month lists its SO# and dates.
    """
    table = f"## Transaction History: {history.customer_id}\n\n"
    if history.is_empty:
        return table + "No dated transactions found for this customer.\n"

    def joined(values: list[str]) -> str:
        return ", ".join(values) or "-"

    table += _table(
        ["Month", "Transactions", "Total Sales", "Sales Rep", "Estimator", "CSR", "Created By"],
        (
            [
                row.month,
                f"{row.transaction_count:,}",
                format_currency(row.total_sales, currency),
                joined(row.sales_reps),
                joined(row.estimators),
                joined(row.csrs),
                joined(row.creators),
            ]
            for row in history.summary
        ),
    )

    if show_order_list:
        for row in history.summary:
            table += f"\n### {row.month}\n\n"
            table += _table(["SO#", "Date"], zip(row.order_list, row.dates))

    table += f"\n**Total Transactions:** {history.total_transactions:,}\n"
    return table
