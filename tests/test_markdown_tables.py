"""Test markdown formatters for report views and customer histories."""

from ltv_report.formatters.markdown_tables import (
    format_history_table,
    format_pagination,
    format_report_table,
)
from ltv_report.foundation.records import ReportRow, Snapshot
from ltv_report.history.monthly import CustomerHistory, group_customer_transactions
from ltv_report.query.state import QueryState
from ltv_report.query.view import derive_report_view


class TestReportTable:
    """Markdown rendering of the report page."""

    def test_headers_and_formatted_values(self, snapshot):
        """Headers and currency formatted cells."""
        view = derive_report_view(snapshot, QueryState())

        table = format_report_table(view)

        assert "| Customer Name | TotalRevenue | AvgSale | Avg retention per month |" in table
        assert "# transactions" in table
        assert "| Acme | CA$1,200.50 | CA$600.25 | 1.50 | 2 | CA$2,401.00 |" in table
        assert "| Initech | CA$300.00 | CA$300.00 | 0.00 | 1 | N/A |" in table
        assert "Page 1 of 1 (3 rows): [1]" in table

    def test_sort_indicator(self, snapshot):
        """The sorted column shows its direction arrow."""
        view = derive_report_view(snapshot, QueryState(sort_key="LTV", ascending=False))

        table = format_report_table(view, currency="USD")

        assert "LTV ▼" in table
        assert "$8,100.00" in table

    def test_empty_messages(self, snapshot):
        """Empty data and empty searches have their own messages."""
        no_match = derive_report_view(snapshot, QueryState(search="zzz"))
        no_data = derive_report_view(Snapshot.empty(), QueryState())

        assert format_report_table(no_match) == "No customers match 'zzz'.\n"
        assert format_report_table(no_data) == "No report data loaded.\n"

    def test_pipes_are_escaped(self):
        """Pipe characters in cells are escaped."""
        snapshot = Snapshot.build([ReportRow("A|B", 1, 1, 1, 1, 1)], [])

        table = format_report_table(derive_report_view(snapshot, QueryState()))

        assert "A\\|B" in table


def test_format_pagination_marks_current_page():
    """The current page is bracketed in the page list."""
    rows = [ReportRow(f"C{i:02d}", i, i, i, i, i) for i in range(60)]
    view = derive_report_view(Snapshot.build(rows, []), QueryState(page=6, page_size=5))

    assert format_pagination(view) == "Page 6 of 12 (60 rows): 1 ... 5 [6] 7 ... 12"


class TestHistoryTable:
    """Markdown rendering of a customer history."""

    def test_summary_and_orders(self, orders):
        """Month rows carry counts, totals and orders."""
        history = group_customer_transactions(orders, "Acme")

        table = format_history_table(history)

        assert table.startswith("## Transaction History: Acme")
        assert "| 2024-02 | 2 | CA$250.50 | Jane | Lee, Kim | Omar | Jane, Omar |" in table
        assert "### 2024-04" in table
        assert "| 100 | 2024-02-15 |" in table
        assert table.endswith("**Total Transactions:** 3\n")

    def test_order_list_hidden(self, orders):
        """The order list column can be hidden."""
        history = group_customer_transactions(orders, "Acme")

        table = format_history_table(history, show_order_list=False)

        assert "### 2024-02" not in table
        assert "| 100 | 2024-02-15 |" not in table

    def test_empty_history(self):
        """An empty history says so."""
        table = format_history_table(CustomerHistory(customer_id="Nobody"))

        assert "No dated transactions found for this customer." in table
