"""Text formatters for presenting report views and customer histories."""

from ltv_report.formatters.markdown_tables import (
    format_history_table,
    format_pagination,
    format_report_table,
)

__all__ = [
    "format_history_table",
    "format_pagination",
    "format_report_table",
]
