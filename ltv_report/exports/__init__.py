"""Export artifacts: CSV text of the report view and PDF customer histories."""

from .document import (
    DetailView,
    DocumentOptions,
    document_filename,
    export_history_pdf,
    print_mode,
    render_history_pdf,
    safe_filename,
)
from .tabular import DEFAULT_CSV_FILENAME, export_rows_csv, rows_to_csv

__all__ = [
    "DEFAULT_CSV_FILENAME",
    "DetailView",
    "DocumentOptions",
    "document_filename",
    "export_history_pdf",
    "export_rows_csv",
    "print_mode",
    "render_history_pdf",
    "rows_to_csv",
    "safe_filename",
]
