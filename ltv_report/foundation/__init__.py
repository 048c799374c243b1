"""Foundational building blocks: cell value normalisation and the
report/transaction records that make up an uploaded snapshot.
"""

from .records import (
    DISPLAY_HEADERS,
    REPORT_FIELDS,
    ReportRow,
    Snapshot,
    TransactionRecord,
    UploadPayload,
    display_row,
    parse_upload_payload,
)
from .values import (
    format_currency,
    format_retention,
    is_number,
    parse_amount,
    parse_calendar_date,
    to_number,
)

__all__ = [
    "DISPLAY_HEADERS",
    "REPORT_FIELDS",
    "ReportRow",
    "Snapshot",
    "TransactionRecord",
    "UploadPayload",
    "display_row",
    "format_currency",
    "format_retention",
    "is_number",
    "parse_amount",
    "parse_calendar_date",
    "parse_upload_payload",
    "to_number",
]
