"""CSV export of the currently filtered and sorted report rows."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

import pandas as pd

from ltv_report.errors import NothingToExportError

logger = logging.getLogger(__name__)

DEFAULT_CSV_FILENAME = "ltv_report.csv"


def _export_cell(value: Any) -> Any:
    """Whole-number floats are written without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def rows_to_dataframe(rows: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Tabulate row-objects, keeping their field order as column order.

    Columns keep Python objects so a count such as ``3.0`` exports as
    ``3``, the same text search and display use.

    Raises
    ------
    NothingToExportError
        If ``rows`` is empty.
    """
    if not rows:
        raise NothingToExportError()
    records = [{key: _export_cell(value) for key, value in row.items()} for row in rows]
    return pd.DataFrame(records, dtype=object)


def rows_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """Render rows as CSV text.

    The header is the first row's field names in iteration order (fields
    that only appear in later rows are appended). Values are quoted only
    when they contain a delimiter, quote or line break; lines end with
    CRLF. Unavailable (NaN) metrics become empty cells.

    Examples
    --------
    >>> rows_to_csv([{"CustomerID": "Acme, Inc.", "LTV": 12.5}])
    'CustomerID,LTV\\r\\n"Acme, Inc.",12.5\\r\\n'
    """
    frame = rows_to_dataframe(rows)
    return frame.to_csv(index=False, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL)


def export_rows_csv(
    rows: Sequence[Mapping[str, Any]],
    output_path: str | Path = DEFAULT_CSV_FILENAME,
) -> Path:
    """Write rows to a UTF-8 CSV file and return its path.

    Parameters
    ----------
    rows:
        The filtered and sorted view, e.g. ``ReportView.filtered``.
    output_path:
        Destination file; parent directories are created.

    Raises
    ------
    NothingToExportError
        If ``rows`` is empty. No file is written in that case.
    """
    text = rows_to_csv(rows)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)

    logger.info(f"Exported {len(rows)} rows to {output_path}")
    return output_path
