"""Command line entry points for the LTV report."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ltv_report.config import Settings, load_settings
from ltv_report.errors import LTVReportError
from ltv_report.exports.tabular import DEFAULT_CSV_FILENAME
from ltv_report.foundation.records import REPORT_FIELDS, Snapshot, parse_upload_payload
from ltv_report.formatters.markdown_tables import (
    format_history_table,
    format_report_table,
)
from ltv_report.logging_config import configure_logging
from ltv_report.query.pagination import PAGE_SIZES
from ltv_report.query.state import QueryState
from ltv_report.session import ReportSession
from ltv_report.upload import HttpUploader

logger = logging.getLogger(__name__)


MAX_INPUT_BYTES = 25 * 1024 * 1024  # 25 MiB cap to avoid accidental OOM


def _load_snapshot(path: Path) -> Snapshot:
    resolved = path.resolve()
    size = resolved.stat().st_size
    if size > MAX_INPUT_BYTES:
        raise ValueError(
            f"Input file {resolved} is {size} bytes; exceeds limit of {MAX_INPUT_BYTES} bytes"
        )
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    return parse_upload_payload(payload)


def _session_for(path: Path, settings: Settings) -> ReportSession:
    session = ReportSession(settings)
    session.install_snapshot(_load_snapshot(path))
    return session


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--search", default="", help="Case-insensitive substring filter")
    parser.add_argument(
        "--sort",
        choices=REPORT_FIELDS,
        default="",
        help="Column to sort by (default: payload order)",
    )
    parser.add_argument(
        "--descending", action="store_true", help="Sort in descending order"
    )


def _query_state(args: argparse.Namespace, settings: Settings) -> QueryState:
    state = QueryState(
        search=args.search,
        sort_key=args.sort,
        ascending=not args.descending,
        page_size=getattr(args, "page_size", None) or settings.default_page_size,
    )
    # Pages below 1 become 1; pages past the end are clamped by the view.
    return state.with_page(getattr(args, "page", 1))


def _table_command(args: argparse.Namespace, settings: Settings) -> int:
    session = _session_for(args.payload, settings)
    session.state = _query_state(args, settings)
    print(format_report_table(session.view(), currency=settings.currency), end="")
    return 0


def _history_command(args: argparse.Namespace, settings: Settings) -> int:
    session = _session_for(args.payload, settings)
    try:
        history = session.select_customer(args.customer)
    except KeyError:
        logger.error(f"Customer {args.customer!r} not found in {args.payload}")
        return 1

    print(format_history_table(history, currency=settings.currency), end="")
    if args.pdf:
        written = asyncio.run(session.export_pdf(args.pdf))
        logger.info(f"Transaction history exported to {written}")
    return 0


def _export_csv_command(args: argparse.Namespace, settings: Settings) -> int:
    session = _session_for(args.payload, settings)
    session.state = _query_state(args, settings)
    written = session.export_csv(args.output)
    logger.info(f"Report exported to {written}")
    return 0


def _upload_command(args: argparse.Namespace, settings: Settings) -> int:
    uploader = HttpUploader(settings.api_url, timeout=settings.upload_timeout)
    body: Any = asyncio.run(uploader.upload(args.input))
    snapshot = parse_upload_payload(body)
    logger.info(
        f"Upload produced {len(snapshot.report_rows)} customers "
        f"and {len(snapshot.transactions)} transactions"
    )

    if args.output:
        output_path = args.output
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as fh:
            json.dump(body, fh, indent=2)
    else:  # stdout fallback enables piping in shell usage.
        json.dump(body, fp=sys.stdout, indent=2)
        print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ltv-report",
        description="Browse and export customer lifetime value reports",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    table = subparsers.add_parser("table", help="Print one page of the report")
    table.add_argument("payload", type=Path, help="Path to an upload response JSON file")
    _add_query_arguments(table)
    table.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    table.add_argument(
        "--page-size",
        type=int,
        choices=PAGE_SIZES,
        help="Rows per page (default: LTV_DEFAULT_PAGE_SIZE)",
    )
    table.set_defaults(handler=_table_command)

    history = subparsers.add_parser(
        "history", help="Print a customer's monthly transaction history"
    )
    history.add_argument("payload", type=Path, help="Path to an upload response JSON file")
    history.add_argument("customer", help="Customer name as shown in the report")
    history.add_argument(
        "--pdf",
        type=Path,
        metavar="DIR",
        help="Also export the history as a PDF into this directory",
    )
    history.set_defaults(handler=_history_command)

    export_csv = subparsers.add_parser(
        "export-csv", help="Write the filtered and sorted report to CSV"
    )
    export_csv.add_argument("payload", type=Path, help="Path to an upload response JSON file")
    _add_query_arguments(export_csv)
    export_csv.add_argument(
        "--output",
        type=Path,
        default=Path(DEFAULT_CSV_FILENAME),
        help=f"Output CSV path (default: {DEFAULT_CSV_FILENAME})",
    )
    export_csv.set_defaults(handler=_export_csv_command)

    upload = subparsers.add_parser(
        "upload", help="Send a sales CSV to the report service"
    )
    upload.add_argument("input", type=Path, help="Path to the sales CSV file")
    upload.add_argument(
        "--output",
        type=Path,
        help="Optional path for writing the response payload as JSON.",
    )
    upload.set_defaults(handler=_upload_command)

    return parser


def cli(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Run one command and return its exit code."""
    args = build_parser().parse_args(argv)
    settings = settings or load_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    try:
        return args.handler(args, settings)
    except LTVReportError as exc:
        logger.error(str(exc))
        return 1


def main() -> None:
    raise SystemExit(cli())


if __name__ == "__main__":  # pragma: no cover
    main()
