"""Report rows, raw transaction records and the snapshot that holds them.

An upload response carries two ordered sequences: per-customer metrics
computed upstream (``data``) and the raw orders they were computed from
(``orders``). Both are validated here and frozen into a :class:`Snapshot`
that every derived view reads from. Metric values are kept numeric;
formatting happens only at display time.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ltv_report.errors import PayloadError
from ltv_report.foundation.values import (
    DEFAULT_CURRENCY,
    collation_key,
    display_text,
    format_currency,
    format_retention,
    is_number,
    parse_amount,
    parse_calendar_date,
    to_number,
)

logger = logging.getLogger(__name__)

#: Row-object field names, in display and export order.
REPORT_FIELDS = (
    "CustomerID",
    "TotalRevenue",
    "AvgSale",
    "AvgRetention",
    "PurchaseFrequency",
    "LTV",
)

#: Column headers shown to people for the row-object fields.
DISPLAY_HEADERS = {
    "CustomerID": "Customer Name",
    "TotalRevenue": "TotalRevenue",
    "AvgSale": "AvgSale",
    "AvgRetention": "Avg retention per month",
    "PurchaseFrequency": "# transactions",
    "LTV": "LTV",
}

MONETARY_FIELDS = frozenset({"TotalRevenue", "AvgSale", "LTV"})

# Wire names of the raw order fields.
CUSTOMER = "Customer"
ORDER_NUMBER = "SO#"
ORDER_DATE = "Sales Order Date"
TOTAL = "Total"
SALES_REP = "Sales Rep"
CSR = "CSR"
ESTIMATOR = "Estimator"
CREATED_BY = "Created By"


@dataclass(frozen=True)
class ReportRow:
    """Upstream-computed lifetime value metrics for one customer.

    Attributes
    ----------
    customer_id:
        Customer display name, unique within a snapshot.
    total_revenue, avg_sale, ltv:
        Monetary metrics.
    avg_retention:
        Average monthly retention.
    purchase_frequency:
        Number of transactions.

    Any metric that could not be parsed from the payload is NaN, the
    explicit "unavailable" marker.
    """

    customer_id: str
    total_revenue: float
    avg_sale: float
    avg_retention: float
    purchase_frequency: float
    ltv: float

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ReportRow":
        return cls(
            customer_id=str(payload.get("CustomerID", "")),
            total_revenue=to_number(payload.get("TotalRevenue")),
            avg_sale=to_number(payload.get("AvgSale")),
            avg_retention=to_number(payload.get("AvgRetention")),
            purchase_frequency=to_number(payload.get("PurchaseFrequency")),
            ltv=to_number(payload.get("LTV")),
        )

    def as_dict(self) -> dict[str, Any]:
        """Row-object used by search, sort and export."""
        return {
            "CustomerID": self.customer_id,
            "TotalRevenue": self.total_revenue,
            "AvgSale": self.avg_sale,
            "AvgRetention": self.avg_retention,
            "PurchaseFrequency": self.purchase_frequency,
            "LTV": self.ltv,
        }

    def display_dict(self, currency: str = DEFAULT_CURRENCY) -> dict[str, str]:
        return display_row(self.as_dict(), currency=currency)


def display_row(row: Mapping[str, Any], currency: str = DEFAULT_CURRENCY) -> dict[str, str]:
    """Format a row-object for presentation without touching its values."""
    shown: dict[str, str] = {}
    for key, value in row.items():
        if key in MONETARY_FIELDS:
            shown[key] = format_currency(value, currency)
        elif key == "AvgRetention":
            shown[key] = format_retention(value)
        elif key == "PurchaseFrequency":
            shown[key] = display_text(to_number(value)) if is_number(value) else format_retention(value)
        else:
            shown[key] = "" if value is None else str(value)
    return shown


@dataclass(frozen=True)
class TransactionRecord:
    """One raw order as delivered by the upload service.

    ``order_date`` and ``total`` keep the raw values; use
    :meth:`parsed_date` and :meth:`amount` for interpreted ones.
    """

    customer: str
    order_number: str
    order_date: Any
    total: Any
    sales_rep: str = ""
    csr: str = ""
    estimator: str = ""
    created_by: str = ""

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TransactionRecord":
        def text(key: str) -> str:
            value = payload.get(key)
            return "" if value is None else str(value)

        return cls(
            customer=text(CUSTOMER),
            order_number=text(ORDER_NUMBER),
            order_date=payload.get(ORDER_DATE),
            total=payload.get(TOTAL),
            sales_rep=text(SALES_REP),
            csr=text(CSR),
            estimator=text(ESTIMATOR),
            created_by=text(CREATED_BY),
        )

    def parsed_date(self) -> date | None:
        return parse_calendar_date(self.order_date)

    def amount(self) -> float:
        return parse_amount(self.total)

    def date_text(self) -> str:
        if isinstance(self.order_date, (date, datetime)):
            return self.order_date.isoformat()
        return "" if self.order_date is None else str(self.order_date)

    def as_dict(self) -> dict[str, Any]:
        return {
            CUSTOMER: self.customer,
            ORDER_NUMBER: self.order_number,
            ORDER_DATE: self.order_date,
            TOTAL: self.total,
            SALES_REP: self.sales_rep,
            CSR: self.csr,
            ESTIMATOR: self.estimator,
            CREATED_BY: self.created_by,
        }


_snapshot_versions = itertools.count(1)


@dataclass(frozen=True)
class Snapshot:
    """Immutable pair of report rows and transactions from one upload."""

    version: int
    report_rows: tuple[ReportRow, ...] = ()
    transactions: tuple[TransactionRecord, ...] = ()
    loaded_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls(version=0)

    @classmethod
    def build(
        cls,
        report_rows: Iterable[ReportRow],
        transactions: Iterable[TransactionRecord],
    ) -> "Snapshot":
        """Create a snapshot with a fresh version number.

        Report rows are ordered by customer name; duplicate customers are
        rejected.
        """
        rows = sorted(report_rows, key=lambda row: collation_key(row.customer_id))
        seen: set[str] = set()
        for row in rows:
            if row.customer_id in seen:
                raise PayloadError(
                    f"Duplicate CustomerID in report payload: {row.customer_id!r}"
                )
            seen.add(row.customer_id)
        return cls(
            version=next(_snapshot_versions),
            report_rows=tuple(rows),
            transactions=tuple(transactions),
        )

    @property
    def is_empty(self) -> bool:
        return not self.report_rows

    def row_dicts(self) -> list[dict[str, Any]]:
        return [row.as_dict() for row in self.report_rows]

    def find_row(self, customer_id: str) -> ReportRow | None:
        for row in self.report_rows:
            if row.customer_id == customer_id:
                return row
        return None


class UploadPayload(BaseModel):
    """Body of a successful upload response."""

    model_config = ConfigDict(extra="ignore")

    data: list[dict[str, Any]] = Field(
        default_factory=list, description="Per-customer metric objects"
    )
    orders: list[dict[str, Any]] = Field(
        default_factory=list, description="Raw transaction objects"
    )

    @field_validator("orders", mode="before")
    @classmethod
    def _missing_orders(cls, value: Any) -> Any:
        return [] if value is None else value


def parse_upload_payload(payload: Any) -> Snapshot:
    """Validate an upload response body and freeze it into a snapshot.

    Raises
    ------
    PayloadError
        If the body is not an object with list-valued ``data``/``orders``
        entries made of objects, or if a customer appears twice.
    """
    try:
        body = UploadPayload.model_validate(payload)
    except ValidationError as exc:
        raise PayloadError(f"Malformed upload payload: {exc.error_count()} error(s)") from exc

    rows = [ReportRow.from_mapping(item) for item in body.data]
    transactions = [TransactionRecord.from_mapping(item) for item in body.orders]
    snapshot = Snapshot.build(rows, transactions)
    logger.info(
        "Parsed upload payload: %d report rows, %d transactions (snapshot v%d)",
        len(rows),
        len(transactions),
        snapshot.version,
    )
    return snapshot
