"""Month-by-month transaction history for a single customer.

Raw orders belonging to the selected customer are bucketed by the calendar
month of their order date. Each bucket keeps its order numbers with their
dates, the revenue sum, and the distinct people involved per role.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping, Union

from ltv_report.foundation.records import TransactionRecord

logger = logging.getLogger(__name__)

Transaction = Union[TransactionRecord, Mapping[str, Any]]


def normalise_customer(value: Any) -> str | None:
    """Matching form of a customer name: trimmed and lowercased."""
    if value is None:
        return None
    return str(value).strip().lower()


def month_key(year: int, month: int) -> str:
    """Bucket key such as ``2024-02``; sorts chronologically as text."""
    return f"{year}-{month:02d}"


class OrderedDistinct:
    """Insertion-ordered set of strings."""

    def __init__(self) -> None:
        self._items: dict[str, None] = {}

    def add(self, value: str) -> None:
        self._items.setdefault(value, None)

    def __len__(self) -> int:
        return len(self._items)

    def to_list(self) -> list[str]:
        return list(self._items)


@dataclass(frozen=True)
class MonthlySummary:
    """Aggregated orders of one customer within one calendar month.

    Attributes
    ----------
    month:
        Bucket key ``YYYY-MM``.
    transaction_count:
        Number of orders in the month.
    total_sales:
        Sum of order totals, unparseable totals counted as zero. Not rounded;
        currency formatting rounds at display time.
    order_list:
        Order numbers in input order.
    dates:
        Order date text, index-aligned with ``order_list``.
    sales_reps, csrs, estimators, creators:
        Distinct people per role in first-seen order.
    """

    month: str
    transaction_count: int
    total_sales: float
    order_list: list[str]
    dates: list[str]
    sales_reps: list[str]
    csrs: list[str]
    estimators: list[str]
    creators: list[str]

    def as_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "transactionCount": self.transaction_count,
            "totalSales": self.total_sales,
            "orderList": list(self.order_list),
            "dates": list(self.dates),
            "salesReps": list(self.sales_reps),
            "csrs": list(self.csrs),
            "estimators": list(self.estimators),
            "creators": list(self.creators),
        }


@dataclass(frozen=True)
class CustomerHistory:
    """All monthly summaries of one customer plus the grand total."""

    customer_id: str
    summary: list[MonthlySummary] = field(default_factory=list)
    total_transactions: int = 0

    @property
    def total_sales(self) -> float:
        total = sum((Decimal(str(row.total_sales)) for row in self.summary), Decimal("0"))
        return float(total)

    @property
    def is_empty(self) -> bool:
        return not self.summary

    def chronological(self) -> list[MonthlySummary]:
        return sorted(self.summary, key=lambda row: row.month)

    def as_dict(self) -> dict[str, Any]:
        return {
            "customerId": self.customer_id,
            "summary": [row.as_dict() for row in self.summary],
            "totalTransactions": self.total_transactions,
        }


@dataclass
class _MonthBucket:
    orders: list[str] = field(default_factory=list)
    dates: list[str] = field(default_factory=list)
    revenue: Decimal = Decimal("0")
    sales_reps: OrderedDistinct = field(default_factory=OrderedDistinct)
    csrs: OrderedDistinct = field(default_factory=OrderedDistinct)
    estimators: OrderedDistinct = field(default_factory=OrderedDistinct)
    creators: OrderedDistinct = field(default_factory=OrderedDistinct)

    def summarise(self, month: str) -> MonthlySummary:
        return MonthlySummary(
            month=month,
            transaction_count=len(self.orders),
            total_sales=float(self.revenue),
            order_list=list(self.orders),
            dates=list(self.dates),
            sales_reps=self.sales_reps.to_list(),
            csrs=self.csrs.to_list(),
            estimators=self.estimators.to_list(),
            creators=self.creators.to_list(),
        )


def _as_record(txn: Transaction) -> TransactionRecord:
    if isinstance(txn, TransactionRecord):
        return txn
    return TransactionRecord.from_mapping(txn)


def group_customer_transactions(
    transactions: Iterable[Transaction],
    customer_id: Any,
    *,
    include_blank_actors: bool = True,
) -> CustomerHistory:
    """Bucket one customer's orders by calendar month.

    Parameters
    ----------
    transactions:
        The full transaction list of the snapshot, as records or as raw
        mappings with the upload field names.
    customer_id:
        Customer to select. Matching ignores case and surrounding
        whitespace on both sides.
    include_blank_actors:
        Keep empty role values as ``""`` entries in the distinct lists.

    Returns
    -------
    CustomerHistory
        Summaries in the order their month was first seen, and the total
        order count across all months. Orders whose date does not parse are
        left out of every bucket.

    Examples
    --------
    >>> orders = [
    ...     {"Customer": "Acme", "SO#": "100", "Sales Order Date": "2024-02-15",
    ...      "Total": "250.50", "Sales Rep": "Jane"},
    ...     {"Customer": "acme ", "SO#": "101", "Sales Order Date": "2024-02-20",
    ...      "Total": "bad", "Sales Rep": "Jane"},
    ... ]
    >>> history = group_customer_transactions(orders, "Acme")
    >>> [(row.month, row.transaction_count, row.total_sales) for row in history.summary]
    [('2024-02', 2, 250.5)]
    """
    target = normalise_customer(customer_id)
    display_name = "" if customer_id is None else str(customer_id)
    if target is None:
        return CustomerHistory(customer_id=display_name)

    buckets: dict[str, _MonthBucket] = {}
    skipped = 0
    for txn in transactions:
        record = _as_record(txn)
        if normalise_customer(record.customer) != target:
            continue
        order_date = record.parsed_date()
        if order_date is None:
            skipped += 1
            continue

        key = month_key(order_date.year, order_date.month)
        bucket = buckets.setdefault(key, _MonthBucket())
        bucket.orders.append(record.order_number)
        bucket.dates.append(record.date_text())
        bucket.revenue += Decimal(str(record.amount()))
        for role, value in (
            (bucket.sales_reps, record.sales_rep),
            (bucket.csrs, record.csr),
            (bucket.estimators, record.estimator),
            (bucket.creators, record.created_by),
        ):
            if value or include_blank_actors:
                role.add(value)

    if skipped:
        logger.debug(
            "Skipped %d order(s) for %r with unparseable dates", skipped, display_name
        )

    summary = [bucket.summarise(month) for month, bucket in buckets.items()]
    return CustomerHistory(
        customer_id=display_name,
        summary=summary,
        total_transactions=sum(row.transaction_count for row in summary),
    )
