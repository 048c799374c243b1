"""Per-customer drill-down of raw transactions by calendar month."""

from .monthly import (
    CustomerHistory,
    MonthlySummary,
    OrderedDistinct,
    group_customer_transactions,
    month_key,
    normalise_customer,
)

__all__ = [
    "CustomerHistory",
    "MonthlySummary",
    "OrderedDistinct",
    "group_customer_transactions",
    "month_key",
    "normalise_customer",
]
