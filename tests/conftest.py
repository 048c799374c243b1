"""Shared pytest fixtures for the test suite."""

from __future__ import annotations

import logging
from typing import Any

import pytest
import structlog

from ltv_report.config import Settings
from ltv_report.foundation.records import Snapshot, parse_upload_payload


@pytest.fixture
def report_data() -> list[dict[str, Any]]:
    return [
        {
            "CustomerID": "Globex",
            "TotalRevenue": 5400.0,
            "AvgSale": 1800.0,
            "AvgRetention": 0.75,
            "PurchaseFrequency": 3,
            "LTV": 8100.0,
        },
        {
            "CustomerID": "Acme",
            "TotalRevenue": "1200.50",
            "AvgSale": "600.25",
            "AvgRetention": "1.5",
            "PurchaseFrequency": "2",
            "LTV": "2401",
        },
        {
            "CustomerID": "Initech",
            "TotalRevenue": 300,
            "AvgSale": 300,
            "AvgRetention": 0.0,
            "PurchaseFrequency": 1,
            "LTV": "n/a",
        },
    ]


@pytest.fixture
def orders() -> list[dict[str, Any]]:
    return [
        {
            "Customer": "Acme",
            "SO#": "100",
            "Sales Order Date": "2024-02-15",
            "Total": "250.50",
            "Sales Rep": "Jane",
            "CSR": "Omar",
            "Estimator": "Lee",
            "Created By": "Jane",
        },
        {
            "Customer": "acme ",
            "SO#": "101",
            "Sales Order Date": "2024-02-20",
            "Total": "bad",
            "Sales Rep": "Jane",
            "CSR": "Omar",
            "Estimator": "Kim",
            "Created By": "Omar",
        },
        {
            "Customer": "Acme",
            "SO#": "102",
            "Sales Order Date": "2024-04-02",
            "Total": "950.00",
            "Sales Rep": "Raj",
        },
        {
            "Customer": "Globex",
            "SO#": "200",
            "Sales Order Date": "2024-01-10",
            "Total": 1800,
            "Sales Rep": "Ana",
        },
    ]


@pytest.fixture
def payload(report_data, orders) -> dict[str, Any]:
    return {"data": report_data, "orders": orders}


@pytest.fixture
def snapshot(payload) -> Snapshot:
    return parse_upload_payload(payload)


@pytest.fixture
def settings() -> Settings:
    return Settings(view_cache_size=8)


@pytest.fixture
def many_rows() -> list[dict[str, Any]]:
    """23 row-objects with distinct names and descending revenue."""
    return [
        {"CustomerID": f"Customer {i:02d}", "TotalRevenue": 1000 - i, "LTV": i % 4}
        for i in range(23)
    ]


@pytest.fixture
def reset_logging():
    """Undo global logging changes made by ``configure_logging``."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
