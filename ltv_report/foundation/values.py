"""Value normalisation for heterogeneous report cells.

Upload payloads mix numbers and numeric strings freely, so every consumer
(search, sort, grouping, display) goes through these helpers instead of
calling ``float()`` directly. Nothing in here raises on bad input.
"""

from __future__ import annotations

import math
import re
import unicodedata
import warnings
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pandas as pd

NAN = float("nan")

# Leading numeric prefix, the same portion a browser's parseFloat consumes.
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_CURRENCY_NOISE = re.compile(r"[A-Z]{0,3}\$|[,€£\s]")
# Text without a four-digit year is not treated as a full date.
_FOUR_DIGIT_YEAR = re.compile(r"(?<!\d)\d{4}(?!\d)")

CURRENCY_LABELS = {
    "CAD": "CA$",
    "USD": "$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
}

DEFAULT_CURRENCY = "CAD"

# Shown for metrics that arrived as the NaN "unavailable" marker.
UNAVAILABLE = "N/A"


def to_number(value: Any) -> float:
    """Return the numeric interpretation of ``value`` or NaN.

    Numbers pass through unchanged (booleans are not numbers). Strings are
    parsed from their leading numeric prefix, so ``"250.50"`` and
    ``"250.50 CAD"`` both give 250.5 while ``"bad"`` gives NaN. Infinite
    results are reported as NaN.

    Examples
    --------
    >>> to_number("1e3")
    1000.0
    >>> math.isnan(to_number(None))
    True
    """
    if isinstance(value, bool) or value is None:
        return NAN
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if match is None:
            return NAN
        number = float(match.group(1))
    else:
        return NAN
    return number if math.isfinite(number) else NAN


def is_number(value: Any) -> bool:
    """True when ``value`` has a finite numeric interpretation."""
    return not math.isnan(to_number(value))


def currency_label(currency: str) -> str:
    currency = currency.upper()
    return CURRENCY_LABELS.get(currency, f"{currency} ")


def format_currency(value: Any, currency: str = DEFAULT_CURRENCY) -> str:
    """Format a monetary value as ``CA$1,234.50``.

    Unparseable values come back as their literal text so a bad cell is
    still visible in the report.
    """
    number = to_number(value)
    if math.isnan(number):
        return _fallback_text(value)
    label = currency_label(currency)
    sign = "-" if number < 0 else ""
    return f"{sign}{label}{abs(number):,.2f}"


def format_retention(value: Any) -> str:
    """Format average monthly retention as a fixed two-decimal figure."""
    number = to_number(value)
    if math.isnan(number):
        return _fallback_text(value)
    return f"{number:.2f}"


def display_text(value: Any) -> str:
    """String form of a cell used for searching and text comparison."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def collation_key(value: Any) -> tuple[str, str]:
    """Sort key approximating locale-aware ordering of display text.

    Accents and case are ignored at the primary level, then the original
    text breaks ties so the ordering stays total.
    """
    text = display_text(value)
    decomposed = unicodedata.normalize("NFKD", text)
    primary = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return primary.casefold(), text


def parse_amount(value: Any) -> float:
    """Monetary amount for aggregation; unparseable or missing gives 0.0.

    Currency labels, thousands separators and accounting-style parentheses
    are tolerated, e.g. ``"(CA$1,200.00)"`` gives -1200.0.
    """
    if isinstance(value, str):
        text = value.strip()
        negative = text.startswith("(") and text.endswith(")")
        if negative:
            text = text[1:-1].strip()
        text = _CURRENCY_NOISE.sub("", text)
        number = to_number(text)
        if negative:
            number = -number
    else:
        number = to_number(value)
    return 0.0 if math.isnan(number) else number


def parse_calendar_date(value: Any) -> date | None:
    """Calendar date of an order as written, or None when it does not parse.

    ISO dates and datetimes are read directly; other common layouts such as
    ``02/15/2024`` or ``Feb 15, 2024`` go through pandas, but only when the
    text carries a four-digit year (``"March"`` or ``"Feb 15"`` give None).
    Timezone offsets are ignored, the wall-clock date is what counts.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    if not _FOUR_DIGIT_YEAR.search(text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def _fallback_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return UNAVAILABLE
    return str(value)
