"""Type-aware comparison and stable single-key sorting of report rows.

Two cell values compare numerically when both parse to finite numbers and
by locale-aware text ordering otherwise, so a column of numeric strings
sorts as numbers while a column of names sorts alphabetically.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Mapping, Sequence, TypeVar

from ltv_report.foundation.values import collation_key, to_number

Row = TypeVar("Row", bound=Mapping[str, Any])


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison returning -1, 0 or 1.

    Examples
    --------
    >>> compare_values("10", "9")
    1
    >>> compare_values("apple", "Banana")
    -1
    """
    a_num = to_number(a)
    b_num = to_number(b)
    if not math.isnan(a_num) and not math.isnan(b_num):
        return (a_num > b_num) - (a_num < b_num)
    a_key = collation_key(a)
    b_key = collation_key(b)
    return (a_key > b_key) - (a_key < b_key)


def sort_rows(rows: Sequence[Row], key: str, ascending: bool = True) -> list[Row]:
    """Return ``rows`` ordered by the values at ``key``.

    An empty ``key`` leaves the order untouched. The sort is stable in both
    directions: rows that compare equal keep their input order, so
    descending is the comparator's sign flipped rather than a reversal.
    Rows lacking ``key`` sort as empty text.
    """
    if not key:
        return list(rows)
    sign = 1 if ascending else -1

    def compare_rows(left: Row, right: Row) -> int:
        return sign * compare_values(left.get(key), right.get(key))

    return sorted(rows, key=cmp_to_key(compare_rows))


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction."""

    key: str = ""
    ascending: bool = True

    def select(self, key: str) -> "SortState":
        """Click on a column header.

        Re-selecting the active column toggles direction; a different
        column starts ascending.
        """
        if key == self.key:
            return SortState(key=key, ascending=not self.ascending)
        return SortState(key=key, ascending=True)

    def apply(self, rows: Sequence[Row]) -> list[Row]:
        return sort_rows(rows, self.key, self.ascending)

    @property
    def indicator(self) -> str:
        if not self.key:
            return ""
        return "▲" if self.ascending else "▼"
