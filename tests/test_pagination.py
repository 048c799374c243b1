import math

import pytest

from ltv_report.query.pagination import (
    ELLIPSIS,
    PAGE_SIZES,
    clamp_page,
    page_numbers,
    paginate,
    total_pages,
)


@pytest.mark.parametrize("page_size", PAGE_SIZES)
def test_pages_reconstruct_rows(many_rows, page_size):
    """Concatenating every page gives back all rows in order."""
    pages = total_pages(len(many_rows), page_size)
    rebuilt = []
    for number in range(1, pages + 1):
        rebuilt.extend(paginate(many_rows, number, page_size).rows)

    assert rebuilt == many_rows
    assert pages == math.ceil(len(many_rows) / page_size)


def test_total_pages_minimum_one():
    """There is always at least one page."""
    assert total_pages(0, 10) == 1
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


@pytest.mark.parametrize("page_size", [0, 7, 100])
def test_page_size_must_be_offered(page_size):
    """Page sizes outside the offered choices are rejected."""
    with pytest.raises(ValueError, match="Page size"):
        total_pages(10, page_size)


def test_negative_row_count_rejected():
    """A negative row count is an error."""
    with pytest.raises(ValueError):
        total_pages(-1, 10)


def test_clamp_page():
    """Pages are clamped into the valid range."""
    assert clamp_page(5, 2) == 2
    assert clamp_page(0, 2) == 1
    assert clamp_page(3, 0) == 1


def test_paginate_clamps_out_of_range_page(many_rows):
    """A page past the end shows the last page."""
    page = paginate(many_rows[:12], 5, 10)

    assert page.page == 2
    assert page.total_pages == 2
    assert page.rows == many_rows[10:12]
    assert page.first_index == 10
    assert page.has_previous
    assert not page.has_next


def test_empty_rows_give_single_empty_page():
    """No rows means one empty page."""
    page = paginate([], 3, 5)

    assert page.page == 1
    assert page.rows == []
    assert page.total_rows == 0
    assert page.page_numbers == [1]


class TestPageNumbers:
    """Page number markers for navigation."""

    def test_short_lists_are_complete(self):
        """Few pages are all listed."""
        assert page_numbers(1, 1) == [1]
        assert page_numbers(3, 5) == [1, 2, 3, 4, 5]

    def test_middle_page(self):
        """Pages around the current one sit between ellipses."""
        assert page_numbers(5, 10) == [1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10]

    def test_near_the_edges(self):
        """Near the ends only one ellipsis appears."""
        assert page_numbers(1, 10) == [1, 2, ELLIPSIS, 10]
        assert page_numbers(2, 10) == [1, 2, 3, ELLIPSIS, 10]
        assert page_numbers(3, 10) == [1, 2, 3, 4, ELLIPSIS, 10]
        assert page_numbers(9, 10) == [1, ELLIPSIS, 8, 9, 10]
        assert page_numbers(10, 10) == [1, ELLIPSIS, 9, 10]

    def test_no_duplicate_pages(self):
        """No page number is listed twice."""
        for pages in range(1, 15):
            for current in range(1, pages + 1):
                numbers = [m for m in page_numbers(current, pages) if m != ELLIPSIS]
                assert numbers == sorted(set(numbers))
                assert current in numbers
