import pytest

from ltv_report.query.sorting import SortState, compare_values, sort_rows


class TestCompareValues:
    """Pairwise cell comparison."""

    def test_numeric_strings_compare_as_numbers(self):
        """Numeric strings order by value."""
        assert compare_values("10", "9") == 1
        assert compare_values(2, "2.0") == 0
        assert compare_values("1,5", "2") == -1

    def test_text_compares_case_and_accent_insensitively(self):
        """Text ignores case and accents."""
        assert compare_values("apple", "Banana") == -1
        assert compare_values("Émile", "Zed") == -1

    def test_mixed_number_and_text_fall_back_to_text(self):
        """Mixed kinds compare as text."""
        assert compare_values("n/a", 5) == 1


class TestSortRows:
    """Sorting row-objects by a column."""

    def test_empty_key_keeps_order(self, many_rows):
        """No sort key keeps payload order."""
        result = sort_rows(many_rows, "")

        assert result == many_rows
        assert result is not many_rows

    def test_ascending_numeric_column(self, many_rows):
        """Numeric columns sort by value."""
        result = sort_rows(many_rows, "TotalRevenue")

        values = [row["TotalRevenue"] for row in result]
        assert values == sorted(values)

    def test_sorting_twice_is_idempotent(self, many_rows):
        """Re-sorting a sorted list changes nothing."""
        once = sort_rows(many_rows, "LTV", ascending=False)
        twice = sort_rows(once, "LTV", ascending=False)

        assert once == twice

    def test_toggling_direction_reverses_with_stable_ties(self, many_rows):
        """Descending reverses values and keeps ties in input order."""
        ascending = sort_rows(many_rows, "LTV", ascending=True)
        descending = sort_rows(many_rows, "LTV", ascending=False)

        assert [row["LTV"] for row in descending] == sorted(
            (row["LTV"] for row in many_rows), reverse=True
        )
        # Equal keys keep input order in both directions.
        for rows in (ascending, descending):
            for ltv in range(4):
                names = [row["CustomerID"] for row in rows if row["LTV"] == ltv]
                assert names == sorted(names)

    def test_missing_key_sorts_as_empty_text(self):
        """Rows missing the column sort first."""
        rows = [{"CustomerID": "b"}, {"CustomerID": "a", "LTV": "x"}]

        assert sort_rows(rows, "LTV")[0]["CustomerID"] == "b"

    def test_rows_are_not_modified(self, snapshot):
        """Sorting returns a new list and leaves rows alone."""
        rows = snapshot.row_dicts()
        before = [dict(row) for row in rows]

        sort_rows(rows, "LTV", ascending=False)

        assert rows == before


class TestSortState:
    """Column header click behaviour."""

    def test_new_column_starts_ascending(self):
        """Choosing a new column sorts ascending."""
        state = SortState(key="LTV", ascending=False).select("AvgSale")

        assert state == SortState(key="AvgSale", ascending=True)

    def test_same_column_toggles(self):
        """Choosing the same column flips direction."""
        state = SortState().select("LTV")

        assert state.ascending is True
        assert state.indicator == "▲"
        toggled = state.select("LTV")
        assert toggled.ascending is False
        assert toggled.indicator == "▼"

    @pytest.mark.parametrize("key", ["", "CustomerID"])
    def test_apply(self, snapshot, key):
        """Applying the state sorts rows by its key."""
        rows = snapshot.row_dicts()

        assert SortState(key=key).apply(rows) == sort_rows(rows, key)
