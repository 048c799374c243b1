from datetime import date

from ltv_report.foundation.records import TransactionRecord
from ltv_report.history.monthly import (
    CustomerHistory,
    OrderedDistinct,
    group_customer_transactions,
    month_key,
    normalise_customer,
)


def _order(so, when, total="10", rep="A", customer="Acme"):
    return {
        "Customer": customer,
        "SO#": so,
        "Sales Order Date": when,
        "Total": total,
        "Sales Rep": rep,
    }


def test_acme_example(orders):
    """Two February orders fold into one month row."""
    history = group_customer_transactions(orders[:2], "Acme")

    assert len(history.summary) == 1
    february = history.summary[0]
    assert february.month == "2024-02"
    assert february.transaction_count == 2
    assert february.total_sales == 250.50
    assert february.order_list == ["100", "101"]
    assert february.sales_reps == ["Jane"]
    assert history.total_transactions == 2


def test_full_history(orders):
    """Customer matching ignores case and padding across months."""
    history = group_customer_transactions(orders, "  ACME")

    assert history.customer_id == "  ACME"
    assert [row.month for row in history.summary] == ["2024-02", "2024-04"]
    february, april = history.summary
    assert february.estimators == ["Lee", "Kim"]
    assert february.creators == ["Jane", "Omar"]
    assert february.dates == ["2024-02-15", "2024-02-20"]
    assert april.total_sales == 950.0
    assert april.csrs == [""]
    assert history.total_transactions == 3
    assert history.total_sales == 1200.5


def test_months_bucket_and_totals():
    """Orders are counted in their calendar month."""
    txns = [
        _order("1", "2024-01-05"),
        _order("2", "2024-01-28"),
        _order("3", "2024-03-01"),
    ]

    history = group_customer_transactions(txns, "Acme")

    assert [(row.month, row.transaction_count) for row in history.summary] == [
        ("2024-01", 2),
        ("2024-03", 1),
    ]
    assert history.total_transactions == 3
    for row in history.summary:
        assert len(row.dates) == len(row.order_list)


def test_distinct_roles_keep_first_seen_order():
    """Role lists are distinct in first-seen order."""
    txns = [
        _order("1", "2024-01-05", rep="A"),
        _order("2", "2024-01-06", rep="A"),
        _order("3", "2024-01-07", rep="B"),
    ]

    history = group_customer_transactions(txns, "Acme")

    assert history.summary[0].sales_reps == ["A", "B"]


def test_blank_actors_can_be_left_out():
    """Blank names can be dropped from role lists."""
    txns = [_order("1", "2024-01-05", rep=""), _order("2", "2024-01-06", rep="B")]

    kept = group_customer_transactions(txns, "Acme")
    dropped = group_customer_transactions(txns, "Acme", include_blank_actors=False)

    assert kept.summary[0].sales_reps == ["", "B"]
    assert dropped.summary[0].sales_reps == ["B"]


def test_unparseable_dates_are_excluded():
    """Orders without a usable date are skipped."""
    txns = [_order("1", "someday"), _order("2", ""), _order("3", "2024-05-01")]

    history = group_customer_transactions(txns, "Acme")

    assert [row.month for row in history.summary] == ["2024-05"]
    assert history.total_transactions == 1


def test_months_in_first_seen_order():
    """Summary rows follow first appearance; chronological() sorts them."""
    txns = [_order("1", "2024-03-01"), _order("2", "2023-12-24"), _order("3", "2024-03-09")]

    history = group_customer_transactions(txns, "Acme")

    assert [row.month for row in history.summary] == ["2024-03", "2023-12"]
    assert [row.month for row in history.chronological()] == ["2023-12", "2024-03"]


def test_other_customers_and_missing_target():
    """Unmatched or missing customers give an empty history."""
    txns = [_order("1", "2024-03-01", customer="Globex")]

    assert group_customer_transactions(txns, "Acme").is_empty
    assert group_customer_transactions(txns, None) == CustomerHistory(customer_id="")


def test_accepts_records_and_date_objects():
    """Parsed records work as well as raw mappings."""
    record = TransactionRecord("Acme", "9", date(2024, 6, 30), 12.345)

    history = group_customer_transactions([record], "acme")

    assert history.summary[0].month == "2024-06"
    assert history.summary[0].dates == ["2024-06-30"]
    assert history.summary[0].total_sales == 12.345


def test_as_dict_uses_wire_names(orders):
    """as_dict uses the camelCase field names."""
    data = group_customer_transactions(orders[:1], "Acme").as_dict()

    assert data["totalTransactions"] == 1
    assert data["summary"][0]["transactionCount"] == 1
    assert data["summary"][0]["orderList"] == ["100"]
    assert data["summary"][0]["salesReps"] == ["Jane"]


def test_helpers():
    """Customer normalisation, month keys and ordered sets."""
    assert normalise_customer("  Acme ") == "acme"
    assert normalise_customer(None) is None
    assert month_key(2024, 2) == "2024-02"

    distinct = OrderedDistinct()
    for value in ["b", "a", "b"]:
        distinct.add(value)
    assert distinct.to_list() == ["b", "a"]
    assert len(distinct) == 2


def test_month_total_is_not_rounded():
    """Fractional-cent order totals add up exactly."""
    txns = [_order(str(n), "2024-07-0%d" % n, total="0.333") for n in (1, 2, 3)]

    history = group_customer_transactions(txns, "Acme")

    assert history.summary[0].total_sales == 0.999
    assert history.total_sales == 0.999


def test_month_names_without_year_are_excluded():
    """Dates such as "March" or "Feb 15" do not land in a month bucket."""
    txns = [_order("1", "March"), _order("2", "Feb 15"), _order("3", "2024-05-01")]

    history = group_customer_transactions(txns, "Acme")

    assert [row.month for row in history.summary] == ["2024-05"]
    assert history.summary[0].order_list == ["3"]
