"""Tests for transaction filtering and the category catalog."""

from datetime import date, datetime

import pytest

from expense_tracker.catalog import (
    EXPENSE_CATEGORIES,
    FALLBACK_CATEGORY,
    category_ids,
    get_category_by_id,
)
from expense_tracker.queries import TransactionFilter, filter_expenses, total_amount

from tests.factories import make_expense


@pytest.fixture
def expenses():
    return [
        make_expense("1", 12, "food", datetime(2025, 3, 20, 9), "Coffee and bagel"),
        make_expense("2", 30, "transport", datetime(2025, 3, 18, 18), "Taxi home"),
        make_expense("3", 8, "food", datetime(2025, 3, 10, 13), "Lunch"),
        make_expense("4", 100, "bills", datetime(2025, 2, 28, 8), "Electricity bill"),
    ]


class TestCatalog:

    def test_catalog_has_nine_unique_categories(self):
        ids = category_ids()
        assert len(ids) == 9
        assert len(set(ids)) == 9
        assert ids[-1] == "other"

    def test_lookup_known_id(self):
        category = get_category_by_id("travel")
        assert category.name == "Travel"
        assert category in EXPENSE_CATEGORIES

    @pytest.mark.parametrize("category_id", ["unknown", "", "FOOD"])
    def test_lookup_falls_back_to_other(self, category_id):
        assert get_category_by_id(category_id) == FALLBACK_CATEGORY
        assert FALLBACK_CATEGORY.id == "other"


class TestTransactionFilter:

    def test_no_filter_returns_everything_in_order(self, expenses):
        assert filter_expenses(expenses) == expenses
        assert filter_expenses(expenses, TransactionFilter()) == expenses
        assert TransactionFilter().is_active is False

    def test_search_is_case_insensitive(self, expenses):
        result = filter_expenses(expenses, TransactionFilter(search="  TAXI "))
        assert [e.id for e in result] == ["2"]

    def test_category_filter(self, expenses):
        result = filter_expenses(expenses, TransactionFilter(category_id="food"))
        assert [e.id for e in result] == ["1", "3"]

    def test_all_category_matches_everything(self, expenses):
        criteria = TransactionFilter(category_id="all")
        assert filter_expenses(expenses, criteria) == expenses
        assert criteria.is_active is False

    def test_date_range_is_inclusive(self, expenses):
        criteria = TransactionFilter(start_date=date(2025, 3, 10), end_date=date(2025, 3, 18))
        assert [e.id for e in filter_expenses(expenses, criteria)] == ["2", "3"]

    def test_open_ended_ranges(self, expenses):
        since = TransactionFilter(start_date=date(2025, 3, 1))
        until = TransactionFilter(end_date=date(2025, 3, 1))
        assert [e.id for e in filter_expenses(expenses, since)] == ["1", "2", "3"]
        assert [e.id for e in filter_expenses(expenses, until)] == ["4"]

    def test_combined_filters(self, expenses):
        criteria = TransactionFilter(search="l", category_id="food", start_date=date(2025, 3, 15))
        assert [e.id for e in filter_expenses(expenses, criteria)] == ["1"]

    def test_unparseable_date_fails_range(self, expenses):
        broken = expenses[0].model_copy(update={"date": "???"})
        criteria = TransactionFilter(start_date=date(2025, 1, 1))
        assert filter_expenses([broken], criteria) == []
        assert filter_expenses([broken], TransactionFilter()) == [broken]

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError, match="End date cannot be before start date"):
            TransactionFilter(start_date=date(2025, 3, 2), end_date=date(2025, 3, 1))

    @pytest.mark.parametrize("start, end, expected", [
        (date(2025, 1, 1), date(2025, 1, 7), "Jan 1 - Jan 7 (7 days)"),
        (date(2025, 1, 1), None, "From Jan 1"),
        (None, date(2025, 1, 7), "Until Jan 7"),
        (None, None, "All dates"),
    ])
    def test_describe_range(self, start, end, expected):
        assert TransactionFilter(start_date=start, end_date=end).describe_range() == expected

    def test_total_amount(self, expenses):
        assert total_amount(expenses) == 150
        assert total_amount([]) == 0
