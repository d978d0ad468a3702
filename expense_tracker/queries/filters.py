"""
Transaction Filtering

Backs the transactions page: free-text search, category and an
inclusive date range. Filtering is DETERMINISTIC and order-preserving;
the store's order (newest first) is what the user sees.
"""

from datetime import date
from typing import Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from expense_tracker.analytics.dates import local_day
from expense_tracker.models.expense import Expense


ALL_CATEGORIES = "all"


class TransactionFilter(BaseModel):
    """Filters selected on the transactions page. Empty means "everything"."""

    search: str = Field(
        default="",
        description="Case-insensitive substring of the description"
    )
    category_id: Optional[str] = Field(
        default=None,
        description='Category id; None or "all" matches any category'
    )
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode='after')
    def validate_range(self) -> 'TransactionFilter':
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    @property
    def is_active(self) -> bool:
        return bool(
            self.search.strip()
            or (self.category_id and self.category_id != ALL_CATEGORIES)
            or self.start_date
            or self.end_date
        )

    def describe_range(self) -> str:
        """Human-readable date range, e.g. "Jan 1 - Jan 7 (7 days)"."""
        if self.start_date and self.end_date:
            days = (self.end_date - self.start_date).days + 1
            return f"{_short(self.start_date)} - {_short(self.end_date)} ({days} days)"
        if self.start_date:
            return f"From {_short(self.start_date)}"
        if self.end_date:
            return f"Until {_short(self.end_date)}"
        return "All dates"


def matches(expense: Expense, criteria: TransactionFilter) -> bool:
    """Check a single expense against every active criterion."""
    needle = criteria.search.strip().lower()
    if needle and needle not in expense.description.lower():
        return False

    if criteria.category_id and criteria.category_id != ALL_CATEGORIES:
        if expense.category.id != criteria.category_id:
            return False

    if criteria.start_date or criteria.end_date:
        day = local_day(expense.date)
        if day is None:
            return False
        if criteria.start_date and day < criteria.start_date:
            return False
        if criteria.end_date and day > criteria.end_date:
            return False

    return True


def filter_expenses(
    expenses: Sequence[Expense],
    criteria: Optional[TransactionFilter] = None,
) -> list[Expense]:
    """Expenses matching the filter, in their original order."""
    if criteria is None:
        return list(expenses)
    return [expense for expense in expenses if matches(expense, criteria)]


def total_amount(expenses: Sequence[Expense]) -> float:
    return sum((expense.amount for expense in expenses), 0.0)


def _short(day: date) -> str:
    return f"{day:%b} {day.day}"
