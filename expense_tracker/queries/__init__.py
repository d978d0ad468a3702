"""Transaction query package."""

from expense_tracker.queries.filters import (
    ALL_CATEGORIES,
    TransactionFilter,
    filter_expenses,
    matches,
    total_amount,
)

__all__ = [
    "ALL_CATEGORIES",
    "TransactionFilter",
    "filter_expenses",
    "matches",
    "total_amount",
]
