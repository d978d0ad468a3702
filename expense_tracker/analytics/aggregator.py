"""
Expense Analytics Aggregation

DESIGN DECISION: Analytics are a PURE function of (expenses, now).
No caching, no I/O, no hidden clock: the caller passes `now`, so every
number on the dashboard can be reproduced in a test.

Produces:
1. Month-to-date total
2. Category breakdown with percentages (current month)
3. Recent expenses (last 7 days, capped)
4. Daily spending for the last 7 days (zero-filled)

Records whose date cannot be parsed are left out of every figure.
Amounts are trusted as given; invalid amounts are rejected when the
record is created, never here.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from expense_tracker.analytics.dates import (
    is_same_month,
    parse_timestamp,
    to_local,
    trailing_days,
)
from expense_tracker.catalog import get_category_by_id
from expense_tracker.models.analytics import (
    AnalyticsSnapshot,
    CategorySpending,
    DailySpending,
)
from expense_tracker.models.expense import Expense, ExpenseCategory


RECENT_WINDOW = timedelta(days=7)
RECENT_LIMIT = 5
DAILY_SERIES_DAYS = 7

CategoryLookup = Callable[[str], ExpenseCategory]

_Dated = list[tuple[Expense, Optional[datetime]]]


def current_month_expenses(
    expenses: Sequence[Expense],
    now: datetime,
) -> list[Expense]:
    """Expenses dated in the same calendar month and year as `now`."""
    now = to_local(now)
    return [
        expense for expense, moment in _with_dates(expenses)
        if moment is not None and is_same_month(moment, now)
    ]


def build_category_breakdown(
    month_expenses: Sequence[Expense],
    total: float,
    lookup: CategoryLookup = get_category_by_id,
) -> list[CategorySpending]:
    """
    Group by category id and rank by amount, largest first.

    Category metadata is re-resolved from the current catalog rather than
    taken from the embedded copy, so renamed categories show their new name.
    Equal amounts keep the order in which their categories first appeared.
    """
    totals: dict[str, float] = {}
    for expense in month_expenses:
        category_id = expense.category.id
        totals[category_id] = totals.get(category_id, 0.0) + expense.amount

    rows = [
        CategorySpending(
            category=lookup(category_id),
            amount=amount,
            percentage=(amount / total) * 100 if total > 0 else 0.0,
        )
        for category_id, amount in totals.items()
    ]
    return sorted(rows, key=lambda row: row.amount, reverse=True)


def select_recent(
    expenses: Sequence[Expense],
    now: datetime,
    window: timedelta = RECENT_WINDOW,
    limit: int = RECENT_LIMIT,
) -> list[Expense]:
    """First `limit` expenses (in store order) dated on or after `now - window`."""
    cutoff = to_local(now) - window
    recent = [
        expense for expense, moment in _with_dates(expenses)
        if moment is not None and moment >= cutoff
    ]
    return recent[:limit]


def build_daily_series(
    expenses: Sequence[Expense],
    now: datetime,
    days: int = DAILY_SERIES_DAYS,
) -> list[DailySpending]:
    """Per-day totals for the `days` calendar days ending today, oldest first."""
    buckets = dict.fromkeys(trailing_days(to_local(now).date(), days), 0.0)

    for expense, moment in _with_dates(expenses):
        if moment is None:
            continue
        day = moment.date()
        if day in buckets:
            buckets[day] += expense.amount

    return [DailySpending(date=day, amount=amount) for day, amount in buckets.items()]


def compute_analytics(
    expenses: Sequence[Expense],
    now: datetime,
    lookup: CategoryLookup = get_category_by_id,
) -> AnalyticsSnapshot:
    """
    Compute the full dashboard snapshot.

    Args:
        expenses: Snapshot of the store's list, in store order
        now: Reference instant (aware values are converted to local time)
        lookup: Category resolver, the catalog lookup by default

    Returns:
        AnalyticsSnapshot (an empty list yields zeros, never an error)
    """
    month_expenses = current_month_expenses(expenses, now)
    total = sum((expense.amount for expense in month_expenses), 0.0)

    return AnalyticsSnapshot(
        total_this_month=total,
        category_breakdown=build_category_breakdown(month_expenses, total, lookup),
        recent_expenses=select_recent(expenses, now),
        daily_spending=build_daily_series(expenses, now),
    )


def _with_dates(expenses: Sequence[Expense]) -> _Dated:
    return [(expense, parse_timestamp(expense.date)) for expense in expenses]
