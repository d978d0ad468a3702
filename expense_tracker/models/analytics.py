"""
Analytics view models.

Derived structures rendered by the dashboard and analytics pages.
Nothing here is persisted.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from expense_tracker.models.expense import Expense, ExpenseCategory


class CategorySpending(BaseModel):
    """One row of the category breakdown."""

    category: ExpenseCategory
    amount: float = Field(..., description="Sum of this month's amounts in the category")
    percentage: float = Field(..., description="Share of the month total, 0-100")


class DailySpending(BaseModel):
    """Total spent on one calendar day."""

    date: date
    amount: float = 0.0


class AnalyticsSnapshot(BaseModel):
    """
    Everything the dashboard needs, computed in one pass.

    Invariants:
    - category_breakdown amounts sum to total_this_month
    - daily_spending has one entry per day, oldest first
    """

    total_this_month: float = 0.0
    category_breakdown: list[CategorySpending] = Field(default_factory=list)
    recent_expenses: list[Expense] = Field(default_factory=list)
    daily_spending: list[DailySpending] = Field(default_factory=list)

    @property
    def max_daily_amount(self) -> float:
        """Tallest bar in the daily chart (0 when nothing was spent)."""
        return max((day.amount for day in self.daily_spending), default=0.0)

    def average_daily_spend(self, now: datetime) -> float:
        """Average spend per elapsed day of the current local month."""
        from expense_tracker.analytics.dates import to_local

        return self.total_this_month / to_local(now).day
