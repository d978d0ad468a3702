"""Analytics package: pure aggregation and display helpers."""

from expense_tracker.analytics.aggregator import (
    DAILY_SERIES_DAYS,
    RECENT_LIMIT,
    RECENT_WINDOW,
    build_category_breakdown,
    build_daily_series,
    compute_analytics,
    current_month_expenses,
    select_recent,
)
from expense_tracker.analytics.dates import local_day, parse_timestamp
from expense_tracker.analytics.formatting import (
    format_currency,
    format_date,
    format_percentage,
    format_short_date,
)

__all__ = [
    "DAILY_SERIES_DAYS",
    "RECENT_LIMIT",
    "RECENT_WINDOW",
    "build_category_breakdown",
    "build_daily_series",
    "compute_analytics",
    "current_month_expenses",
    "format_currency",
    "format_date",
    "format_percentage",
    "format_short_date",
    "local_day",
    "parse_timestamp",
    "select_recent",
]
