"""Display formatting for amounts and dates."""

import math
from datetime import datetime
from numbers import Real
from typing import Any, Union

from expense_tracker.analytics.dates import parse_timestamp


CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
}


def format_currency(amount: Any, currency: str = "USD") -> str:
    """
    Format an amount for display, e.g. "$1,234.50".

    Non-numeric, NaN and infinite amounts render as zero.
    """
    if isinstance(amount, bool) or not isinstance(amount, Real) or not math.isfinite(amount):
        amount = 0.0

    sign = "-" if amount < 0 else ""
    digits = f"{abs(amount):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol:
        return f"{sign}{symbol}{digits}"
    return f"{sign}{currency.upper()} {digits}"


def format_date(value: Union[str, datetime]) -> str:
    """Long display date, e.g. "Jan 5, 2025". Unparseable input is returned as-is."""
    moment = parse_timestamp(value)
    if moment is None:
        return str(value)
    return f"{moment:%b} {moment.day}, {moment.year}"


def format_short_date(value: Union[str, datetime]) -> str:
    """Short display date, e.g. "Jan 5"."""
    moment = parse_timestamp(value)
    if moment is None:
        return str(value)
    return f"{moment:%b} {moment.day}"


def format_percentage(value: float) -> str:
    """One decimal place, e.g. "85.7%"."""
    return f"{value:.1f}%"
