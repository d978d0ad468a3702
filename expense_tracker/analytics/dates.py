"""
Date helpers for analytics.

All bucketing happens in LOCAL time: an expense logged at 23:30 belongs
to that local day even if its UTC timestamp is already tomorrow.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union


def to_local(moment: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values are already local."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an expense timestamp into naive local time.

    Accepts ISO-8601 strings (with or without offset, including a trailing
    "Z" as written by JavaScript's toISOString) and datetime objects.
    Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        return to_local(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"

    try:
        return to_local(datetime.fromisoformat(text))
    except ValueError:
        return None


def local_day(value: Union[str, datetime, None]) -> Optional[date]:
    """Calendar day of a timestamp in local time."""
    moment = parse_timestamp(value)
    return moment.date() if moment else None


def is_same_month(moment: datetime, reference: datetime) -> bool:
    return moment.year == reference.year and moment.month == reference.month


def trailing_days(end: date, count: int) -> list[date]:
    """`count` consecutive days ending on `end`, oldest first."""
    return [end - timedelta(days=offset) for offset in range(count - 1, -1, -1)]
