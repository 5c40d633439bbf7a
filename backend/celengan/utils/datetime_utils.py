"""DateTime utilities for timezone-aware timestamp handling.

All timestamps are stored as offset-naive UTC values, matching
TIMESTAMP WITHOUT TIME ZONE columns.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime without timezone info (offset-naive).

    Returns:
        Current UTC datetime without timezone info

    Example:
        >>> now = utc_now()
        >>> print(now.tzinfo)
        None
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Lambda version for SQLAlchemy default/onupdate parameters
utc_now_lambda = lambda: datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """
    Convert an offset-aware datetime to naive UTC; naive values pass through.

    Example:
        >>> to_naive_utc(datetime(2024, 6, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5))))
        datetime.datetime(2024, 6, 2, 4, 30)
    """
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def months_ago(moment: datetime, months: int) -> datetime:
    """Return ``moment`` shifted back by whole calendar months."""
    return moment - relativedelta(months=months)


def start_of_month(moment: datetime) -> datetime:
    """Midnight on the first calendar day of ``moment``'s month."""
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def month_window(
    month: Optional[int], year: Optional[int]
) -> Optional[Tuple[datetime, datetime]]:
    """
    Half-open ``[start, end)`` window for a calendar month.

    Both month and year must be given, otherwise no window applies.

    Raises:
        ValueError: If month is outside 1..12
    """
    if month is None or year is None:
        return None
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 1 and 12")

    start = datetime(year, month, 1)
    return start, start + relativedelta(months=1)


def last_n_days(today: date, days: int) -> list[date]:
    """Calendar days ending at ``today`` (inclusive), oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
