"""
Calendar helpers for month-scoped queries.

All record dates are stored as naive datetimes at UTC midnight, and month
windows are half-open [first day of month, first day of next month).
"""
from datetime import date, datetime, time, timezone
from typing import Optional, Tuple, Union

from finance_tracker.errors import ValidationError

MIN_YEAR = 1
MAX_YEAR = 9999


def to_utc_midnight(value: Union[date, datetime, None] = None) -> datetime:
    """
    Truncate a date or datetime to UTC midnight, returned as a naive datetime.
    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    None means today.
    """
    if value is None:
        value = datetime.now(timezone.utc)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return datetime.combine(value, time.min)


def validate_scope(month: Optional[int], year: Optional[int]) -> None:
    if month is not None and not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12", field="month")
    if year is not None and not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}", field="year")


def is_scoped(month: Optional[int], year: Optional[int]) -> bool:
    """A query is month-scoped only when both month and year are given."""
    return month is not None and year is not None


def next_month(month: int, year: int) -> Tuple[int, int]:
    if month == 12:
        return 1, year + 1
    return month + 1, year


def month_bounds(month: int, year: int) -> Tuple[datetime, datetime]:
    """Return the [start, end) window of a calendar month."""
    start = datetime(year, month, 1)
    end_month, end_year = next_month(month, year)
    if end_year > MAX_YEAR:
        return start, datetime.max
    return start, datetime(end_year, end_month, 1)


def scope_bounds(
    month: Optional[int], year: Optional[int]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Window for an optional scope; (None, None) means all-time."""
    if not is_scoped(month, year):
        return None, None
    return month_bounds(month, year)
