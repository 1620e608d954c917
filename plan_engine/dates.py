"""
Calendar helpers for due-date stepping.

Month arithmetic clamps to the last valid day of the target month, so
Jan 31 + 1 month is Feb 28 (or Feb 29 in a leap year).
"""

from datetime import date, datetime, timedelta

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .exceptions import InvalidDateError

MONTHS_PER_QUARTER = 3


def parse_date(value, field: str = "date") -> date:
    """
    Parse dates like:
    - "2025-02-01"
    - "2025-02-01T00:00:00.000Z"
    - datetime / date objects (returned as a date)
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"expected an ISO date, got: {value!r}", field=field)
    try:
        return isoparse(value.strip()).date()
    except ValueError:
        raise InvalidDateError(f"not a valid date: {value!r}", field=field) from None


def parse_optional_date(value, field: str = "date") -> date | None:
    if value is None or value == "":
        return None
    return parse_date(value, field=field)


def add_months(start: date, months: int) -> date:
    return start + relativedelta(months=months)


def add_quarters(start: date, quarters: int) -> date:
    return add_months(start, quarters * MONTHS_PER_QUARTER)


def add_days(start: date, days: int) -> date:
    return start + timedelta(days=days)


def subtract_days(start: date, days: int) -> date:
    """Plain calendar subtraction, no business-day logic."""
    return start - timedelta(days=days)


def iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None
