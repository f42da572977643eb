"""Date and accounting-period parsing utilities."""

import re
from datetime import date, timedelta
from typing import Iterator
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", ...) and a few
    relative ones: "today", "yesterday", "tomorrow", "end of last month".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "end of last month": today.replace(day=1) - timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_period(period: str) -> date:
    """Parse a "YYYY-MM" period label into the first day of that month.

    Raises:
        ValueError: If the label is not a valid year-month
    """
    match = _PERIOD_RE.match(period.strip())
    if match is None:
        raise ValueError(f"Invalid period '{period}': expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid period '{period}': month must be 01-12")
    return date(year, month, 1)


def period_label(d: date) -> str:
    """Return the "YYYY-MM" label of the month containing ``d``."""
    return f"{d.year:04d}-{d.month:02d}"


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    """Last calendar day of the month containing ``d``."""
    return month_start(d) + relativedelta(months=1) - timedelta(days=1)


def iter_months(start: date, end: date) -> Iterator[date]:
    """Yield the first day of every month from ``start`` through ``end``."""
    current = month_start(start)
    last = month_start(end)
    while current <= last:
        yield current
        current = current + relativedelta(months=1)
