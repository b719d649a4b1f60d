"""Month key arithmetic ("YYYY-MM")"""

import calendar
import re
from datetime import date
from typing import List, Tuple

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month_key(month_key: str) -> Tuple[int, int]:
    """Split "YYYY-MM" into (year, month). Raises ValueError when malformed."""
    match = _MONTH_KEY_RE.match(month_key or "")
    if not match:
        raise ValueError(f"Invalid month key: {month_key!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month key: {month_key!r}")
    return year, month


def format_month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_key_for(day: date) -> str:
    """Month key containing the given date"""
    return format_month_key(day.year, day.month)


def previous_month(month_key: str) -> str:
    """"2024-01" -> "2023-12" """
    year, month = parse_month_key(month_key)
    if month == 1:
        return format_month_key(year - 1, 12)
    return format_month_key(year, month - 1)


def months_before(month_key: str, count: int) -> List[str]:
    """The `count` month keys preceding `month_key`, most recent first (reference month excluded)"""
    keys = []
    current = month_key
    for _ in range(count):
        current = previous_month(current)
        keys.append(current)
    return keys


def month_bounds(month_key: str) -> Tuple[date, date]:
    """First and last calendar day of the month"""
    year, month = parse_month_key(month_key)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
