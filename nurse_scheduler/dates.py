"""
Calendar helpers for month-based scheduling.
"""

import calendar
from functools import lru_cache
from datetime import date, datetime, timedelta
from typing import Iterable, List, Tuple


DATE_FORMAT = "%Y-%m-%d"


def parse_year_month(year_month: str) -> Tuple[int, int]:
    """'2026-02' -> (2026, 2). Raises ValueError on malformed input."""
    try:
        parsed = datetime.strptime(year_month, "%Y-%m")
    except (TypeError, ValueError):
        raise ValueError(f"year_month must be 'YYYY-MM', got {year_month!r}")
    if len(year_month) != 7:
        raise ValueError(f"year_month must be 'YYYY-MM', got {year_month!r}")
    return parsed.year, parsed.month


def get_days_in_month(year_month: str) -> List[date]:
    year, month = parse_year_month(year_month)
    _, num_days = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, num_days + 1)]


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date(date_str: str) -> date:
    return datetime.strptime(date_str, DATE_FORMAT).date()


@lru_cache(maxsize=4096)
def shift_date(date_str: str, days: int) -> str:
    """Date string offset by a number of days"""
    return format_date(parse_date(date_str) + timedelta(days=days))


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5


def day_type(value: date, holidays: Iterable[str]) -> str:
    """Row of the weight table that applies: 'holiday', 'weekend' or 'weekday'"""
    if format_date(value) in holidays:
        return "holiday"
    if is_weekend(value):
        return "weekend"
    return "weekday"
