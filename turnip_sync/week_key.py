"""
Calendar week keys for the weekly price cache.

Weeks start on Sunday and week 1 is the week containing January 1st. The
year in the key is the calendar year of the date, so the days of a week
that straddles New Year are split across two keys: Dec 31, 2025 is
``week_53_2025`` and Jan 1, 2026 is ``week_1_2026``.
"""

from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime]


def _first_weekday_offset(year: int) -> int:
    """Days between the Sunday starting week 1 and January 1st."""
    # date.weekday() is Monday=0 .. Sunday=6; shift to Sunday=0
    return (date(year, 1, 1).weekday() + 1) % 7


def day_of_week(day: DateLike) -> int:
    """Index of ``day`` in a Sunday-first week (Sunday=0)."""
    return (day.weekday() + 1) % 7


def week_of_year(day: DateLike) -> int:
    """Week number of ``day`` with Sunday-started weeks and week 1 holding Jan 1."""
    day_of_year = day.timetuple().tm_yday
    return (day_of_year - 1 + _first_weekday_offset(day.year)) // 7 + 1


def week_key(day: Optional[DateLike] = None) -> str:
    """
    Cache key of the calendar week containing ``day``.

    Args:
        day: Date to key, defaults to the local current date

    Returns:
        Key of the form ``week_{number}_{year}``
    """
    if day is None:
        day = datetime.now()
    return f"week_{week_of_year(day)}_{day.year}"
