"""Date manipulation utilities"""

from datetime import datetime, timedelta, timezone
from typing import List, Tuple


def add_years(moment: datetime, years: int) -> datetime:
    """Shift by whole calendar years; Feb 29 falls back to Feb 28"""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


def trailing_windows(now: datetime, period: timedelta, count: int) -> List[Tuple[datetime, datetime]]:
    """
    Generate `count` back-to-back half-open windows ending at `now`.

    Returned oldest first: the last window is [now - period, now).
    """
    return [
        (now - (i + 1) * period, now - i * period)
        for i in range(count - 1, -1, -1)
    ]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
