"""Time-bucketed lead trend series"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Sequence

from finquery.domain.models import Lead, LeadStatus
from finquery.utils.date_utils import trailing_windows


class TrendPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def bucket_count(self) -> int:
        return {"daily": 7, "weekly": 4, "monthly": 12}[self.value]

    @property
    def bucket_length(self) -> timedelta:
        return {
            "daily": timedelta(days=1),
            "weekly": timedelta(days=7),
            "monthly": timedelta(days=30),
        }[self.value]


@dataclass(frozen=True)
class TrendPoint:
    label: str
    start: datetime
    end: datetime
    new_leads: int
    qualified: int
    closed_won: int


def bucket_label(period: TrendPeriod, start: datetime, position: int) -> str:
    """Daily labels look like 'Oct 18', weekly 'Week 3', monthly 'Oct'"""
    if period is TrendPeriod.DAILY:
        return f"{start:%b} {start.day}"
    if period is TrendPeriod.WEEKLY:
        return f"Week {position}"
    return f"{start:%b}"


def lead_trends(
    leads: Sequence[Lead],
    period: TrendPeriod = TrendPeriod.DAILY,
    now: Optional[datetime] = None,
) -> List[TrendPoint]:
    """
    Count leads created in each trailing bucket, oldest bucket first.

    Buckets are half-open [start, end) and the newest one ends at `now`,
    so a lead created exactly at `now` falls outside the series.
    """
    now = now or datetime.now(timezone.utc)
    windows = trailing_windows(now, period.bucket_length, period.bucket_count)

    points = []
    for position, (start, end) in enumerate(windows, start=1):
        in_bucket = [l for l in leads if start <= l.created_date < end]
        points.append(
            TrendPoint(
                label=bucket_label(period, start, position),
                start=start,
                end=end,
                new_leads=len(in_bucket),
                qualified=sum(1 for l in in_bucket if l.status.is_qualified),
                closed_won=sum(1 for l in in_bucket if l.status is LeadStatus.CLOSED_WON),
            )
        )

    return points
