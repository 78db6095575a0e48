"""Unit tests for lead trend buckets"""

from datetime import datetime, timedelta, timezone
from finquery.domain.trends import TrendPeriod, lead_trends


NOW = datetime(2024, 10, 18, 12, 0, tzinfo=timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.isoformat()


def test_daily_series_has_seven_buckets_oldest_first():
    points = lead_trends([], TrendPeriod.DAILY, now=NOW)

    assert len(points) == 7
    assert points[-1].end == NOW
    assert points[-1].start == NOW - timedelta(days=1)
    assert points[0].start == NOW - timedelta(days=7)
    assert [p.label for p in points][-1] == "Oct 17"
    assert all(p.new_leads == 0 for p in points)


def test_bucket_boundaries_are_half_open(make_lead):
    leads = [
        make_lead(id="at-now", createdDate=_iso(NOW)),
        make_lead(id="just-before", createdDate=_iso(NOW - timedelta(seconds=1)), status="Qualified"),
        make_lead(id="boundary", createdDate=_iso(NOW - timedelta(days=1)), status="Closed - Won"),
        make_lead(id="too-old", createdDate=_iso(NOW - timedelta(days=7, seconds=1))),
    ]

    points = lead_trends(leads, TrendPeriod.DAILY, now=NOW)

    newest = points[-1]
    assert newest.new_leads == 2
    assert newest.qualified == 1
    assert newest.closed_won == 1
    assert sum(p.new_leads for p in points) == 2


def test_weekly_and_monthly_shapes():
    weekly = lead_trends([], TrendPeriod.WEEKLY, now=NOW)
    monthly = lead_trends([], TrendPeriod.MONTHLY, now=NOW)

    assert [p.label for p in weekly] == ["Week 1", "Week 2", "Week 3", "Week 4"]
    assert weekly[0].start == NOW - timedelta(days=28)
    assert len(monthly) == 12
    assert monthly[0].start == NOW - timedelta(days=360)
    assert monthly[-1].label == "Sep"


def test_leads_land_in_matching_week(make_lead):
    leads = [
        make_lead(id="w4", createdDate=_iso(NOW - timedelta(days=2))),
        make_lead(id="w3", createdDate=_iso(NOW - timedelta(days=10))),
        make_lead(id="w3b", createdDate=_iso(NOW - timedelta(days=13))),
    ]

    points = lead_trends(leads, TrendPeriod.WEEKLY, now=NOW)

    assert [p.new_leads for p in points] == [0, 0, 2, 1]
