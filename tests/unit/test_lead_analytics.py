"""Unit tests for lead funnel analytics"""

import math
import pytest
from finquery.domain.lead_analytics import channel_breakdown, summarize_leads, top_prospects
from finquery.domain.models import LeadSource, LeadStatus


def test_conversion_counts(make_lead):
    leads = [
        make_lead(id="1", status="Closed - Won"),
        make_lead(id="2", status="Closed - Won"),
        make_lead(id="3", status="Closed - Lost"),
        make_lead(id="4", status="New"),
    ]

    analytics = summarize_leads(leads)

    assert analytics.closed_won == 2
    assert analytics.closed_lost == 1
    assert analytics.conversion_rate == 50.0
    assert analytics.win_rate == pytest.approx(200 / 3)
    assert analytics.active_leads == 1


def test_empty_leads_produce_zero_rates():
    analytics = summarize_leads([])

    assert analytics.total_leads == 0
    assert analytics.conversion_rate == 0
    assert analytics.win_rate == 0
    assert analytics.average_potential_value == 0
    assert analytics.status_breakdown == []


def test_breakdowns_and_values(make_lead):
    leads = [
        make_lead(id="1", status="Qualified", source="Website", potentialValue=100),
        make_lead(id="2", status="Proposal Sent", source="Referral", potentialValue=300),
        make_lead(id="3", status="Qualified", source="Website", potentialValue=200),
        make_lead(id="4", status="Negotiation", source="Website", potentialValue=400),
    ]

    analytics = summarize_leads(leads)

    assert analytics.total_potential_value == 1000
    assert analytics.average_potential_value == 250
    assert analytics.qualified_leads == 4
    assert [(s.status, s.count, s.percentage) for s in analytics.status_breakdown] == [
        (LeadStatus.QUALIFIED, 2, 50.0),
        (LeadStatus.PROPOSAL, 1, 25.0),
        (LeadStatus.NEGOTIATION, 1, 25.0),
    ]
    assert [(s.source, s.count) for s in analytics.source_breakdown] == [
        (LeadSource.WEBSITE, 3),
        (LeadSource.REFERRAL, 1),
    ]


def test_channel_breakdown_sorted_by_count(make_lead):
    leads = [
        make_lead(id="1", source="Referral", potentialValue=500),
        make_lead(id="2", source="Website", potentialValue=100),
        make_lead(id="3", source="Website", potentialValue=150),
        make_lead(id="4", source="WhatsApp", potentialValue=50),
    ]

    channels = channel_breakdown(leads)

    assert [(c.source, c.count, c.percentage, c.total_value) for c in channels] == [
        (LeadSource.WEBSITE, 2, 50.0, 250),
        (LeadSource.REFERRAL, 1, 25.0, 500),
        (LeadSource.WHATSAPP, 1, 25.0, 50),
    ]


def test_top_prospects_exclude_closed_leads(make_lead):
    leads = [
        make_lead(id="won", status="Closed - Won", potentialValue=10_000),
        make_lead(id="open-small", status="New", potentialValue=100),
        make_lead(id="lost", status="Closed - Lost", potentialValue=9_000),
        make_lead(id="open-big", status="Negotiation", potentialValue=5_000),
    ]

    assert [l.id for l in top_prospects(leads, limit=5)] == ["open-big", "open-small"]
    assert [l.id for l in top_prospects(leads, limit=1)] == ["open-big"]


def test_overflowing_potential_value_stays_finite(make_lead):
    leads = [make_lead(id="1", potentialValue=1e308), make_lead(id="2", potentialValue=1e308)]

    analytics = summarize_leads(leads)
    channels = channel_breakdown(leads)

    assert math.isfinite(analytics.total_potential_value)
    assert math.isfinite(analytics.average_potential_value)
    assert all(math.isfinite(c.total_value) for c in channels)
