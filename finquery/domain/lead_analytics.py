"""Lead funnel analytics - conversion, breakdowns by status and channel, prospect ranking"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from finquery.domain.models import Lead, LeadSource, LeadStatus
from finquery.domain.ratios import finite_or_zero, finite_sum, percentage, safe_divide


@dataclass(frozen=True)
class StatusCount:
    status: LeadStatus
    count: int
    percentage: float


@dataclass(frozen=True)
class SourceCount:
    source: LeadSource
    count: int
    percentage: float


@dataclass(frozen=True)
class ChannelBreakdown:
    source: LeadSource
    count: int
    percentage: float
    total_value: float


@dataclass(frozen=True)
class LeadAnalytics:
    total_leads: int
    total_potential_value: float
    average_potential_value: float
    closed_won: int
    closed_lost: int
    conversion_rate: float
    win_rate: float
    qualified_leads: int
    active_leads: int
    status_breakdown: List[StatusCount] = field(default_factory=list)
    source_breakdown: List[SourceCount] = field(default_factory=list)


def _tally(values) -> Dict:
    counts: Dict = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def summarize_leads(leads: Sequence[Lead]) -> LeadAnalytics:
    """
    Funnel metrics for a set of leads.

    conversion_rate is won over all leads; win_rate is won over closed
    leads only. Breakdowns list keys in first-seen order.
    """
    total_leads = len(leads)
    total_potential_value = finite_sum(l.potential_value for l in leads)
    closed_won = sum(1 for l in leads if l.status is LeadStatus.CLOSED_WON)
    closed_lost = sum(1 for l in leads if l.status is LeadStatus.CLOSED_LOST)

    status_breakdown = [
        StatusCount(status=status, count=count, percentage=percentage(count, total_leads))
        for status, count in _tally(l.status for l in leads).items()
    ]
    source_breakdown = [
        SourceCount(source=source, count=count, percentage=percentage(count, total_leads))
        for source, count in _tally(l.source for l in leads).items()
    ]

    return LeadAnalytics(
        total_leads=total_leads,
        total_potential_value=total_potential_value,
        average_potential_value=safe_divide(total_potential_value, total_leads),
        closed_won=closed_won,
        closed_lost=closed_lost,
        conversion_rate=percentage(closed_won, total_leads),
        win_rate=percentage(closed_won, closed_won + closed_lost),
        qualified_leads=sum(1 for l in leads if l.status.is_qualified),
        active_leads=sum(1 for l in leads if not l.status.is_terminal),
        status_breakdown=status_breakdown,
        source_breakdown=source_breakdown,
    )


def channel_breakdown(leads: Sequence[Lead]) -> List[ChannelBreakdown]:
    """Leads per acquisition channel, busiest channel first"""
    total_leads = len(leads)
    counts: Dict[LeadSource, int] = {}
    values: Dict[LeadSource, float] = {}

    for lead in leads:
        counts[lead.source] = counts.get(lead.source, 0) + 1
        values[lead.source] = values.get(lead.source, 0.0) + lead.potential_value

    channels = [
        ChannelBreakdown(
            source=source,
            count=count,
            percentage=percentage(count, total_leads),
            total_value=finite_or_zero(values[source]),
        )
        for source, count in counts.items()
    ]
    return sorted(channels, key=lambda c: c.count, reverse=True)


def top_prospects(leads: Sequence[Lead], limit: int = 5) -> List[Lead]:
    """Open leads with the largest potential value"""
    open_leads = [l for l in leads if not l.status.is_terminal]
    return sorted(open_leads, key=lambda l: l.potential_value, reverse=True)[:limit]
