"""Portfolio rollups over a set of holdings"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from finquery.domain.models import Asset, AssetCategory
from finquery.domain.ratios import finite_or_zero, finite_sum, percentage


@dataclass(frozen=True)
class AllocationSlice:
    category: AssetCategory
    value: float
    percentage: float
    count: int


@dataclass(frozen=True)
class PortfolioSummary:
    total_value: float
    total_cost_basis: float
    total_unrealized_gain: float
    total_unrealized_gain_percent: float
    today_gain: float
    today_gain_percent: float
    asset_allocation: List[AllocationSlice] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioTotals:
    total_value: float
    total_gains: float
    total_gains_percent: float
    day_change: float
    day_change_percent: float


def allocation_by_category(assets: Sequence[Asset]) -> List[AllocationSlice]:
    """Group holdings by category; largest value first, ties in first-seen order"""
    total_value = finite_sum(a.total_value for a in assets)
    values: Dict[AssetCategory, float] = {}
    counts: Dict[AssetCategory, int] = {}

    for asset in assets:
        values[asset.category] = values.get(asset.category, 0.0) + asset.total_value
        counts[asset.category] = counts.get(asset.category, 0) + 1

    slices = [
        AllocationSlice(
            category=category,
            value=finite_or_zero(value),
            percentage=percentage(value, total_value),
            count=counts[category],
        )
        for category, value in values.items()
    ]
    return sorted(slices, key=lambda s: s.value, reverse=True)


def summarize_portfolio(assets: Sequence[Asset]) -> PortfolioSummary:
    """
    Compute value, cost, unrealized and intraday gain for a set of holdings.

    Today's gain applies each asset's day performance to its current value.
    All ratios resolve to 0 when their denominator is not positive.
    """
    total_value = finite_sum(a.total_value for a in assets)
    total_cost_basis = finite_sum(a.cost_basis for a in assets)
    total_unrealized_gain = finite_or_zero(total_value - total_cost_basis)
    today_gain = finite_sum(a.total_value * a.performance.day / 100 for a in assets)

    return PortfolioSummary(
        total_value=total_value,
        total_cost_basis=total_cost_basis,
        total_unrealized_gain=total_unrealized_gain,
        total_unrealized_gain_percent=percentage(total_unrealized_gain, total_cost_basis),
        today_gain=today_gain,
        today_gain_percent=percentage(today_gain, total_value),
        asset_allocation=allocation_by_category(assets),
    )


def day_change(asset: Asset) -> float:
    """
    Back the previous close out of today's value and day performance.

    A growth factor at or below zero has no previous value to recover and
    contributes nothing.
    """
    growth = 1 + asset.performance.day / 100
    if growth <= 0:
        return 0.0
    return finite_or_zero(asset.total_value - asset.total_value / growth)


def calculate_portfolio_totals(assets: Sequence[Asset]) -> PortfolioTotals:
    total_value = finite_sum(a.total_value for a in assets)
    total_cost = finite_sum(a.cost_basis for a in assets)
    total_gains = finite_sum(a.unrealized_gain for a in assets)
    change = finite_sum(day_change(a) for a in assets)

    previous_value = finite_or_zero(total_value - change)
    day_change_percent = percentage(change, previous_value) if total_value > 0 else 0.0

    return PortfolioTotals(
        total_value=total_value,
        total_gains=total_gains,
        total_gains_percent=percentage(total_gains, total_cost),
        day_change=change,
        day_change_percent=day_change_percent,
    )


def top_performing_assets(assets: Sequence[Asset], limit: int = 5) -> List[Asset]:
    """Best day performers first; stable for equal moves"""
    ranked = sorted(assets, key=lambda a: a.performance.day, reverse=True)
    return ranked[:limit]
