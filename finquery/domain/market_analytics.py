"""Market summary - indices, top movers, sector averages and breadth"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from finquery.domain.models import INDEX_SECTOR, MarketInstrument
from finquery.domain.ratios import finite_sum, safe_divide

TOP_MOVERS_LIMIT = 5

# Symbol fragments that place an index in a region; anything else is global
INDIAN_INDEX_MARKERS = ("NIFTY", "SENSEX", "BSE")
US_INDEX_MARKERS = ("SPX", "NASDAQ", "DJI", "S&P", "DOW")


@dataclass(frozen=True)
class SectorPerformance:
    sector: str
    change_percent: float
    instrument_count: int


@dataclass(frozen=True)
class MarketBreadth:
    average_change: float
    total_volume: float
    advancing: int
    declining: int
    unchanged: int


@dataclass(frozen=True)
class IndicesByRegion:
    indian: List[MarketInstrument] = field(default_factory=list)
    us: List[MarketInstrument] = field(default_factory=list)
    other: List[MarketInstrument] = field(default_factory=list)


@dataclass(frozen=True)
class MarketSummary:
    indices: List[MarketInstrument] = field(default_factory=list)
    top_movers: List[MarketInstrument] = field(default_factory=list)
    sector_performance: List[SectorPerformance] = field(default_factory=list)
    breadth: Optional[MarketBreadth] = None
    regions: IndicesByRegion = field(default_factory=IndicesByRegion)


def trim_history(
    instruments: Sequence[MarketInstrument],
    start: Optional[datetime],
    end: Optional[datetime],
) -> List[MarketInstrument]:
    """Restrict each instrument's price history to [start, end]; quotes are untouched"""
    if start is None and end is None:
        return list(instruments)

    trimmed = []
    for instrument in instruments:
        history = [
            point for point in instrument.historical_data
            if (start is None or point.date >= start) and (end is None or point.date <= end)
        ]
        trimmed.append(instrument.model_copy(update={"historical_data": history}))
    return trimmed


def sector_performance(tradables: Sequence[MarketInstrument]) -> List[SectorPerformance]:
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}

    for instrument in tradables:
        if not instrument.sector or instrument.sector == INDEX_SECTOR:
            continue
        totals[instrument.sector] = totals.get(instrument.sector, 0.0) + instrument.change_percent
        counts[instrument.sector] = counts.get(instrument.sector, 0) + 1

    sectors = [
        SectorPerformance(
            sector=sector,
            change_percent=safe_divide(total, counts[sector]),
            instrument_count=counts[sector],
        )
        for sector, total in totals.items()
    ]
    return sorted(sectors, key=lambda s: s.change_percent, reverse=True)


def market_breadth(instruments: Sequence[MarketInstrument]) -> MarketBreadth:
    total_change = finite_sum(i.change_percent for i in instruments)
    return MarketBreadth(
        average_change=safe_divide(total_change, len(instruments)),
        total_volume=finite_sum(i.volume for i in instruments),
        advancing=sum(1 for i in instruments if i.change_percent > 0),
        declining=sum(1 for i in instruments if i.change_percent < 0),
        unchanged=sum(1 for i in instruments if i.change_percent == 0),
    )


def indices_by_region(indices: Sequence[MarketInstrument]) -> IndicesByRegion:
    """Group indices by the market their symbol belongs to, keeping input order"""
    regions = IndicesByRegion()
    for index in indices:
        symbol = index.symbol.upper()
        if any(marker in symbol for marker in INDIAN_INDEX_MARKERS):
            regions.indian.append(index)
        elif any(marker in symbol for marker in US_INDEX_MARKERS):
            regions.us.append(index)
        else:
            regions.other.append(index)
    return regions


def summarize_market(instruments: Sequence[MarketInstrument]) -> MarketSummary:
    """
    Split the filtered instruments into indices and tradables.

    Top movers are the tradables with the largest absolute percent move.
    Sector averages skip instruments without a sector.
    """
    indices = [i for i in instruments if i.is_index]
    tradables = [i for i in instruments if not i.is_index]

    top_movers = sorted(tradables, key=lambda i: abs(i.change_percent), reverse=True)[:TOP_MOVERS_LIMIT]

    return MarketSummary(
        indices=indices,
        top_movers=top_movers,
        sector_performance=sector_performance(tradables),
        breadth=market_breadth(instruments),
        regions=indices_by_region(indices),
    )
