"""Pydantic schemas for API responses"""

from datetime import datetime
from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from finquery.domain.models import (
    Asset,
    AssetCategory,
    Lead,
    LeadSource,
    LeadStatus,
    MarketInstrument,
    Transaction,
)

T = TypeVar("T")


class ApiModel(BaseModel):
    """camelCase on the wire, readable from domain dataclasses"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PageSchema(ApiModel, Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total: int
    total_pages: int


class CashFlowSchema(ApiModel):
    inflow: float
    outflow: float
    inflow_count: int
    outflow_count: int
    net_flow: float


class AllocationSliceSchema(ApiModel):
    category: AssetCategory
    value: float
    percentage: float
    count: int


class PortfolioSummarySchema(ApiModel):
    total_value: float
    total_cost_basis: float
    total_unrealized_gain: float
    total_unrealized_gain_percent: float
    today_gain: float
    today_gain_percent: float
    asset_allocation: List[AllocationSliceSchema]


class PortfolioTotalsSchema(ApiModel):
    total_value: float
    total_gains: float
    total_gains_percent: float
    day_change: float
    day_change_percent: float


class StatusCountSchema(ApiModel):
    status: LeadStatus
    count: int
    percentage: float


class SourceCountSchema(ApiModel):
    source: LeadSource
    count: int
    percentage: float


class LeadAnalyticsSchema(ApiModel):
    total_leads: int
    total_potential_value: float
    average_potential_value: float
    closed_won: int
    closed_lost: int
    conversion_rate: float
    win_rate: float
    qualified_leads: int
    active_leads: int
    status_breakdown: List[StatusCountSchema]
    source_breakdown: List[SourceCountSchema]


class ChannelBreakdownSchema(ApiModel):
    source: LeadSource
    count: int
    percentage: float
    total_value: float


class TrendPointSchema(ApiModel):
    label: str
    start: datetime
    end: datetime
    new_leads: int
    qualified: int
    closed_won: int


class SectorPerformanceSchema(ApiModel):
    sector: str
    change_percent: float
    instrument_count: int


class MarketBreadthSchema(ApiModel):
    average_change: float
    total_volume: float
    advancing: int
    declining: int
    unchanged: int


class IndicesByRegionSchema(ApiModel):
    indian: List[MarketInstrument]
    us: List[MarketInstrument]
    other: List[MarketInstrument]


class MarketSummarySchema(ApiModel):
    indices: List[MarketInstrument]
    top_movers: List[MarketInstrument]
    sector_performance: List[SectorPerformanceSchema]
    breadth: Optional[MarketBreadthSchema] = None
    regions: Optional[IndicesByRegionSchema] = None


class DashboardSchema(ApiModel):
    portfolio: PortfolioSummarySchema
    market: MarketSummarySchema
    recent_transactions: List[Transaction]
    top_assets: List[Asset]


TransactionPage = PageSchema[Transaction]
AssetPage = PageSchema[Asset]
LeadPage = PageSchema[Lead]


class ErrorDetail(BaseModel):
    code: str
    field: Optional[str] = None
    value: Any = None
    details: str


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str
    error: ErrorDetail
