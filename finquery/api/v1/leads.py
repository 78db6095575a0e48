"""GET /v1/leads - lead listing, funnel analytics, channels, trends and prospects"""

from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from finquery.api.dependencies import get_query_service
from finquery.api.v1.responses import envelope
from finquery.api.v1.schemas import ChannelBreakdownSchema, LeadAnalyticsSchema, LeadPage, TrendPointSchema
from finquery.domain.lead_analytics import LeadAnalytics
from finquery.domain.models import Lead
from finquery.services.query_service import QueryService

router = APIRouter()


@router.get("/leads")
async def list_leads(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    """
    Filter, sort and page leads, or return funnel analytics with analytics=true.

    Query params: status, source, assignedTo, dateFrom, dateTo, scheme,
    search, analytics, page, pageSize, sortBy, sortOrder
    """
    result = await service.query_leads(dict(request.query_params))
    schema = LeadAnalyticsSchema if isinstance(result.data, LeadAnalytics) else LeadPage
    return envelope(result, schema)


@router.get("/leads/channels")
async def lead_channels(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    result = await service.lead_channels(dict(request.query_params))
    return envelope(result, List[ChannelBreakdownSchema])


@router.get("/leads/trends")
async def lead_trends(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    """New, qualified and won leads per bucket; period is daily, weekly or monthly"""
    result = await service.lead_trends(dict(request.query_params))
    return envelope(result, List[TrendPointSchema])


@router.get("/leads/prospects")
async def top_prospects(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    result = await service.top_prospects(dict(request.query_params))
    return envelope(result, List[Lead])
