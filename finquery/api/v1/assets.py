"""GET /v1/assets - holdings, portfolio summary and rankings"""

from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from finquery.api.dependencies import get_query_service
from finquery.api.v1.responses import envelope
from finquery.api.v1.schemas import AssetPage, PortfolioSummarySchema, PortfolioTotalsSchema
from finquery.domain.models import Asset
from finquery.domain.portfolio_analytics import PortfolioSummary
from finquery.services.query_service import QueryService

router = APIRouter()


@router.get("/assets")
async def list_assets(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    """
    Page holdings, or summarize them with summary=true.

    Query params: category, page, pageSize, sortBy, sortOrder, summary
    """
    result = await service.query_assets(dict(request.query_params))
    schema = PortfolioSummarySchema if isinstance(result.data, PortfolioSummary) else AssetPage
    return envelope(result, schema)


@router.get("/assets/totals")
async def portfolio_totals(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    result = await service.portfolio_totals(dict(request.query_params))
    return envelope(result, PortfolioTotalsSchema)


@router.get("/assets/top")
async def top_assets(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    """Best day performers; query params: category, limit"""
    result = await service.top_assets(dict(request.query_params))
    return envelope(result, List[Asset])
