"""GET /v1/market-summary - indices, top movers and sector performance"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from finquery.api.dependencies import get_query_service
from finquery.api.v1.responses import envelope
from finquery.api.v1.schemas import MarketSummarySchema
from finquery.services.query_service import QueryService

router = APIRouter()


@router.get("/market-summary")
async def market_summary(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    """
    Summarize market instruments.

    Query params: symbols (comma separated), sector, dateFrom, dateTo
    (trims each instrument's price history)
    """
    result = await service.query_market(dict(request.query_params))
    return envelope(result, MarketSummarySchema)
