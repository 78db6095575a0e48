"""GET /v1/transactions - paged transaction history and cash flow"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from finquery.api.dependencies import get_query_service
from finquery.api.v1.responses import envelope
from finquery.api.v1.schemas import CashFlowSchema, TransactionPage
from finquery.services.query_service import QueryService

router = APIRouter()


@router.get("/transactions")
async def list_transactions(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    """
    Filter, sort and page transactions.

    Query params: kind, status, dateFrom, dateTo, page, pageSize, sortBy,
    sortOrder
    """
    result = await service.query_transactions(dict(request.query_params))
    return envelope(result, TransactionPage)


@router.get("/transactions/cashflow")
async def transaction_cash_flow(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> JSONResponse:
    """Inflow and outflow over completed transactions matching the filters"""
    result = await service.transaction_cash_flow(dict(request.query_params))
    return envelope(result, CashFlowSchema)
