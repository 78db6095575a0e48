"""GET /v1/dashboard - combined portfolio, market and recent activity snapshot"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from finquery.api.dependencies import get_query_service
from finquery.api.v1.responses import envelope
from finquery.api.v1.schemas import DashboardSchema
from finquery.services.query_service import QueryService

router = APIRouter()


@router.get("/dashboard")
async def dashboard(service: QueryService = Depends(get_query_service)) -> JSONResponse:
    result = await service.dashboard()
    return envelope(result, DashboardSchema)
