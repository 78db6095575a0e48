"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from finquery.config import settings
from finquery.infrastructure.clients.base import DataSource
from finquery.infrastructure.clients.data_api import HttpDataSource
from finquery.infrastructure.clients.files import FileDataSource
from finquery.services.query_service import QueryService


def build_data_source() -> DataSource:
    """Data source selected by settings.data_source"""
    if settings.data_source == "http":
        return HttpDataSource()
    return FileDataSource()


def get_query_service(request: Request) -> QueryService:
    """Provide the application's query service (and the cache it owns)"""
    return request.app.state.query_service
