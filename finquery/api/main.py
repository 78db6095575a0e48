"""FastAPI application factory"""

from typing import Optional

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from finquery.api.dependencies import build_data_source
from finquery.api.middleware import MetricsMiddleware, RequestIDMiddleware
from finquery.api.v1 import assets, dashboard, leads, market, transactions
from finquery.config import settings
from finquery.infrastructure.cache.result_cache import ResultCache
from finquery.infrastructure.observability.logging import setup_logging
from finquery.services.query_service import QueryService

# Setup structured logging
setup_logging(settings.log_level)


def create_app(query_service: Optional[QueryService] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="finquery",
        description="Query and aggregation service for financial records",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # The service owns the result cache for the lifetime of the app
    app.state.query_service = query_service or QueryService(
        build_data_source(),
        ResultCache(settings.cache_ttl_seconds),
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(assets.router, prefix="/v1", tags=["assets"])
    app.include_router(leads.router, prefix="/v1", tags=["leads"])
    app.include_router(market.router, prefix="/v1", tags=["market"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])

    return app


app = create_app()
