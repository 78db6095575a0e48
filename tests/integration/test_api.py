"""Integration tests for API endpoints"""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from finquery.domain.exceptions import FetchError, FetchTimeoutError, SourceUnavailableError


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.get("/v1/transactions")

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "finquery_queries_total" in response.text
    assert "finquery_cache_lookups_total" in response.text


def test_request_id_is_echoed_or_generated(client: TestClient):
    """Test X-Request-ID propagation"""
    echoed = client.get("/health", headers={"X-Request-ID": "req-123"})
    generated = client.get("/health")

    assert echoed.headers["X-Request-ID"] == "req-123"
    assert len(generated.headers["X-Request-ID"]) == 36


def test_transactions_page(client: TestClient):
    """Test GET /v1/transactions returns a camelCase page, newest first"""
    response = client.get("/v1/transactions", params={"pageSize": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["page"] == 1
    assert data["pageSize"] == 2
    assert data["total"] == 6
    assert data["totalPages"] == 3
    assert [t["id"] for t in data["items"]] == ["t6", "t5"]
    assert data["items"][0]["type"] == "Sell"
    assert data["items"][0]["date"].startswith("2024-03-20T13:00:00")


def test_transactions_filtered_by_kind_and_dates(client: TestClient):
    response = client.get(
        "/v1/transactions",
        params={"kind": "Buy", "dateFrom": "2024-01-01", "dateTo": "2024-02-28", "sortOrder": "asc"},
    )

    assert [t["id"] for t in response.json()["data"]["items"]] == ["t2"]


def test_cash_flow(client: TestClient):
    """Test GET /v1/transactions/cashflow"""
    data = client.get("/v1/transactions/cashflow").json()["data"]

    assert data == {
        "inflow": 7000,
        "outflow": 51500,
        "inflowCount": 2,
        "outflowCount": 2,
        "netFlow": -44500,
    }


def test_assets_page_and_summary(client: TestClient):
    """Test GET /v1/assets in page and summary modes"""
    page = client.get("/v1/assets", params={"category": "Stock"}).json()["data"]
    summary = client.get("/v1/assets", params={"summary": "true"}).json()["data"]

    assert [a["symbol"] for a in page["items"]] == ["AAPL"]
    assert page["items"][0]["currentPrice"] == 100
    assert page["pageSize"] == 20

    assert summary["totalValue"] == 1200
    assert summary["totalUnrealizedGain"] == 300
    assert summary["assetAllocation"][0] == {"category": "Stock", "value": 600, "percentage": 50, "count": 1}


def test_portfolio_totals_and_top_assets(client: TestClient):
    totals = client.get("/v1/assets/totals").json()["data"]
    top = client.get("/v1/assets/top", params={"limit": 1}).json()["data"]

    assert totals["totalValue"] == 1200
    assert totals["totalGains"] == 300
    assert "dayChangePercent" in totals
    assert [a["id"] for a in top] == ["btc"]


def test_leads_page_and_analytics(client: TestClient):
    """Test GET /v1/leads in page and analytics modes"""
    page = client.get("/v1/leads", params={"status": "New"}).json()["data"]
    analytics = client.get("/v1/leads", params={"analytics": "true"}).json()["data"]

    assert [l["id"] for l in page["items"]] == ["l4"]
    assert page["items"][0]["contactName"] == "John Smith"

    assert analytics["totalLeads"] == 4
    assert analytics["closedWon"] == 2
    assert analytics["conversionRate"] == 50
    assert analytics["statusBreakdown"][0]["status"] == "Closed - Won"


def test_leads_scheme_alias_filter(client: TestClient):
    """Test scheme filtering matches alias spellings"""
    response = client.get("/v1/leads", params={"scheme": "Bluechip"})

    assert [l["id"] for l in response.json()["data"]["items"]] == ["l1", "l2"]


def test_lead_channels_trends_and_prospects(client: TestClient):
    channels = client.get("/v1/leads/channels").json()["data"]
    trends = client.get("/v1/leads/trends", params={"period": "weekly"}).json()["data"]
    prospects = client.get("/v1/leads/prospects").json()["data"]

    assert channels[0] == {"source": "Website", "count": 2, "percentage": 50, "totalValue": 400}
    assert [t["label"] for t in trends] == ["Week 1", "Week 2", "Week 3", "Week 4"]
    assert {"newLeads", "qualified", "closedWon", "start", "end"} <= set(trends[0])
    assert [p["id"] for p in prospects] == ["l4"]


def test_market_summary(client: TestClient):
    """Test GET /v1/market-summary"""
    response = client.get("/v1/market-summary", params={"symbols": "TCS,NIFTY"})

    data = response.json()["data"]
    assert [i["symbol"] for i in data["indices"]] == ["NIFTY"]
    assert [i["symbol"] for i in data["topMovers"]] == ["TCS"]
    assert "high52Week" in data["topMovers"][0]
    assert data["sectorPerformance"][0]["sector"] == "Technology"
    assert data["breadth"]["advancing"] == 1
    assert [i["symbol"] for i in data["regions"]["indian"]] == ["NIFTY"]
    assert data["regions"]["us"] == []


def test_dashboard(client: TestClient):
    """Test GET /v1/dashboard"""
    data = client.get("/v1/dashboard").json()["data"]

    assert data["portfolio"]["totalValue"] == 1200
    assert len(data["recentTransactions"]) == 5
    assert [a["id"] for a in data["topAssets"]] == ["aapl", "govt", "btc"]
    assert len(data["market"]["indices"]) == 1


@pytest.mark.parametrize(
    "path, params, field, value",
    [
        ("/v1/transactions", {"pageSize": 500}, "pageSize", 500),
        ("/v1/transactions", {"page": "abc"}, "page", "abc"),
        ("/v1/transactions", {"dateFrom": "2024-02-01", "dateTo": "2024-01-01"}, "dateFrom", None),
        ("/v1/assets", {"category": "Gold"}, "category", "Gold"),
        ("/v1/leads", {"sortBy": "nonsense"}, "sortBy", "nonsense"),
        ("/v1/leads/trends", {"period": "yearly"}, "period", "yearly"),
        ("/v1/market-summary", {"symbols": "BAD SYMBOL"}, "symbols", None),
    ],
)
def test_validation_errors_return_400(client: TestClient, path, params, field, value):
    """Test invalid parameters map to 400 with field details"""
    response = client.get(path, params=params)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Invalid query parameters"
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["field"] == field
    if value is not None:
        assert body["error"]["value"] == value
    assert "data" not in body


@pytest.mark.parametrize(
    "error, status, code",
    [
        (SourceUnavailableError("Data API unreachable"), 503, "SOURCE_UNAVAILABLE"),
        (FetchTimeoutError("Operation timed out after 30s"), 504, "TIMEOUT"),
        (FetchError("Invalid JSON from data API"), 500, "FETCH_ERROR"),
    ],
)
@patch("finquery.services.query_service.QueryService.load", new_callable=AsyncMock)
def test_source_failures_map_to_status_codes(mock_load: AsyncMock, client: TestClient, error, status, code):
    """Test data source failures map to 5xx responses"""
    mock_load.side_effect = error

    response = client.get("/v1/assets")

    assert response.status_code == status
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["details"] == error.message
    assert "field" not in body["error"]


@patch("finquery.services.query_service.QueryService.load", new_callable=AsyncMock)
def test_dashboard_failure(mock_load: AsyncMock, client: TestClient):
    """Test dashboard fails as a whole when a sub-query fails"""
    mock_load.side_effect = SourceUnavailableError("down")

    response = client.get("/v1/dashboard")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "SOURCE_UNAVAILABLE"
