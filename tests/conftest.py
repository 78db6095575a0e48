"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from fastapi.testclient import TestClient
from finquery.api.main import create_app
from finquery.domain.exceptions import SourceUnavailableError
from finquery.domain.models import Asset, Lead, MarketInstrument, Transaction
from finquery.infrastructure.cache.result_cache import ResultCache
from finquery.infrastructure.clients.base import Collection
from finquery.services.query_service import QueryService


NOW = datetime(2024, 10, 18, 12, 0, tzinfo=timezone.utc)


def transaction_data(**overrides: Any) -> Dict[str, Any]:
    data = {
        "id": "txn-1",
        "type": "Buy",
        "symbol": "ACME",
        "company": "Acme Corp",
        "quantity": 1,
        "price": 100,
        "total": 100,
        "date": "2024-01-01T00:00:00Z",
        "status": "Completed",
        "fees": 0,
    }
    data.update(overrides)
    return data


def asset_data(
    id: str = "ast-1",
    category: str = "Stock",
    quantity: float = 10,
    price: float = 100,
    cost_basis: Optional[float] = None,
    day: float = 0,
    year: float = 0,
    name: Optional[str] = None,
    allocation: float = 0,
) -> Dict[str, Any]:
    """Asset payload whose derived fields are consistent with quantity, price and cost"""
    total = quantity * price
    cost = total if cost_basis is None else cost_basis
    gain = total - cost
    return {
        "id": id,
        "symbol": id.upper(),
        "name": name or f"Asset {id}",
        "category": category,
        "quantity": quantity,
        "currentPrice": price,
        "totalValue": total,
        "costBasis": cost,
        "unrealizedGain": gain,
        "unrealizedGainPercent": gain / cost * 100 if cost else 0,
        "allocation": allocation,
        "performance": {"day": day, "week": 0, "month": 0, "year": year},
    }


def lead_data(**overrides: Any) -> Dict[str, Any]:
    data = {
        "id": "lead-1",
        "company": "Acme Corp",
        "contactName": "John Smith",
        "contactEmail": "john@acme.com",
        "contactPhone": "+1 555 0100",
        "source": "Website",
        "status": "New",
        "potentialValue": 10000,
        "assignedTo": "Priya",
        "createdDate": "2024-01-01T00:00:00Z",
        "lastContactedDate": "2024-01-02T00:00:00Z",
        "scheme": None,
        "interactionHistory": [],
    }
    data.update(overrides)
    return data


def instrument_data(
    symbol: str = "ACME",
    value: float = 101,
    change: float = 1,
    sector: Optional[str] = "Technology",
    volume: float = 1000,
    history: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Quote whose changePercent matches change / (value - change)"""
    previous = value - change
    return {
        "symbol": symbol,
        "name": f"{symbol} Ltd",
        "value": value,
        "change": change,
        "changePercent": change / previous * 100 if previous else 0,
        "timestamp": "2024-04-12T10:00:00Z",
        "high52Week": value * 1.2,
        "low52Week": value * 0.8,
        "marketCap": 1_000_000,
        "volume": volume,
        "sector": sector,
        "historicalData": history or [],
    }


class InMemoryDataSource:
    """Serves raw collections from memory; queued failures are raised first"""

    def __init__(
        self,
        collections: Optional[Dict[Collection, List[Dict[str, Any]]]] = None,
        failures: Optional[List[Exception]] = None,
    ):
        self.collections = collections or {}
        self.failures = list(failures or [])
        self.calls: List[Collection] = []

    async def fetch(self, collection: Collection) -> List[Dict[str, Any]]:
        self.calls.append(collection)
        if self.failures:
            raise self.failures.pop(0)
        if collection not in self.collections:
            raise SourceUnavailableError(f"No {collection.value} loaded")
        return self.collections[collection]


async def no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def raw_transaction() -> Callable[..., Dict[str, Any]]:
    """Builder for transaction JSON as a data source would deliver it"""
    return transaction_data


@pytest.fixture
def raw_lead() -> Callable[..., Dict[str, Any]]:
    return lead_data


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    return lambda **overrides: Transaction.model_validate(transaction_data(**overrides))


@pytest.fixture
def make_asset() -> Callable[..., Asset]:
    return lambda **kwargs: Asset.model_validate(asset_data(**kwargs))


@pytest.fixture
def make_lead() -> Callable[..., Lead]:
    return lambda **overrides: Lead.model_validate(lead_data(**overrides))


@pytest.fixture
def make_instrument() -> Callable[..., MarketInstrument]:
    return lambda **kwargs: MarketInstrument.model_validate(instrument_data(**kwargs))


@pytest.fixture
def sample_collections() -> Dict[Collection, List[Dict[str, Any]]]:
    """Small consistent data set covering every record kind"""
    return {
        Collection.TRANSACTIONS: [
            transaction_data(id="t1", type="Deposit", total=5000, date="2024-01-10T09:00:00Z", company=None, symbol=None),
            transaction_data(id="t2", type="Buy", total=1500, date="2024-01-15T10:00:00Z", company="Apple Inc."),
            transaction_data(id="t3", type="Sell", total=2000, date="2024-02-01T14:30:00Z", company="Microsoft"),
            transaction_data(id="t4", type="Withdrawal", total=1000, date="2024-02-10T08:15:00Z", status="Pending", company=None, symbol=None),
            transaction_data(id="t5", type="Buy", total=50000, date="2024-03-05T11:45:00Z", company="Reliance"),
            transaction_data(id="t6", type="Sell", total=11400, date="2024-03-20T13:00:00Z", status="Failed", company="TCS"),
        ],
        Collection.ASSETS: [
            asset_data(id="aapl", category="Stock", quantity=6, price=100, cost_basis=500, day=1.0, name="Apple"),
            asset_data(id="govt", category="Bond", quantity=4, price=100, cost_basis=400, day=-0.5, name="Treasury"),
            asset_data(id="btc", category="Crypto", quantity=1, price=200, cost_basis=0, day=3.0, name="Bitcoin"),
        ],
        Collection.LEADS: [
            lead_data(id="l1", company="Acme", status="Closed - Won", source="Website", potentialValue=100, scheme="HDFC Balanced Fund"),
            lead_data(id="l2", company="Globex", status="Closed - Won", source="Referral", potentialValue=200, scheme="ICICI Blue Chip"),
            lead_data(id="l3", company="Initech", status="Closed - Lost", source="Website", potentialValue=300, scheme="Small Cap Fund"),
            lead_data(id="l4", company="Umbrella", status="New", source="Cold Call", potentialValue=400),
        ],
        Collection.MARKET_DATA: [
            instrument_data(symbol="NIFTY", value=22110, change=110, sector="Index", volume=0),
            instrument_data(symbol="TCS", value=3800, change=-76, sector="Technology"),
            instrument_data(symbol="INFY", value=1515, change=15, sector="Technology"),
            instrument_data(symbol="RELIANCE", value=2929, change=29, sector="Energy"),
        ],
    }


@pytest.fixture
def data_source(sample_collections) -> InMemoryDataSource:
    return InMemoryDataSource(sample_collections)


@pytest.fixture
def service(data_source: InMemoryDataSource, make_service) -> QueryService:
    """Query service over the sample data with a fresh cache and no real backoff"""
    return make_service(data_source)


@pytest.fixture
def client(service: QueryService) -> TestClient:
    """Create FastAPI test client backed by the in-memory query service"""
    app = create_app(service)
    return TestClient(app)


@pytest.fixture
def make_source() -> Callable[..., InMemoryDataSource]:
    return InMemoryDataSource


@pytest.fixture
def make_service() -> Callable[..., QueryService]:
    """Build a query service around any data source, with test-friendly retry settings"""

    def build(source, **overrides: Any) -> QueryService:
        options: Dict[str, Any] = {
            "max_attempts": 3,
            "backoff_base": 0.01,
            "fetch_timeout": 5,
            "max_page_size": 100,
            "production": False,
            "clock": lambda: NOW,
            "sleep": no_sleep,
        }
        options.update(overrides)
        cache = options.pop("cache", None)
        if cache is None:
            cache = ResultCache(ttl_seconds=300)
        return QueryService(source, cache, **options)

    return build
