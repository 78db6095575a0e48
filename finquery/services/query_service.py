"""Query service - validated, cached, retried query operations returning tagged results"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar

from finquery.config import settings
from finquery.domain.cashflow import CashFlow
from finquery.domain.exceptions import (
    DataSourceError,
    DomainException,
    ErrorCode,
    FetchTimeoutError,
    ValidationError,
)
from finquery.domain.lead_analytics import ChannelBreakdown
from finquery.domain.market_analytics import MarketSummary
from finquery.domain.models import Asset, Lead, Record, Transaction
from finquery.domain.pagination import Page
from finquery.domain.params import (
    Params,
    parse_asset_filters,
    parse_asset_query,
    parse_lead_filters,
    parse_lead_query,
    parse_limit,
    parse_market_query,
    parse_transaction_filters,
    parse_transaction_query,
    parse_trend_period,
)
from finquery.domain.portfolio_analytics import PortfolioSummary, PortfolioTotals
from finquery.domain.predicates import SchemeMatcher
from finquery.domain.queries import (
    run_asset_query,
    run_cash_flow,
    run_lead_channels,
    run_lead_query,
    run_lead_trends,
    run_market_query,
    run_portfolio_totals,
    run_top_assets,
    run_top_prospects,
    run_transaction_query,
)
from finquery.domain.trends import TrendPoint
from finquery.infrastructure.cache.result_cache import ResultCache, build_cache_key
from finquery.infrastructure.clients.base import Collection, DataSource, parse_records
from finquery.infrastructure.observability.logging import log_query
from finquery.infrastructure.observability.metrics import (
    fetch_failure_counter,
    record_cache_lookup,
    record_query,
)
from finquery.infrastructure.retry import with_retry
from finquery.utils.date_utils import utc_now

T = TypeVar("T")
Q = TypeVar("Q")

logger = logging.getLogger(__name__)

DASHBOARD_ITEMS = 5

ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Invalid query parameters",
    ErrorCode.FETCH_ERROR: "Failed to fetch data",
    ErrorCode.SOURCE_UNAVAILABLE: "Data source unavailable",
    ErrorCode.TIMEOUT: "Data source timed out",
}

GENERIC_DETAILS = "An error occurred while processing the request"


@dataclass(frozen=True)
class ErrorInfo:
    code: ErrorCode
    message: str
    details: str
    field: Optional[str] = None
    value: Any = None


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Either `data` (success) or `error` (failure), never both"""

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def ok(cls, data: T) -> "QueryResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: ErrorInfo) -> "QueryResult[T]":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class DashboardSnapshot:
    portfolio: PortfolioSummary
    market: MarketSummary
    recent_transactions: List[Transaction]
    top_assets: List[Asset]


def should_retry_fetch(exc: BaseException) -> bool:
    """Only failures the data source flagged as transient are retried"""
    return isinstance(exc, DataSourceError) and exc.transient


class QueryService:
    """
    Answers record queries against one data source.

    Each operation:
    1. Validates raw parameters into a typed query
    2. Looks the canonical query signature up in the result cache
    3. Fetches the collection through the retry wrapper on a miss
    4. Runs filter -> sort -> paginate/aggregate
    5. Caches and returns the successful result
    """

    def __init__(
        self,
        source: DataSource,
        cache: Optional[ResultCache] = None,
        *,
        matcher: Optional[SchemeMatcher] = None,
        max_attempts: Optional[int] = None,
        backoff_base: Optional[float] = None,
        fetch_timeout: Optional[float] = None,
        max_page_size: Optional[int] = None,
        production: Optional[bool] = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.source = source
        self.cache = cache if cache is not None else ResultCache(settings.cache_ttl_seconds)
        self.matcher = matcher
        self.max_attempts = max_attempts or settings.fetch_max_retries
        self.backoff_base = settings.fetch_backoff_base if backoff_base is None else backoff_base
        self.fetch_timeout = settings.fetch_timeout_seconds if fetch_timeout is None else fetch_timeout
        self.max_page_size = max_page_size or settings.max_page_size
        self.production = settings.is_production if production is None else production
        self.clock = clock
        self.sleep = sleep

    # -- transactions --------------------------------------------------

    async def query_transactions(self, params: Params) -> QueryResult[Page[Transaction]]:
        def parse(p: Params):
            query = parse_transaction_query(p, self.max_page_size)
            return query, query.signature()

        return await self._execute(
            "query_transactions",
            params,
            parse,
            Collection.TRANSACTIONS,
            lambda records, query: run_transaction_query(records, query, self.max_page_size),
        )

    async def transaction_cash_flow(self, params: Params) -> QueryResult[CashFlow]:
        def parse(p: Params):
            filters = parse_transaction_filters(p)
            return filters, filters.signature()

        return await self._execute(
            "transaction_cash_flow", params, parse, Collection.TRANSACTIONS, run_cash_flow
        )

    # -- assets --------------------------------------------------------

    async def query_assets(self, params: Params) -> QueryResult[Page[Asset] | PortfolioSummary]:
        def parse(p: Params):
            query = parse_asset_query(p, self.max_page_size)
            return query, query.signature()

        return await self._execute(
            "query_assets",
            params,
            parse,
            Collection.ASSETS,
            lambda records, query: run_asset_query(records, query, self.max_page_size),
        )

    async def portfolio_totals(self, params: Params) -> QueryResult[PortfolioTotals]:
        def parse(p: Params):
            filters = parse_asset_filters(p)
            return filters, filters.signature()

        return await self._execute("portfolio_totals", params, parse, Collection.ASSETS, run_portfolio_totals)

    async def top_assets(self, params: Params) -> QueryResult[List[Asset]]:
        def parse(p: Params):
            filters = parse_asset_filters(p)
            limit = parse_limit(p)
            return (filters, limit), {**filters.signature(), "limit": limit}

        return await self._execute(
            "top_assets",
            params,
            parse,
            Collection.ASSETS,
            lambda records, q: run_top_assets(records, q[0], q[1]),
        )

    # -- leads ---------------------------------------------------------

    async def query_leads(self, params: Params) -> QueryResult[Any]:
        def parse(p: Params):
            query = parse_lead_query(p, self.max_page_size)
            return query, query.signature()

        return await self._execute(
            "query_leads",
            params,
            parse,
            Collection.LEADS,
            lambda records, query: run_lead_query(records, query, self.matcher, self.max_page_size),
        )

    async def lead_channels(self, params: Params) -> QueryResult[List[ChannelBreakdown]]:
        def parse(p: Params):
            filters = parse_lead_filters(p)
            return filters, filters.signature()

        return await self._execute(
            "lead_channels",
            params,
            parse,
            Collection.LEADS,
            lambda records, filters: run_lead_channels(records, filters, self.matcher),
        )

    async def lead_trends(self, params: Params) -> QueryResult[List[TrendPoint]]:
        def parse(p: Params):
            filters = parse_lead_filters(p)
            period = parse_trend_period(p)
            return (filters, period), {**filters.signature(), "period": period.value}

        return await self._execute(
            "lead_trends",
            params,
            parse,
            Collection.LEADS,
            lambda records, q: run_lead_trends(records, q[0], q[1], self.matcher, self.clock()),
        )

    async def top_prospects(self, params: Params) -> QueryResult[List[Lead]]:
        def parse(p: Params):
            filters = parse_lead_filters(p)
            limit = parse_limit(p)
            return (filters, limit), {**filters.signature(), "limit": limit}

        return await self._execute(
            "top_prospects",
            params,
            parse,
            Collection.LEADS,
            lambda records, q: run_top_prospects(records, q[0], q[1], self.matcher),
        )

    # -- market --------------------------------------------------------

    async def query_market(self, params: Params) -> QueryResult[MarketSummary]:
        def parse(p: Params):
            query = parse_market_query(p)
            return query, query.signature()

        return await self._execute("query_market", params, parse, Collection.MARKET_DATA, run_market_query)

    # -- dashboard -----------------------------------------------------

    async def dashboard(self) -> QueryResult[DashboardSnapshot]:
        """
        Portfolio summary, market summary, latest transactions and largest holdings.

        The four sub-queries run concurrently; any failure fails the whole
        dashboard with the first error encountered.
        """
        start_time = time.perf_counter()
        size = str(DASHBOARD_ITEMS)

        portfolio, market, transactions, assets = await asyncio.gather(
            self.query_assets({"summary": "true"}),
            self.query_market({}),
            self.query_transactions({"pageSize": size, "sortBy": "date", "sortOrder": "desc"}),
            self.query_assets({"pageSize": size, "sortBy": "totalValue", "sortOrder": "desc"}),
        )

        for result in (portfolio, market, transactions, assets):
            if not result.success:
                self._observe("dashboard", result.error.code.value, False, start_time)
                return QueryResult.failure(result.error)

        self._observe("dashboard", "success", False, start_time)
        return QueryResult.ok(
            DashboardSnapshot(
                portfolio=portfolio.data,
                market=market.data,
                recent_transactions=transactions.data.items,
                top_assets=assets.data.items,
            )
        )

    # -- plumbing ------------------------------------------------------

    async def load(self, collection: Collection) -> List[Record]:
        """Fetch one collection through the retry wrapper and parse it into records"""
        raw = await with_retry(
            lambda: self.source.fetch(collection),
            max_attempts=self.max_attempts,
            base_delay=self.backoff_base,
            timeout=self.fetch_timeout if self.fetch_timeout > 0 else None,
            should_retry=should_retry_fetch,
            sleep=self.sleep,
        )
        return parse_records(raw, collection.record_type)

    async def _execute(
        self,
        operation: str,
        params: Params,
        parse: Callable[[Params], Tuple[Q, Mapping[str, Any]]],
        collection: Collection,
        compute: Callable[[Sequence[Any], Q], T],
    ) -> QueryResult[T]:
        start_time = time.perf_counter()
        cache_hit = False

        try:
            # 1. Validate parameters
            query, signature = parse(params)

            # 2. Consult cache
            key = build_cache_key("GET", operation, signature)
            cached = self.cache.get(key)
            cache_hit = cached is not None
            record_cache_lookup(cache_hit)
            if cache_hit:
                self._observe(operation, "success", True, start_time)
                return cached

            # 3. Fetch collection
            records = await self.load(collection)

            # 4. Compute
            result = QueryResult.ok(compute(records, query))

            # 5. Cache successful result
            self.cache.set(key, result)
            self._observe(operation, "success", False, start_time)
            return result

        except DomainException as e:
            if isinstance(e, (DataSourceError, FetchTimeoutError)):
                fetch_failure_counter.labels(code=e.code.value).inc()
                logger.error(f"{operation} failed: {e.message}", extra={"operation": operation, "error_code": e.code.value})
            error = self._error_info(e)

        except Exception as e:
            logger.exception(f"Unexpected error in {operation}: {e}")
            error = ErrorInfo(
                code=ErrorCode.FETCH_ERROR,
                message=ERROR_MESSAGES[ErrorCode.FETCH_ERROR],
                details=GENERIC_DETAILS if self.production else str(e),
            )

        self._observe(operation, error.code.value, cache_hit, start_time)
        return QueryResult.failure(error)

    def _error_info(self, exc: DomainException) -> ErrorInfo:
        if isinstance(exc, ValidationError):
            return ErrorInfo(
                code=exc.code,
                message=ERROR_MESSAGES[exc.code],
                details=exc.reason,
                field=exc.field,
                value=exc.value,
            )

        return ErrorInfo(
            code=exc.code,
            message=ERROR_MESSAGES[exc.code],
            details=GENERIC_DETAILS if self.production else exc.message,
        )

    def _observe(self, operation: str, outcome: str, cache_hit: bool, start_time: float) -> None:
        duration = time.perf_counter() - start_time
        record_query(operation, outcome, duration)
        log_query(operation, outcome, cache_hit, duration * 1000)
