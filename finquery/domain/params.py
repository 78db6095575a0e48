"""Typed query objects parsed from flat wire parameters"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from finquery.domain.models import (
    AssetCategory,
    LeadSource,
    LeadStatus,
    TransactionKind,
    TransactionStatus,
)
from finquery.domain.predicates import (
    Predicate,
    SchemeMatcher,
    build_asset_predicate,
    build_lead_predicate,
    build_market_predicate,
    build_transaction_predicate,
)
from finquery.domain.sorting import AssetSortField, LeadSortField, SortDirection, TransactionSortField
from finquery.domain.trends import TrendPeriod
from finquery.domain.validation import (
    sanitize_string,
    validate_boolean,
    validate_date,
    validate_date_range,
    validate_enum,
    validate_limit,
    validate_page_size,
    validate_positive_integer,
    validate_sort_field,
    validate_sort_order,
    validate_symbols,
)

Params = Mapping[str, Optional[str]]

TRANSACTION_PAGE_SIZE = 10
ASSET_PAGE_SIZE = 20
LEAD_PAGE_SIZE = 10


def _wire(value: Any) -> Any:
    """Render a resolved value the way it would appear on the query string"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_wire(v) for v in value]
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int
    sort_by: Enum
    sort_order: SortDirection

    def signature(self) -> Dict[str, Any]:
        return {
            "page": _wire(self.page),
            "pageSize": _wire(self.page_size),
            "sortBy": _wire(self.sort_by),
            "sortOrder": _wire(self.sort_order),
        }


def parse_page_request(
    params: Params,
    sort_fields: type,
    default_sort: Enum,
    default_page_size: int,
    max_page_size: int,
) -> PageRequest:
    return PageRequest(
        page=validate_positive_integer(params.get("page"), "page", 1),
        page_size=validate_page_size(params.get("pageSize"), default_page_size, max_page_size),
        sort_by=validate_sort_field(params.get("sortBy"), sort_fields, default_sort),
        sort_order=validate_sort_order(params.get("sortOrder")),
    )


def _date_bounds(params: Params) -> tuple:
    date_from = validate_date(params.get("dateFrom"), "dateFrom")
    date_to = validate_date(params.get("dateTo"), "dateTo")
    validate_date_range(date_from, date_to)
    return date_from, date_to


@dataclass(frozen=True)
class TransactionFilters:
    kind: Optional[TransactionKind] = None
    status: Optional[TransactionStatus] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def predicate(self) -> Predicate:
        return build_transaction_predicate(self.kind, self.status, self.date_from, self.date_to)

    def signature(self) -> Dict[str, Any]:
        return {
            "kind": _wire(self.kind),
            "status": _wire(self.status),
            "dateFrom": _wire(self.date_from),
            "dateTo": _wire(self.date_to),
        }


@dataclass(frozen=True)
class TransactionQuery:
    filters: TransactionFilters
    paging: PageRequest

    def signature(self) -> Dict[str, Any]:
        return {**self.filters.signature(), **self.paging.signature()}


def parse_transaction_filters(params: Params) -> TransactionFilters:
    kind = validate_enum(params.get("kind"), TransactionKind, "kind", "Transaction type")
    status = validate_enum(params.get("status"), TransactionStatus, "status", "Transaction status")
    date_from, date_to = _date_bounds(params)
    return TransactionFilters(kind=kind, status=status, date_from=date_from, date_to=date_to)


def parse_transaction_query(params: Params, max_page_size: int = 100) -> TransactionQuery:
    return TransactionQuery(
        filters=parse_transaction_filters(params),
        paging=parse_page_request(
            params, TransactionSortField, TransactionSortField.DATE, TRANSACTION_PAGE_SIZE, max_page_size
        ),
    )


@dataclass(frozen=True)
class AssetFilters:
    category: Optional[AssetCategory] = None

    def predicate(self) -> Predicate:
        return build_asset_predicate(self.category)

    def signature(self) -> Dict[str, Any]:
        return {"category": _wire(self.category)}


@dataclass(frozen=True)
class AssetQuery:
    filters: AssetFilters
    paging: PageRequest
    summary: bool = False

    def signature(self) -> Dict[str, Any]:
        # Paging does not shape a summary, so it stays out of the key
        if self.summary:
            return {**self.filters.signature(), "summary": _wire(True)}
        return {**self.filters.signature(), **self.paging.signature()}


def parse_asset_filters(params: Params) -> AssetFilters:
    return AssetFilters(
        category=validate_enum(params.get("category"), AssetCategory, "category", "Asset category"),
    )


def parse_asset_query(params: Params, max_page_size: int = 100) -> AssetQuery:
    return AssetQuery(
        filters=parse_asset_filters(params),
        paging=parse_page_request(
            params, AssetSortField, AssetSortField.TOTAL_VALUE, ASSET_PAGE_SIZE, max_page_size
        ),
        summary=validate_boolean(params.get("summary"), "summary"),
    )


@dataclass(frozen=True)
class LeadFilters:
    status: Optional[LeadStatus] = None
    source: Optional[LeadSource] = None
    assigned_to: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    scheme: Optional[str] = None
    search: Optional[str] = None

    def predicate(self, matcher: Optional[SchemeMatcher] = None) -> Predicate:
        return build_lead_predicate(
            status=self.status,
            source=self.source,
            assigned_to=self.assigned_to,
            date_from=self.date_from,
            date_to=self.date_to,
            scheme=self.scheme,
            search=self.search,
            matcher=matcher,
        )

    def signature(self) -> Dict[str, Any]:
        return {
            "status": _wire(self.status),
            "source": _wire(self.source),
            "assignedTo": self.assigned_to,
            "dateFrom": _wire(self.date_from),
            "dateTo": _wire(self.date_to),
            "scheme": self.scheme,
            "search": self.search,
        }


@dataclass(frozen=True)
class LeadQuery:
    filters: LeadFilters
    paging: PageRequest
    analytics: bool = False

    def signature(self) -> Dict[str, Any]:
        if self.analytics:
            return {**self.filters.signature(), "analytics": _wire(True)}
        return {**self.filters.signature(), **self.paging.signature()}


def parse_lead_filters(params: Params) -> LeadFilters:
    date_from, date_to = _date_bounds(params)
    return LeadFilters(
        status=validate_enum(params.get("status"), LeadStatus, "status", "Lead status"),
        source=validate_enum(params.get("source"), LeadSource, "source", "Lead source"),
        assigned_to=sanitize_string(params.get("assignedTo")),
        date_from=date_from,
        date_to=date_to,
        scheme=sanitize_string(params.get("scheme")),
        search=sanitize_string(params.get("search")),
    )


def parse_lead_query(params: Params, max_page_size: int = 100) -> LeadQuery:
    return LeadQuery(
        filters=parse_lead_filters(params),
        paging=parse_page_request(
            params, LeadSortField, LeadSortField.CREATED_DATE, LEAD_PAGE_SIZE, max_page_size
        ),
        analytics=validate_boolean(params.get("analytics"), "analytics"),
    )


@dataclass(frozen=True)
class MarketQuery:
    symbols: List[str] = field(default_factory=list)
    sector: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def predicate(self) -> Predicate:
        return build_market_predicate(self.symbols, self.sector)

    def signature(self) -> Dict[str, Any]:
        return {
            "symbols": sorted(self.symbols),
            "sector": self.sector,
            "dateFrom": _wire(self.date_from),
            "dateTo": _wire(self.date_to),
        }


def parse_market_query(params: Params) -> MarketQuery:
    date_from, date_to = _date_bounds(params)
    return MarketQuery(
        symbols=validate_symbols(params.get("symbols")) or [],
        sector=sanitize_string(params.get("sector")),
        date_from=date_from,
        date_to=date_to,
    )


def parse_limit(params: Params) -> int:
    return validate_limit(params.get("limit"))


def parse_trend_period(params: Params) -> TrendPeriod:
    return validate_enum(params.get("period"), TrendPeriod, "period", "Trend period") or TrendPeriod.DAILY
