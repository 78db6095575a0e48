"""Query pipelines - filter, then sort, then paginate or aggregate"""

from datetime import datetime
from typing import List, Optional, Sequence, Union

from finquery.domain.cashflow import CashFlow, summarize_cash_flow
from finquery.domain.lead_analytics import (
    ChannelBreakdown,
    LeadAnalytics,
    channel_breakdown,
    summarize_leads,
    top_prospects,
)
from finquery.domain.market_analytics import MarketSummary, summarize_market, trim_history
from finquery.domain.models import Asset, Lead, MarketInstrument, Transaction
from finquery.domain.pagination import DEFAULT_MAX_PAGE_SIZE, Page, paginate
from finquery.domain.params import (
    AssetFilters,
    AssetQuery,
    LeadFilters,
    LeadQuery,
    MarketQuery,
    PageRequest,
    TransactionFilters,
    TransactionQuery,
)
from finquery.domain.portfolio_analytics import (
    PortfolioSummary,
    PortfolioTotals,
    calculate_portfolio_totals,
    summarize_portfolio,
    top_performing_assets,
)
from finquery.domain.predicates import SchemeMatcher, filter_records
from finquery.domain.sorting import AssetSortField, SortDirection, TransactionSortField, sort_records
from finquery.domain.trends import TrendPeriod, TrendPoint, lead_trends


def _page(records: Sequence, paging: PageRequest, max_page_size: int) -> Page:
    ordered = sort_records(records, paging.sort_by, paging.sort_order)
    return paginate(ordered, paging.page, paging.page_size, max_page_size)


def run_transaction_query(
    transactions: Sequence[Transaction],
    query: TransactionQuery,
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
) -> Page[Transaction]:
    matched = filter_records(transactions, query.filters.predicate())
    return _page(matched, query.paging, max_page_size)


def run_cash_flow(transactions: Sequence[Transaction], filters: TransactionFilters) -> CashFlow:
    return summarize_cash_flow(filter_records(transactions, filters.predicate()))


def latest_transactions(transactions: Sequence[Transaction], limit: int = 5) -> List[Transaction]:
    query = TransactionQuery(
        filters=TransactionFilters(),
        paging=PageRequest(page=1, page_size=limit, sort_by=TransactionSortField.DATE, sort_order=SortDirection.DESC),
    )
    return run_transaction_query(transactions, query, max_page_size=max(limit, 1)).items


def run_asset_query(
    assets: Sequence[Asset],
    query: AssetQuery,
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
) -> Union[Page[Asset], PortfolioSummary]:
    """Paged holdings, or a portfolio summary of the filtered holdings when `summary` is set"""
    matched = filter_records(assets, query.filters.predicate())
    if query.summary:
        return summarize_portfolio(matched)
    return _page(matched, query.paging, max_page_size)


def run_portfolio_totals(assets: Sequence[Asset], filters: AssetFilters) -> PortfolioTotals:
    return calculate_portfolio_totals(filter_records(assets, filters.predicate()))


def run_top_assets(assets: Sequence[Asset], filters: AssetFilters, limit: int) -> List[Asset]:
    return top_performing_assets(filter_records(assets, filters.predicate()), limit)


def largest_assets(assets: Sequence[Asset], limit: int = 5) -> List[Asset]:
    query = AssetQuery(
        filters=AssetFilters(),
        paging=PageRequest(page=1, page_size=limit, sort_by=AssetSortField.TOTAL_VALUE, sort_order=SortDirection.DESC),
    )
    return run_asset_query(assets, query, max_page_size=max(limit, 1)).items


def run_lead_query(
    leads: Sequence[Lead],
    query: LeadQuery,
    matcher: Optional[SchemeMatcher] = None,
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
) -> Union[Page[Lead], LeadAnalytics]:
    matched = filter_records(leads, query.filters.predicate(matcher))
    if query.analytics:
        return summarize_leads(matched)
    return _page(matched, query.paging, max_page_size)


def run_lead_channels(
    leads: Sequence[Lead],
    filters: LeadFilters,
    matcher: Optional[SchemeMatcher] = None,
) -> List[ChannelBreakdown]:
    return channel_breakdown(filter_records(leads, filters.predicate(matcher)))


def run_lead_trends(
    leads: Sequence[Lead],
    filters: LeadFilters,
    period: TrendPeriod,
    matcher: Optional[SchemeMatcher] = None,
    now: Optional[datetime] = None,
) -> List[TrendPoint]:
    return lead_trends(filter_records(leads, filters.predicate(matcher)), period, now)


def run_top_prospects(
    leads: Sequence[Lead],
    filters: LeadFilters,
    limit: int,
    matcher: Optional[SchemeMatcher] = None,
) -> List[Lead]:
    return top_prospects(filter_records(leads, filters.predicate(matcher)), limit)


def run_market_query(instruments: Sequence[MarketInstrument], query: MarketQuery) -> MarketSummary:
    matched = filter_records(instruments, query.predicate())
    return summarize_market(trim_history(matched, query.date_from, query.date_to))
