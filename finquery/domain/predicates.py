"""Predicate library - per-field filters composed into one predicate per query"""

from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, TypeVar

from finquery.domain.models import (
    AssetCategory,
    Lead,
    LeadSource,
    LeadStatus,
    TransactionKind,
    TransactionStatus,
)

R = TypeVar("R")

Predicate = Callable[[R], bool]

DEFAULT_SCHEME_ALIASES: Dict[str, List[str]] = {
    "bluechip": ["balanced", "blue chip"],
    "midcap": ["mid-cap", "mid cap"],
    "smallcap": ["small-cap", "small cap"],
}


class SchemeMatcher(Protocol):
    """Decides whether a lead's free-text scheme name satisfies a scheme query"""

    def matches(self, query: str, candidate: str) -> bool:
        ...


class AliasSchemeMatcher:
    """
    Fuzzy scheme matching tuned for recall.

    Both sides are lower-cased and trimmed. A candidate matches when:
    - either string contains the other
    - the query's first token (usually the fund house) occurs in the candidate
    - the alias table links the two, in either direction

    False positives are acceptable here; a missed scheme is not.
    """

    def __init__(self, aliases: Optional[Dict[str, List[str]]] = None) -> None:
        self.aliases = DEFAULT_SCHEME_ALIASES if aliases is None else aliases

    def matches(self, query: str, candidate: str) -> bool:
        q = query.strip().lower()
        c = candidate.strip().lower()

        if not c or not q:
            return False

        if q in c or c in q:
            return True

        brand = q.split()[0]
        if brand in c:
            return True

        return self._alias_linked(q, c)

    def _alias_linked(self, query: str, candidate: str) -> bool:
        for key, variants in self.aliases.items():
            if key in query and any(variant in candidate for variant in variants):
                return True
            if key in candidate and any(variant in query for variant in variants):
                return True
        return False


def always(_: object) -> bool:
    return True


def all_of(predicates: Iterable[Predicate]) -> Predicate:
    """Logical AND; an empty set of filters accepts everything"""
    active = list(predicates)
    if not active:
        return always

    def combined(record: object) -> bool:
        return all(predicate(record) for predicate in active)

    return combined


def equals(getter: Callable[[R], object], expected: object) -> Predicate:
    return lambda record: getter(record) == expected


def within_dates(
    getter: Callable[[R], datetime],
    start: Optional[datetime],
    end: Optional[datetime],
) -> Optional[Predicate]:
    """Inclusive on both bounds; a missing bound leaves that side open"""
    if start is None and end is None:
        return None

    def in_range(record: R) -> bool:
        moment = getter(record)
        if start is not None and moment < start:
            return False
        if end is not None and moment > end:
            return False
        return True

    return in_range


def lead_text_search(term: str) -> Predicate:
    """
    Case-insensitive substring over company, contact name and email.

    The phone number is compared against the raw term so formatted numbers
    like "+91 98" still hit.
    """
    needle = term.lower()

    def matches(lead: Lead) -> bool:
        if needle in lead.company.lower():
            return True
        if needle in lead.contact_name.lower():
            return True
        if needle in lead.contact_email.lower():
            return True
        return bool(lead.contact_phone) and term in lead.contact_phone

    return matches


def scheme_filter(query: str, matcher: SchemeMatcher) -> Predicate:
    return lambda lead: bool(lead.scheme) and matcher.matches(query, lead.scheme)


def _compact(predicates: Sequence[Optional[Predicate]]) -> List[Predicate]:
    return [p for p in predicates if p is not None]


def build_transaction_predicate(
    kind: Optional[TransactionKind] = None,
    status: Optional[TransactionStatus] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> Predicate:
    return all_of(_compact([
        equals(lambda t: t.kind, kind) if kind is not None else None,
        equals(lambda t: t.status, status) if status is not None else None,
        within_dates(lambda t: t.date, date_from, date_to),
    ]))


def build_asset_predicate(category: Optional[AssetCategory] = None) -> Predicate:
    return all_of(_compact([
        equals(lambda a: a.category, category) if category is not None else None,
    ]))


def build_lead_predicate(
    status: Optional[LeadStatus] = None,
    source: Optional[LeadSource] = None,
    assigned_to: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    scheme: Optional[str] = None,
    search: Optional[str] = None,
    matcher: Optional[SchemeMatcher] = None,
) -> Predicate:
    """Date bounds apply to `createdDate`"""
    return all_of(_compact([
        equals(lambda l: l.status, status) if status is not None else None,
        equals(lambda l: l.source, source) if source is not None else None,
        equals(lambda l: l.assigned_to, assigned_to) if assigned_to else None,
        within_dates(lambda l: l.created_date, date_from, date_to),
        scheme_filter(scheme, matcher or AliasSchemeMatcher()) if scheme else None,
        lead_text_search(search) if search else None,
    ]))


def build_market_predicate(
    symbols: Optional[Sequence[str]] = None,
    sector: Optional[str] = None,
) -> Predicate:
    wanted = frozenset(symbols) if symbols else None
    return all_of(_compact([
        (lambda m: m.symbol in wanted) if wanted else None,
        equals(lambda m: m.sector, sector) if sector else None,
    ]))


def filter_records(records: Iterable[R], predicate: Predicate) -> List[R]:
    """Keep matching records, preserving their relative order"""
    return [record for record in records if predicate(record)]
