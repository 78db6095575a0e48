"""Sort engine - closed sort-field sets per record kind, stable comparator ordering"""

from datetime import datetime
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Tuple, Type, TypeVar

from finquery.domain.models import Asset, Lead, Transaction

R = TypeVar("R")

Comparator = Callable[[Any, Any], int]


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TransactionSortField(str, Enum):
    DATE = "date"
    TOTAL = "total"
    COMPANY = "company"


class AssetSortField(str, Enum):
    TOTAL_VALUE = "totalValue"
    UNREALIZED_GAIN_PERCENT = "unrealizedGainPercent"
    ALLOCATION = "allocation"
    NAME = "name"
    YEAR_PERFORMANCE = "yearPerformance"


class LeadSortField(str, Enum):
    CREATED_DATE = "createdDate"
    LAST_CONTACTED_DATE = "lastContactedDate"
    POTENTIAL_VALUE = "potentialValue"
    COMPANY = "company"


def compare_numbers(a: float, b: float) -> int:
    """Sign of the difference"""
    diff = a - b
    return (diff > 0) - (diff < 0)


def compare_instants(a: datetime, b: datetime) -> int:
    return (a > b) - (a < b)


def compare_text(a: str, b: str) -> int:
    """Case-insensitive collation; strings differing only by case compare equal"""
    left, right = a.casefold(), b.casefold()
    return (left > right) - (left < right)


SortSpec = Tuple[Callable[[Any], Any], Comparator]

# field enum -> field -> (key extractor, ascending comparator)
# Keyed per enum class: str enums of different kinds share values like "company"
SORT_SPECS: Dict[Type[Enum], Dict[Enum, SortSpec]] = {
    TransactionSortField: {
        TransactionSortField.DATE: (lambda t: t.date, compare_instants),
        TransactionSortField.TOTAL: (lambda t: t.total, compare_numbers),
        TransactionSortField.COMPANY: (lambda t: t.company or "", compare_text),
    },
    AssetSortField: {
        AssetSortField.TOTAL_VALUE: (lambda a: a.total_value, compare_numbers),
        AssetSortField.UNREALIZED_GAIN_PERCENT: (lambda a: a.unrealized_gain_percent, compare_numbers),
        AssetSortField.ALLOCATION: (lambda a: a.allocation, compare_numbers),
        AssetSortField.NAME: (lambda a: a.name, compare_text),
        AssetSortField.YEAR_PERFORMANCE: (lambda a: a.performance.year, compare_numbers),
    },
    LeadSortField: {
        LeadSortField.CREATED_DATE: (lambda l: l.created_date, compare_instants),
        LeadSortField.LAST_CONTACTED_DATE: (lambda l: l.last_contacted_date, compare_instants),
        LeadSortField.POTENTIAL_VALUE: (lambda l: l.potential_value, compare_numbers),
        LeadSortField.COMPANY: (lambda l: l.company or "", compare_text),
    },
}


def sort_spec(field: Enum) -> SortSpec:
    return SORT_SPECS[type(field)][field]


def record_comparator(field: Enum, direction: SortDirection) -> Callable[[Any, Any], int]:
    """
    Build the comparator for one field.

    Descending is the negated ascending comparator, so equal keys still
    compare as 0 and keep their input order under a stable sort.
    """
    key, compare = sort_spec(field)

    def ascending(a: Any, b: Any) -> int:
        return compare(key(a), key(b))

    if direction is SortDirection.DESC:
        return lambda a, b: -ascending(a, b)
    return ascending


def sort_records(records: Iterable[R], field: Enum, direction: SortDirection = SortDirection.DESC) -> List[R]:
    """Return a new list ordered by `field`; the input is left untouched"""
    return sorted(records, key=cmp_to_key(record_comparator(field, direction)))


def sort_transactions(
    transactions: Iterable[Transaction],
    field: TransactionSortField,
    direction: SortDirection = SortDirection.DESC,
) -> List[Transaction]:
    return sort_records(transactions, field, direction)


def sort_assets(
    assets: Iterable[Asset],
    field: AssetSortField,
    direction: SortDirection = SortDirection.DESC,
) -> List[Asset]:
    return sort_records(assets, field, direction)


def sort_leads(
    leads: Iterable[Lead],
    field: LeadSortField,
    direction: SortDirection = SortDirection.DESC,
) -> List[Lead]:
    return sort_records(leads, field, direction)
