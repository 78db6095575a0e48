"""Data source contract and record parsing shared by every adapter"""

from enum import Enum
from typing import Any, Dict, List, Protocol, Type, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from finquery.domain.exceptions import FetchError
from finquery.domain.models import Asset, Lead, MarketInstrument, Record, Transaction

R = TypeVar("R", bound=Record)


class Collection(str, Enum):
    TRANSACTIONS = "transactions"
    ASSETS = "assets"
    LEADS = "leads"
    MARKET_DATA = "market-data"

    @property
    def record_type(self) -> Type[Record]:
        return _RECORD_TYPES[self]


_RECORD_TYPES: Dict[Collection, Type[Record]] = {
    Collection.TRANSACTIONS: Transaction,
    Collection.ASSETS: Asset,
    Collection.LEADS: Lead,
    Collection.MARKET_DATA: MarketInstrument,
}


class DataSource(Protocol):
    """Returns the raw JSON objects of one collection, or raises DataSourceError"""

    async def fetch(self, collection: Collection) -> List[Dict[str, Any]]:
        ...


def ensure_record_list(payload: Any, collection: Collection) -> List[Dict[str, Any]]:
    """Accept a bare JSON array or an object wrapping one under "data" """
    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]

    if not isinstance(payload, list):
        raise FetchError(f"Expected a list of {collection.value} records, got {type(payload).__name__}")

    return payload


def parse_records(raw: List[Dict[str, Any]], record_type: Type[R]) -> List[R]:
    """
    Validate every raw object into its record type.

    One bad record fails the whole batch.

    Raises:
        FetchError: A record is missing fields, has the wrong types or
            violates a derived-value check
    """
    try:
        return TypeAdapter(List[record_type]).validate_python(raw)
    except PydanticValidationError as e:
        raise FetchError(f"Invalid {record_type.__name__} data: {e.error_count()} error(s), first: {e.errors()[0]['msg']}") from e
