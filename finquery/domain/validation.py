"""Query parameter validation - raw strings in, typed values or ValidationError out"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Type, TypeVar

from finquery.domain.exceptions import ValidationError
from finquery.domain.models import ensure_utc
from finquery.domain.sorting import SortDirection
from finquery.utils.date_utils import add_years

E = TypeVar("E", bound=Enum)

MIN_QUERY_DATE = datetime(1900, 1, 1, tzinfo=timezone.utc)
MAX_FUTURE_YEARS = 10
MAX_SYMBOLS = 20
MAX_TEXT_LENGTH = 255

_SYMBOL_PATTERN = re.compile(r"^[A-Za-z0-9.\-^]{1,10}$")
_SCRIPT_PATTERN = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_TAG_PATTERN = re.compile(r"<[^>]+>")


def validate_positive_integer(value: Optional[str], field: str, default: int) -> int:
    if value is None or value == "":
        return default

    try:
        parsed = int(value.strip())
    except ValueError:
        raise ValidationError(field, value, f"{field} must be a valid number")

    if parsed < 1:
        raise ValidationError(field, value, f"{field} must be greater than 0")

    return parsed


def validate_page_size(value: Optional[str], default: int = 10, max_size: int = 100) -> int:
    page_size = validate_positive_integer(value, "pageSize", default)

    if page_size > max_size:
        raise ValidationError("pageSize", page_size, f"pageSize cannot exceed {max_size}")

    return page_size


def validate_limit(value: Optional[str], default: int = 5, max_limit: int = 50) -> int:
    limit = validate_positive_integer(value, "limit", default)

    if limit > max_limit:
        raise ValidationError("limit", limit, f"limit cannot exceed {max_limit}")

    return limit


def validate_date(value: Optional[str], field: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or timestamp into an aware UTC datetime.

    Date-only values resolve to midnight UTC. Dates before 1900 or more than
    ten years past `now` are rejected.
    """
    if not value:
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = ensure_utc(datetime.fromisoformat(text))
    except (ValueError, OverflowError):
        raise ValidationError(field, value, f"{field} must be a valid date")

    upper_bound = add_years(now or datetime.now(timezone.utc), MAX_FUTURE_YEARS)
    if parsed < MIN_QUERY_DATE or parsed > upper_bound:
        raise ValidationError(field, value, f"{field} must be between 1900 and {MAX_FUTURE_YEARS} years from now")

    return parsed


def validate_date_range(
    start: Optional[datetime],
    end: Optional[datetime],
    start_field: str = "dateFrom",
) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError(start_field, start.isoformat(), f"{start_field} must not be after the end of the range")


def validate_sort_order(value: Optional[str]) -> SortDirection:
    if not value:
        return SortDirection.DESC

    try:
        return SortDirection(value)
    except ValueError:
        raise ValidationError("sortOrder", value, 'sortOrder must be either "asc" or "desc"')


def validate_enum(value: Optional[str], enum_cls: Type[E], field: str, label: str) -> Optional[E]:
    """Map a raw value onto an enum by its wire value; None when absent"""
    if not value:
        return None

    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(field, value, f"{label} must be one of: {allowed}")


def validate_sort_field(value: Optional[str], enum_cls: Type[E], default: E) -> E:
    if not value:
        return default

    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError("sortBy", value, f"sortBy must be one of: {allowed}")


def validate_boolean(value: Optional[str], field: str) -> bool:
    if not value:
        return False

    if value not in ("true", "false"):
        raise ValidationError(field, value, f'{field} must be either "true" or "false"')

    return value == "true"


def sanitize_string(value: Optional[str], max_length: int = MAX_TEXT_LENGTH) -> Optional[str]:
    """Strip markup and surrounding whitespace; empty results count as absent"""
    if not value:
        return None

    sanitized = _TAG_PATTERN.sub("", _SCRIPT_PATTERN.sub("", value)).strip()
    if not sanitized:
        return None

    return sanitized[:max_length]


def validate_symbols(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None

    symbols = [s.strip() for s in value.split(",") if s.strip()]

    for symbol in symbols:
        if not _SYMBOL_PATTERN.match(symbol):
            raise ValidationError("symbols", symbol, f"Invalid symbol format: {symbol}")

    if len(symbols) > MAX_SYMBOLS:
        raise ValidationError("symbols", symbols, f"Cannot query more than {MAX_SYMBOLS} symbols at once")

    return symbols or None
