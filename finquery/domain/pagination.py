"""Paginator - deterministic windowing over an ordered sequence"""

import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

from finquery.domain.exceptions import ValidationError

T = TypeVar("T")

DEFAULT_MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Page(Generic[T]):
    """One window of a filtered, sorted result"""

    items: List[T]
    page: int
    page_size: int
    total: int
    total_pages: int


def paginate(ordered: Sequence[T], page: int, page_size: int, max_page_size: int = DEFAULT_MAX_PAGE_SIZE) -> Page[T]:
    """
    Slice page `page` (1-indexed) out of `ordered`.

    Pages past the end are not an error: they come back empty with the
    real `total` and `total_pages`.
    """
    if page < 1:
        raise ValidationError("page", page, "page must be greater than 0")
    if page_size < 1:
        raise ValidationError("pageSize", page_size, "pageSize must be greater than 0")
    if page_size > max_page_size:
        raise ValidationError("pageSize", page_size, f"pageSize cannot exceed {max_page_size}")

    total = len(ordered)
    start = (page - 1) * page_size

    return Page(
        items=list(ordered[start:start + page_size]),
        page=page,
        page_size=page_size,
        total=total,
        total_pages=math.ceil(total / page_size),
    )
