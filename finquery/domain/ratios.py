"""Guarded arithmetic shared by every summary"""

import math
from typing import Iterable


def safe_divide(numerator: float, denominator: float) -> float:
    """
    Divide, resolving degenerate denominators to zero.

    Every ratio in the engine goes through here so empty collections and
    zero-valued totals behave the same way everywhere:
    - denominator <= 0 -> 0.0
    - non-finite result (inf/nan inputs) -> 0.0
    """
    if not denominator > 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def percentage(part: float, whole: float) -> float:
    """Share of `whole` represented by `part`, in percent (0 when whole <= 0)"""
    return safe_divide(part, whole) * 100


def finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def finite_sum(values: Iterable[float]) -> float:
    """Exactly rounded sum; an overflowing or undefined total resolves to 0.0"""
    try:
        total = math.fsum(values)
    except (OverflowError, ValueError):
        return 0.0
    return finite_or_zero(total)
