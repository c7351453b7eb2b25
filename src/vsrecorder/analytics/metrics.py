"""Rate helpers shared by the analytics."""
from typing import Optional


def percent(numerator: int, denominator: int) -> int:
    """Whole percentage rounded half-up, 0 when the denominator is 0.

    Computed in integers: floor(n * 100 / d + 0.5) == (200n + d) // 2d.
    """
    if denominator <= 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)


def optional_percent(numerator: int, denominator: int) -> Optional[int]:
    """Like percent(), but None when there is nothing to divide by."""
    if denominator <= 0:
        return None
    return percent(numerator, denominator)


def mean_rounded(values: list[int]) -> int:
    """Mean of whole percentages rounded half-up, 0 for no values."""
    return percent(sum(values), len(values) * 100) if values else 0
