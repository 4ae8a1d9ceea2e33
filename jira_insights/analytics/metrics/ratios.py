"""Percentage and clamping helpers shared by the scorers."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: int | float, whole: int | float, *, empty: int = 0) -> int:
    """``round(100 * part / whole)`` rounding halves up; ``empty`` when whole is 0.

    Examples
    --------
    >>> percentage(2, 5)
    40
    >>> percentage(0, 0, empty=100)
    100
    """
    if not whole:
        return empty
    return round_half_up(100.0 * part / whole)


def ratio(part: int | float, whole: int | float) -> float:
    if not whole:
        return 0.0
    return part / whole


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return round(max(low, min(high, value)), 1)
