"""Numeric helpers shared by the scorers."""

import math
from typing import Iterable


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; scores must round .5 upward.
    return int(math.floor(value + 0.5))


def clip_score(value: float, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, round_half_up(value)))


def mean_or_zero(values: Iterable[float]) -> float:
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)
