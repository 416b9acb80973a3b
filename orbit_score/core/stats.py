# orbit_score/core/stats.py

"""
COHORT STATISTICS PRIMITIVES
----------------------------
Small, total statistics helpers used by every pillar.

Rules:
- Never raise on degenerate input
- Empty / too-short input returns the documented default (0.0)
"""

import math
from typing import Iterable, List

import numpy as np


def _as_array(values: Iterable[float]) -> np.ndarray:
    return np.asarray(list(values), dtype=float)


def round_half_up(value: float) -> int:
    """
    Rounds .5 away from zero for positives (1.5 -> 2, 2.5 -> 3).

    Python's built-in round() uses banker's rounding, which would move
    scores sitting exactly on a half point.
    """
    return int(math.floor(value + 0.5))


def round_to(value: float, places: int) -> float:
    factor = 10 ** places
    return round_half_up(value * factor) / factor


def mean(values: Iterable[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def stddev(values: Iterable[float]) -> float:
    """Sample standard deviation (n - 1)."""
    arr = _as_array(values)
    if arr.size < 2:
        return 0.0
    return float(arr.std(ddof=1))


def coefficient_of_variation(values: Iterable[float]) -> float:
    arr = _as_array(values)
    if arr.size < 2:
        return 0.0

    m = float(arr.mean())
    if m == 0:
        return 0.0

    return float(arr.std(ddof=1)) / m


def median(values: Iterable[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.median(arr))


def mad(values: Iterable[float]) -> float:
    """Median Absolute Deviation."""
    arr = _as_array(values)
    if arr.size < 2:
        return 0.0

    med = np.median(arr)
    return float(np.median(np.abs(arr - med)))


def value_range(values: Iterable[float]) -> List[float]:
    """[min, max] of the values, [0.0, 0.0] for empty input."""
    arr = _as_array(values)
    if arr.size == 0:
        return [0.0, 0.0]
    return [float(arr.min()), float(arr.max())]
