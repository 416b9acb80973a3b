# orbit_score/core/scoring.py

"""
NORMALIZATION PRIMITIVES
------------------------
1. mad_score: median-anchored MAD scoring of a value against a peer cohort.
2. graduated_case_score: piecewise-linear decay for time-based case metrics.

MAD band (3 effective MADs = full range):

    1 MAD from median  ->  ~33 or ~67
    2 MAD from median  ->  ~17 or ~83
    3 MAD from median  ->   10 or 100  (floored at MIN_PILLAR_SCORE)
"""

from typing import Sequence

from orbit_score.core.stats import mad, median, round_half_up, value_range


# =====================================================
# SCORING CONSTANTS
# =====================================================

NEUTRAL_SCORE = 50

# No pillar scores below 10, keeps composites recoverable
MIN_PILLAR_SCORE = 10
MAX_PILLAR_SCORE = 100

# Effective MAD is at least 5% of the cohort median
MIN_MAD_PERCENT = 0.05

MAD_BAND = 3
MAD_MULTIPLIER = 50 / MAD_BAND


def clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


def _clamp_score(score: float) -> int:
    return int(clamp(round_half_up(score), MIN_PILLAR_SCORE, MAX_PILLAR_SCORE))


def effective_mad(cohort: Sequence[float]) -> float:
    """
    max(actual MAD, |median| * MIN_MAD_PERCENT)

    Returns 0.0 only when both the cohort median and its MAD are zero.
    """
    if not cohort:
        return 0.0
    return max(mad(cohort), abs(median(cohort)) * MIN_MAD_PERCENT)


# =====================================================
# MAD SCORE
# =====================================================

def mad_score(
    value: float,
    cohort: Sequence[float],
    higher_is_better: bool = True,
) -> int:
    """
    Maps a value to [10, 100] relative to a peer cohort, anchored at 50.

    Fallbacks:
    - 0 peers               -> 50
    - 1 peer                -> ratio scaling around 50 (peer == 0 -> 50)
    - median = MAD = 0      -> min/max range interpolation
    - all peers identical   -> 50
    """
    cohort = list(cohort)

    if not cohort:
        return NEUTRAL_SCORE

    if len(cohort) == 1:
        peer = cohort[0]
        if peer == 0:
            return NEUTRAL_SCORE

        shift = (value / peer - 1) * 100
        score = NEUTRAL_SCORE + shift if higher_is_better else NEUTRAL_SCORE - shift
        return _clamp_score(score)

    cohort_median = median(cohort)
    eff_mad = effective_mad(cohort)

    if eff_mad == 0:
        lo, hi = value_range(cohort)
        if hi == lo:
            return NEUTRAL_SCORE

        position = (value - lo) / (hi - lo)
        score = position * 100 if higher_is_better else (1 - position) * 100
        return _clamp_score(score)

    normalized = (value - cohort_median) / eff_mad

    if higher_is_better:
        score = NEUTRAL_SCORE + normalized * MAD_MULTIPLIER
    else:
        score = NEUTRAL_SCORE - normalized * MAD_MULTIPLIER

    return _clamp_score(score)


# =====================================================
# GRADUATED DECAY
# =====================================================

def graduated_case_score(minutes_over: float, floor_minutes: float) -> float:
    """
    1.0 within grace, then linear decay to 0.0 at floor_minutes past grace.
    """
    if minutes_over <= 0:
        return 1.0
    if minutes_over >= floor_minutes:
        return 0.0
    return 1.0 - (minutes_over / floor_minutes)
