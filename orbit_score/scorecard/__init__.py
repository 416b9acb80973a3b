from .assembler import (
    MIN_CASE_THRESHOLD,
    ScorecardInput,
    calculate_scores,
    build_scorecard,
    compute_period_composites,
)
from .composite import compute_composite, get_grade, classify_trend, GRADE_BANDS
from .export import scorecard_to_dict, scorecards_to_json, surgeon_response

__all__ = [
    "MIN_CASE_THRESHOLD",
    "ScorecardInput",
    "calculate_scores",
    "build_scorecard",
    "compute_period_composites",
    "compute_composite",
    "get_grade",
    "classify_trend",
    "GRADE_BANDS",
    "scorecard_to_dict",
    "scorecards_to_json",
    "surgeon_response",
]
