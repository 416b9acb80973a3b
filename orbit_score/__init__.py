"""
ORbit Score v2.1

Surgeon performance scoring engine: four peer-relative pillars,
a weighted composite, letter grades and period-over-period trend.
"""

from .__version__ import __version__

# Keep package init lightweight and safe
# Reporting (matplotlib / reportlab) should be imported explicitly by users

# Scoring Engine
from .core.scoring import mad_score, graduated_case_score
from .core.records import (
    ScorecardCase,
    CaseFinancials,
    CaseFlag,
    DateRange,
    Scorecard,
)
from .config.scoring_config import ScoringSettings
from .scorecard import (
    MIN_CASE_THRESHOLD,
    ScorecardInput,
    calculate_scores,
    get_grade,
)

# Improvement Plans
from .narrative import generate_improvement_plan

__all__ = [
    "__version__",
    "mad_score",
    "graduated_case_score",
    "ScorecardCase",
    "CaseFinancials",
    "CaseFlag",
    "DateRange",
    "Scorecard",
    "ScoringSettings",
    "MIN_CASE_THRESHOLD",
    "ScorecardInput",
    "calculate_scores",
    "get_grade",
    "generate_improvement_plan",
]
