from typing import Optional

from orbit_score.core.records import GradeInfo, PillarScores
from orbit_score.core.stats import round_half_up
from orbit_score.pillars.base import PILLARS


# =====================================================
# GRADE BANDS (inclusive lower bound)
# =====================================================

GRADE_BANDS = [
    (90, GradeInfo(letter="A", label="Elite", text="#059669", bg="#ECFDF5")),
    (80, GradeInfo(letter="B", label="Strong", text="#2563EB", bg="#EFF6FF")),
    (70, GradeInfo(letter="C", label="Developing", text="#D97706", bg="#FFFBEB")),
]

GRADE_D = GradeInfo(letter="D", label="Needs Improvement", text="#DC2626", bg="#FEF2F2")


def compute_composite(pillars: PillarScores) -> int:
    """Weighted sum of the four pillar scores."""
    values = pillars.as_dict()
    return round_half_up(sum((values.get(p.key) or 0) * p.weight for p in PILLARS))


def get_grade(score: float) -> GradeInfo:
    for threshold, grade in GRADE_BANDS:
        if score >= threshold:
            return grade
    return GRADE_D


def classify_trend(current: int, previous: Optional[int]) -> str:
    if previous is None:
        return "stable"
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "stable"
