from dataclasses import dataclass
from typing import List, Sequence, Tuple

from orbit_score.core.scoring import NEUTRAL_SCORE
from orbit_score.core.stats import round_half_up


# =====================================================
# PILLAR DEFINITIONS (PUBLIC CONTRACT)
# =====================================================

@dataclass(frozen=True)
class PillarDefinition:
    key: str
    label: str
    weight: float
    color: str
    description: str


PILLARS: List[PillarDefinition] = [
    PillarDefinition("profitability", "Profitability", 0.30, "#2563EB", "Margin per OR minute"),
    PillarDefinition("consistency", "Consistency", 0.25, "#059669", "Case duration predictability"),
    PillarDefinition("sched_adherence", "Schedule Adherence", 0.25, "#DB2777", "Cases starting on time"),
    PillarDefinition("availability", "Availability", 0.20, "#7C3AED", "Surgeon readiness"),
]

PILLAR_WEIGHTS = {p.key: p.weight for p in PILLARS}

DEFAULT_METHOD = "default (no valid procedure cohorts)"


# =====================================================
# VOLUME-WEIGHTED BLEND
# =====================================================

def volume_weighted_blend(scored: Sequence[Tuple[int, int]]) -> int:
    """
    Blends (score, volume) pairs so high-volume procedures dominate.
    Returns the neutral score when nothing was scored.
    """
    total_volume = sum(volume for _, volume in scored)
    if not scored or total_volume <= 0:
        return NEUTRAL_SCORE

    blended = sum(score * (volume / total_volume) for score, volume in scored)
    return round_half_up(blended)


def blend_method(cohort_count: int) -> str:
    if cohort_count == 0:
        return DEFAULT_METHOD
    if cohort_count == 1:
        return "single cohort"
    return f"volume-weighted across {cohort_count} cohorts"
