# orbit_score/pillars/availability.py

"""
PILLAR 4: AVAILABILITY (20%)
----------------------------
Two sub-metrics blended 50/50:

A. Prep-to-incision gap: graduated decay against the waiting-on-surgeon
   grace/floor, MAD-scored (higher is better) against peers with >= 3
   gap cases. Fewer than 3 of the surgeon's own cases -> 50.
B. Delay rate: % of the surgeon's cases carrying a "delay" flag,
   MAD-scored (lower is better) against peers with >= 5 cases.
"""

from orbit_score.core.diagnostics import AvailabilityDiagnostics, NullDiagnostics
from orbit_score.core.scoring import NEUTRAL_SCORE, mad_score
from orbit_score.core.stats import mean, round_half_up, round_to
from orbit_score.pillars.cohorts import MIN_GAP_CASES, CohortIndex

GAP_WEIGHT = 0.5
DELAY_WEIGHT = 0.5


def calculate_availability(
    surgeon_id: str,
    index: CohortIndex,
    diagnostics=None,
) -> int:
    diagnostics = diagnostics or NullDiagnostics()

    if surgeon_id not in index.cases_by_surgeon:
        diagnostics.availability(AvailabilityDiagnostics(
            gap_pillar_score=NEUTRAL_SCORE,
            delay_pillar_score=NEUTRAL_SCORE,
            final_score=NEUTRAL_SCORE,
        ))
        return NEUTRAL_SCORE

    # -------------------------------------------------
    # A. Prep-to-incision gap
    # -------------------------------------------------
    gap_scores = index.gap_scores.get(surgeon_id, [])
    gap_peers = index.peer_gap_raw(surgeon_id)

    gap_pillar_score = NEUTRAL_SCORE
    if len(gap_scores) >= MIN_GAP_CASES:
        gap_pillar_score = mad_score(mean(gap_scores) * 100, gap_peers, higher_is_better=True)

    # -------------------------------------------------
    # B. Attributable delay rate
    # -------------------------------------------------
    delay_rate = index.delay_rate(surgeon_id)
    delay_peers = index.peer_delay_rates(surgeon_id)
    delay_score = mad_score(delay_rate, delay_peers, higher_is_better=False)

    final = round_half_up(gap_pillar_score * GAP_WEIGHT + delay_score * DELAY_WEIGHT)

    diagnostics.availability(AvailabilityDiagnostics(
        gap_cases_scored=len(gap_scores),
        avg_gap_score=round_to(mean(gap_scores), 3) if gap_scores else 0.0,
        gap_cohort_size=len(gap_peers),
        delay_rate=round_to(delay_rate, 1),
        delay_cohort_size=len(delay_peers),
        gap_pillar_score=gap_pillar_score,
        delay_pillar_score=delay_score,
        final_score=final,
    ))

    return final
