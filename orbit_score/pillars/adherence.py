# orbit_score/pillars/adherence.py

"""
PILLAR 3: SCHEDULE ADHERENCE (25%)
----------------------------------
Every case with a scheduled start and the configured start milestone
gets a graduated 0.0 - 1.0 on-time score. The surgeon's raw value
(mean case score x 100) is MAD-scored against every other surgeon
with at least one scoreable case.
"""

from orbit_score.core.diagnostics import AdherenceDiagnostics, NullDiagnostics
from orbit_score.core.scoring import NEUTRAL_SCORE, mad_score
from orbit_score.core.stats import mean, median, round_to
from orbit_score.pillars.cohorts import CohortIndex


def calculate_schedule_adherence(
    surgeon_id: str,
    index: CohortIndex,
    diagnostics=None,
) -> int:
    diagnostics = diagnostics or NullDiagnostics()
    case_scores = index.adherence_scores.get(surgeon_id, [])

    if not case_scores:
        diagnostics.adherence(AdherenceDiagnostics(final_score=NEUTRAL_SCORE))
        return NEUTRAL_SCORE

    surgeon_raw = mean(case_scores) * 100
    peers = index.peer_adherence_raw(surgeon_id)

    final = mad_score(surgeon_raw, peers, higher_is_better=True)

    diagnostics.adherence(AdherenceDiagnostics(
        total_cases_scored=len(case_scores),
        avg_case_score=round_to(mean(case_scores), 3),
        cases_within_grace=sum(1 for s in case_scores if s == 1.0),
        cases_at_zero=sum(1 for s in case_scores if s == 0.0),
        surgeon_raw=round_to(surgeon_raw, 1),
        cohort_median=round_to(median(peers), 1),
        cohort_size=len(peers),
        final_score=final,
    ))

    return final
