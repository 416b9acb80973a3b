# orbit_score/pillars/consistency.py

"""
PILLAR 2: CONSISTENCY (25%)
---------------------------
Coefficient of variation of case duration within a procedure type.
Lower CV is better. Volume-weighted across procedure types.
"""

from orbit_score.core.diagnostics import NullDiagnostics, ProcedureCohortDiagnostic
from orbit_score.core.grouping import group_by_procedure
from orbit_score.core.scoring import effective_mad, mad_score
from orbit_score.core.stats import coefficient_of_variation, mad, median, round_to
from orbit_score.pillars.base import blend_method, volume_weighted_blend
from orbit_score.pillars.cohorts import CohortIndex

PILLAR = "consistency"


def calculate_consistency(
    surgeon_id: str,
    index: CohortIndex,
    diagnostics=None,
) -> int:
    diagnostics = diagnostics or NullDiagnostics()
    surgeon_cases = index.cases_by_surgeon.get(surgeon_id, [])

    scored = []

    for procedure_id, cases in group_by_procedure(surgeon_cases).items():
        procedure_name = cases[0].procedure_name or procedure_id
        durations = index.surgeon_durations(procedure_id, surgeon_id)

        if len(durations) < index.min_procedure_cases:
            diagnostics.procedure_cohort(PILLAR, ProcedureCohortDiagnostic(
                procedure_id=procedure_id,
                procedure_name=procedure_name,
                valid_cases=len(durations),
                total_cases=len(cases),
                skipped_reason=(
                    f"Only {len(durations)} valid durations "
                    f"(need {index.min_procedure_cases})"
                ),
            ))
            continue

        surgeon_cv = coefficient_of_variation(durations)
        peers = index.peer_duration_cvs(procedure_id, surgeon_id)

        score = mad_score(surgeon_cv, peers, higher_is_better=False)
        scored.append((score, len(durations)))

        diagnostics.procedure_cohort(PILLAR, ProcedureCohortDiagnostic(
            procedure_id=procedure_id,
            procedure_name=procedure_name,
            surgeon_value=round_to(surgeon_cv, 3),
            cohort_median=round_to(median(peers), 3),
            cohort_mad=round_to(mad(peers), 3),
            effective_mad=round_to(effective_mad(peers), 3),
            cohort_size=len(peers),
            valid_cases=len(durations),
            total_cases=len(cases),
            raw_score=score,
        ))

    final = volume_weighted_blend(scored)
    diagnostics.cohort_summary(PILLAR, final, blend_method(len(scored)))
    return final
