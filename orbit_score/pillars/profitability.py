# orbit_score/pillars/profitability.py

"""
PILLAR 1: PROFITABILITY (30%)
-----------------------------
Median margin per OR minute, scored within procedure-type cohorts
(higher is better) and volume-weighted across the surgeon's case mix.

profit == 0 is break-even data and is scored; only a missing profit
skips the case.
"""

from orbit_score.core.diagnostics import NullDiagnostics, ProcedureCohortDiagnostic
from orbit_score.core.grouping import case_duration, group_by_procedure
from orbit_score.core.scoring import effective_mad, mad_score
from orbit_score.core.stats import mad, median, round_to
from orbit_score.pillars.base import blend_method, volume_weighted_blend
from orbit_score.pillars.cohorts import CohortIndex

PILLAR = "profitability"


def _skip_reason(cases, index: CohortIndex, valid: int) -> str:
    with_financials = 0
    with_duration = 0

    for c in cases:
        fin = index.financials.get(c.id)
        if fin is None or fin.profit is None:
            continue
        with_financials += 1

        duration = case_duration(c)
        if duration and duration > 0:
            with_duration += 1

    return (
        f"Only {valid} valid cases (need {index.min_procedure_cases}). "
        f"{len(cases)} total, {with_financials} with financials, "
        f"{with_duration} with duration."
    )


def calculate_profitability(
    surgeon_id: str,
    index: CohortIndex,
    diagnostics=None,
) -> int:
    diagnostics = diagnostics or NullDiagnostics()
    surgeon_cases = index.cases_by_surgeon.get(surgeon_id, [])

    scored = []

    for procedure_id, cases in group_by_procedure(surgeon_cases).items():
        procedure_name = cases[0].procedure_name or procedure_id
        margins = index.surgeon_margins(procedure_id, surgeon_id)

        if len(margins) < index.min_procedure_cases:
            diagnostics.procedure_cohort(PILLAR, ProcedureCohortDiagnostic(
                procedure_id=procedure_id,
                procedure_name=procedure_name,
                valid_cases=len(margins),
                total_cases=len(cases),
                skipped_reason=_skip_reason(cases, index, len(margins)),
            ))
            continue

        surgeon_median = median(margins)
        peers = index.peer_margin_medians(procedure_id, surgeon_id)

        score = mad_score(surgeon_median, peers, higher_is_better=True)
        scored.append((score, len(margins)))

        diagnostics.procedure_cohort(PILLAR, ProcedureCohortDiagnostic(
            procedure_id=procedure_id,
            procedure_name=procedure_name,
            surgeon_value=round_to(surgeon_median, 2),
            cohort_median=round_to(median(peers), 2),
            cohort_mad=round_to(mad(peers), 2),
            effective_mad=round_to(effective_mad(peers), 2),
            cohort_size=len(peers),
            valid_cases=len(margins),
            total_cases=len(cases),
            raw_score=score,
        ))

    final = volume_weighted_blend(scored)
    diagnostics.cohort_summary(PILLAR, final, blend_method(len(scored)))
    return final
