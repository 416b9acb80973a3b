# orbit_score/scorecard/assembler.py

"""
SCORECARD ASSEMBLY
------------------
Single entry point: calculate_scores(ScorecardInput) -> List[Scorecard]

Pipeline:
    records -> cohort index -> gate on MIN_CASE_THRESHOLD
            -> four pillars -> composite -> grade -> trend
            -> sorted by composite (descending)

Pure and deterministic: no I/O, no wall-clock reads, nothing cached
between calls.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import tzinfo
from typing import Dict, List, Optional, Sequence

from orbit_score.config.scoring_config import ScoringSettings
from orbit_score.core.diagnostics import DiagnosticsCollector, NullDiagnostics
from orbit_score.core.grouping import detect_flip_room, procedure_breakdown
from orbit_score.core.records import (
    CaseFinancials,
    CaseFlag,
    DateRange,
    PillarScores,
    Scorecard,
    ScorecardCase,
)
from orbit_score.core.timeutils import resolve_timezone
from orbit_score.pillars import (
    CohortIndex,
    calculate_availability,
    calculate_consistency,
    calculate_profitability,
    calculate_schedule_adherence,
)
from orbit_score.scorecard.composite import classify_trend, compute_composite, get_grade

logger = logging.getLogger(__name__)

MIN_CASE_THRESHOLD = 15


# =====================================================
# INPUT CONTRACT
# =====================================================

@dataclass
class ScorecardInput:
    cases: Sequence[ScorecardCase]
    financials: Sequence[CaseFinancials]
    flags: Sequence[CaseFlag]
    settings: ScoringSettings
    timezone: str
    date_range: Optional[DateRange] = None
    previous_period_cases: Optional[Sequence[ScorecardCase]] = None
    previous_period_financials: Optional[Sequence[CaseFinancials]] = None
    previous_period_flags: Optional[Sequence[CaseFlag]] = None
    enable_diagnostics: bool = False


# =====================================================
# PER-SURGEON SCORING
# =====================================================

def score_pillars(surgeon_id: str, index: CohortIndex, diagnostics=None) -> PillarScores:
    diagnostics = diagnostics or NullDiagnostics()
    return PillarScores(
        profitability=calculate_profitability(surgeon_id, index, diagnostics),
        consistency=calculate_consistency(surgeon_id, index, diagnostics),
        sched_adherence=calculate_schedule_adherence(surgeon_id, index, diagnostics),
        availability=calculate_availability(surgeon_id, index, diagnostics),
    )


def qualifying_surgeons(index: CohortIndex) -> List[str]:
    qualified = []
    for surgeon_id, cases in index.cases_by_surgeon.items():
        if len(cases) >= MIN_CASE_THRESHOLD:
            qualified.append(surgeon_id)
        else:
            logger.debug(
                "Surgeon %s excluded: %d cases (minimum %d)",
                surgeon_id, len(cases), MIN_CASE_THRESHOLD,
            )
    return qualified


def compute_period_composites(
    cases: Sequence[ScorecardCase],
    financials: Sequence[CaseFinancials],
    flags: Sequence[CaseFlag],
    settings: ScoringSettings,
    zone: tzinfo,
) -> Dict[str, int]:
    """Composite per qualifying surgeon for one period (no diagnostics)."""
    index = CohortIndex(cases, financials, flags, settings, zone)
    return {
        surgeon_id: compute_composite(score_pillars(surgeon_id, index))
        for surgeon_id in qualifying_surgeons(index)
    }


def build_scorecard(
    surgeon_id: str,
    index: CohortIndex,
    previous_composites: Dict[str, int],
    enable_diagnostics: bool = False,
) -> Scorecard:
    surgeon_cases = index.cases_by_surgeon[surgeon_id]
    first = surgeon_cases[0]

    diagnostics = DiagnosticsCollector() if enable_diagnostics else NullDiagnostics()

    pillars = score_pillars(surgeon_id, index, diagnostics)
    composite = compute_composite(pillars)
    previous = previous_composites.get(surgeon_id)
    breakdown = procedure_breakdown(surgeon_cases)

    return Scorecard(
        surgeon_id=surgeon_id,
        surgeon_name=f"Dr. {first.surgeon_last_name}",
        first_name=first.surgeon_first_name,
        last_name=first.surgeon_last_name,
        case_count=len(surgeon_cases),
        procedures=[p.name for p in breakdown],
        procedure_breakdown=breakdown,
        flip_room=detect_flip_room(surgeon_cases),
        pillars=pillars,
        composite=composite,
        grade=get_grade(composite),
        trend=classify_trend(composite, previous),
        previous_composite=previous,
        diagnostics=diagnostics.build(),
    )


# =====================================================
# PUBLIC ENTRY POINT
# =====================================================

def calculate_scores(
    data: ScorecardInput,
    max_workers: Optional[int] = None,
) -> List[Scorecard]:
    """
    Scores every surgeon with at least MIN_CASE_THRESHOLD cases.

    max_workers > 1 scores surgeons on a thread pool. Peer cohorts come
    from the fully built index, so the output is identical either way.
    """
    settings = data.settings or ScoringSettings()
    zone = resolve_timezone(data.timezone)

    previous_composites: Dict[str, int] = {}
    if data.previous_period_cases:
        previous_composites = compute_period_composites(
            data.previous_period_cases,
            data.previous_period_financials or [],
            data.previous_period_flags or [],
            settings,
            zone,
        )

    index = CohortIndex(data.cases, data.financials, data.flags, settings, zone)
    surgeons = qualifying_surgeons(index)

    def _build(surgeon_id: str) -> Scorecard:
        return build_scorecard(
            surgeon_id,
            index,
            previous_composites,
            enable_diagnostics=data.enable_diagnostics,
        )

    if max_workers and max_workers > 1 and len(surgeons) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            scorecards = list(pool.map(_build, surgeons))
    else:
        scorecards = [_build(surgeon_id) for surgeon_id in surgeons]

    # stable: ties keep first-seen surgeon order
    scorecards.sort(key=lambda s: s.composite, reverse=True)

    logger.info(
        "Scored %d of %d surgeons (minimum %d cases)",
        len(scorecards), len(index.cases_by_surgeon), MIN_CASE_THRESHOLD,
    )

    return scorecards
