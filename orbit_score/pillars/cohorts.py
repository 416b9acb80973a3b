# orbit_score/pillars/cohorts.py

"""
PEER COHORT INDEX
-----------------
Materializes every per-surgeon metric once per calculate_scores() call.
Pillar calculators read their peer cohorts from here instead of
re-scanning the full case list for each surgeon.

A surgeon is never part of their own peer cohort.
"""

import logging
from collections import defaultdict
from datetime import tzinfo
from typing import Dict, Iterable, List, Tuple

from orbit_score.config.scoring_config import ScoringSettings
from orbit_score.core.grouping import case_duration, group_by_surgeon
from orbit_score.core.records import CaseFinancials, CaseFlag, ScorecardCase
from orbit_score.core.stats import coefficient_of_variation, mean, median
from orbit_score.pillars.case_metrics import (
    availability_case_score,
    adherence_case_score,
    margin_per_minute,
)

logger = logging.getLogger(__name__)

DELAY_FLAG_TYPE = "delay"

# Peer gates for the availability sub-metrics
MIN_GAP_CASES = 3
MIN_DELAY_RATE_CASES = 5


class CohortIndex:
    def __init__(
        self,
        cases: Iterable[ScorecardCase],
        financials: Iterable[CaseFinancials],
        flags: Iterable[CaseFlag],
        settings: ScoringSettings,
        zone: tzinfo,
    ):
        self.settings = settings
        self.zone = zone
        self.min_procedure_cases = settings.min_cases_per_procedure

        self.financials: Dict[str, CaseFinancials] = {
            f.case_id: f for f in financials
        }
        self.cases_by_surgeon = group_by_surgeon(cases)

        delayed_case_ids = {
            f.case_id for f in flags if f.flag_type == DELAY_FLAG_TYPE
        }

        # procedure -> surgeon -> values
        self.margins: Dict[str, Dict[str, List[float]]] = defaultdict(dict)
        self.durations: Dict[str, Dict[str, List[float]]] = defaultdict(dict)

        # surgeon -> values
        self.adherence_scores: Dict[str, List[float]] = {}
        self.gap_scores: Dict[str, List[float]] = {}
        self.delay_counts: Dict[str, Tuple[int, int]] = {}

        for surgeon_id, surgeon_cases in self.cases_by_surgeon.items():
            self._index_surgeon(surgeon_id, surgeon_cases, delayed_case_ids)

        logger.debug(
            "Cohort index built: %d surgeons, %d procedures",
            len(self.cases_by_surgeon),
            len(self.durations),
        )

    def _index_surgeon(self, surgeon_id, surgeon_cases, delayed_case_ids):
        adherence, gaps = [], []
        delayed = 0

        for c in surgeon_cases:
            mpm = margin_per_minute(c, self.financials)
            if mpm is not None:
                self.margins[c.procedure_type_id].setdefault(surgeon_id, []).append(mpm)

            duration = case_duration(c)
            if duration is not None and duration > 0:
                self.durations[c.procedure_type_id].setdefault(surgeon_id, []).append(duration)

            score = adherence_case_score(c, self.settings, self.zone)
            if score is not None:
                adherence.append(score)

            gap = availability_case_score(c, self.settings)
            if gap is not None:
                gaps.append(gap)

            if c.id in delayed_case_ids:
                delayed += 1

        self.adherence_scores[surgeon_id] = adherence
        self.gap_scores[surgeon_id] = gaps
        self.delay_counts[surgeon_id] = (delayed, len(surgeon_cases))

    # -------------------------------------------------
    # SURGEON VALUES
    # -------------------------------------------------
    def surgeon_margins(self, procedure_id: str, surgeon_id: str) -> List[float]:
        return self.margins.get(procedure_id, {}).get(surgeon_id, [])

    def surgeon_durations(self, procedure_id: str, surgeon_id: str) -> List[float]:
        return self.durations.get(procedure_id, {}).get(surgeon_id, [])

    def delay_rate(self, surgeon_id: str) -> float:
        delayed, total = self.delay_counts.get(surgeon_id, (0, 0))
        return (delayed / total) * 100 if total else 0.0

    # -------------------------------------------------
    # PEER COHORTS
    # -------------------------------------------------
    def peer_margin_medians(self, procedure_id: str, surgeon_id: str) -> List[float]:
        return [
            median(values)
            for peer_id, values in self.margins.get(procedure_id, {}).items()
            if peer_id != surgeon_id and len(values) >= self.min_procedure_cases
        ]

    def peer_duration_cvs(self, procedure_id: str, surgeon_id: str) -> List[float]:
        return [
            coefficient_of_variation(values)
            for peer_id, values in self.durations.get(procedure_id, {}).items()
            if peer_id != surgeon_id and len(values) >= self.min_procedure_cases
        ]

    def peer_adherence_raw(self, surgeon_id: str) -> List[float]:
        return [
            mean(scores) * 100
            for peer_id, scores in self.adherence_scores.items()
            if peer_id != surgeon_id and scores
        ]

    def peer_gap_raw(self, surgeon_id: str) -> List[float]:
        return [
            mean(scores) * 100
            for peer_id, scores in self.gap_scores.items()
            if peer_id != surgeon_id and len(scores) >= MIN_GAP_CASES
        ]

    def peer_delay_rates(self, surgeon_id: str) -> List[float]:
        return [
            self.delay_rate(peer_id)
            for peer_id, (_, total) in self.delay_counts.items()
            if peer_id != surgeon_id and total >= MIN_DELAY_RATE_CASES
        ]
