"""
Diagnostics sinks.

Every pillar calculator receives a sink and reports its intermediate
cohort statistics to it unconditionally. NullDiagnostics discards them,
DiagnosticsCollector keeps them for the scorecard.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


# =====================================================
# DIAGNOSTIC RECORDS
# =====================================================

@dataclass
class ProcedureCohortDiagnostic:
    procedure_id: str
    procedure_name: str
    surgeon_value: float = 0.0
    cohort_median: float = 0.0
    cohort_mad: float = 0.0
    effective_mad: float = 0.0
    cohort_size: int = 0
    valid_cases: int = 0
    total_cases: int = 0
    raw_score: int = 0
    skipped_reason: Optional[str] = None


@dataclass
class CohortPillarDiagnostics:
    procedure_cohorts: List[ProcedureCohortDiagnostic] = field(default_factory=list)
    final_score: int = 0
    method: str = ""


@dataclass
class AdherenceDiagnostics:
    total_cases_scored: int = 0
    avg_case_score: float = 0.0
    cases_within_grace: int = 0
    cases_at_zero: int = 0
    surgeon_raw: float = 0.0
    cohort_median: float = 0.0
    cohort_size: int = 0
    final_score: int = 0


@dataclass
class AvailabilityDiagnostics:
    gap_cases_scored: int = 0
    avg_gap_score: float = 0.0
    gap_cohort_size: int = 0
    delay_rate: float = 0.0
    delay_cohort_size: int = 0
    gap_pillar_score: int = 0
    delay_pillar_score: int = 0
    final_score: int = 0


@dataclass
class PillarDiagnostics:
    profitability: CohortPillarDiagnostics
    consistency: CohortPillarDiagnostics
    sched_adherence: AdherenceDiagnostics
    availability: AvailabilityDiagnostics


# =====================================================
# SINKS
# =====================================================

class NullDiagnostics:
    """Sink that records nothing."""

    enabled = False

    def procedure_cohort(self, pillar: str, entry: ProcedureCohortDiagnostic) -> None:
        pass

    def cohort_summary(self, pillar: str, final_score: int, method: str) -> None:
        pass

    def adherence(self, entry: AdherenceDiagnostics) -> None:
        pass

    def availability(self, entry: AvailabilityDiagnostics) -> None:
        pass

    def build(self) -> Optional[PillarDiagnostics]:
        return None


class DiagnosticsCollector(NullDiagnostics):
    """Collects one surgeon's diagnostics across all four pillars."""

    enabled = True

    def __init__(self):
        self._cohorts: Dict[str, CohortPillarDiagnostics] = {
            "profitability": CohortPillarDiagnostics(),
            "consistency": CohortPillarDiagnostics(),
        }
        self._adherence = AdherenceDiagnostics()
        self._availability = AvailabilityDiagnostics()

    def procedure_cohort(self, pillar: str, entry: ProcedureCohortDiagnostic) -> None:
        self._cohorts[pillar].procedure_cohorts.append(entry)

    def cohort_summary(self, pillar: str, final_score: int, method: str) -> None:
        self._cohorts[pillar].final_score = final_score
        self._cohorts[pillar].method = method

    def adherence(self, entry: AdherenceDiagnostics) -> None:
        self._adherence = entry

    def availability(self, entry: AvailabilityDiagnostics) -> None:
        self._availability = entry

    def build(self) -> PillarDiagnostics:
        return PillarDiagnostics(
            profitability=self._cohorts["profitability"],
            consistency=self._cohorts["consistency"],
            sched_adherence=self._adherence,
            availability=self._availability,
        )
