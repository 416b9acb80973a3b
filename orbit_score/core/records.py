"""
Input & output records for the scoring engine.

All records are plain dataclasses: pure values passed into (and returned
from) a single synchronous calculate_scores() call.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from orbit_score.core.diagnostics import PillarDiagnostics
from orbit_score.core.timeutils import Instant


# =====================================================
# INPUT RECORDS
# =====================================================

@dataclass(frozen=True)
class ScorecardCase:
    id: str
    surgeon_id: str
    procedure_type_id: str
    or_room_id: str
    scheduled_date: Union[str, date]
    surgeon_first_name: str = ""
    surgeon_last_name: str = ""
    procedure_name: str = ""
    start_time: Optional[str] = None
    patient_in_at: Instant = None
    incision_at: Instant = None
    prep_drape_complete_at: Instant = None
    closing_at: Instant = None
    patient_out_at: Instant = None


@dataclass(frozen=True)
class CaseFinancials:
    """
    profit / reimbursement / or_time_cost are Optional.
    0.0 is break-even data, only None means "not recorded".
    """
    case_id: str
    profit: Optional[float] = None
    reimbursement: Optional[float] = None
    or_time_cost: Optional[float] = None


@dataclass(frozen=True)
class CaseFlag:
    case_id: str
    flag_type: str
    severity: str = ""
    delay_type_name: Optional[str] = None
    created_by: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str


# =====================================================
# OUTPUT RECORDS
# =====================================================

@dataclass
class PillarScores:
    profitability: int
    consistency: int
    sched_adherence: int
    availability: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "profitability": self.profitability,
            "consistency": self.consistency,
            "sched_adherence": self.sched_adherence,
            "availability": self.availability,
        }


@dataclass(frozen=True)
class GradeInfo:
    letter: str
    label: str
    text: str
    bg: str


@dataclass(frozen=True)
class ProcedureCount:
    name: str
    count: int


@dataclass
class Scorecard:
    surgeon_id: str
    surgeon_name: str
    first_name: str
    last_name: str
    case_count: int
    procedures: List[str]
    procedure_breakdown: List[ProcedureCount]
    flip_room: bool
    pillars: PillarScores
    composite: int
    grade: GradeInfo
    trend: str = "stable"
    previous_composite: Optional[int] = None
    diagnostics: Optional[PillarDiagnostics] = None


def scheduled_day(value: Union[str, date, datetime]) -> str:
    """Normalizes a scheduled_date to its YYYY-MM-DD key."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]
