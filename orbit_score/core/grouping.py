from collections import defaultdict
from typing import Callable, Dict, Iterable, List, TypeVar

from orbit_score.core.records import ProcedureCount, ScorecardCase, scheduled_day
from orbit_score.core.timeutils import minutes_between

K = TypeVar("K")


# =====================================================
# TYPED GROUPING (insertion ordered)
# =====================================================

def group_by(
    cases: Iterable[ScorecardCase],
    key: Callable[[ScorecardCase], K],
) -> Dict[K, List[ScorecardCase]]:
    grouped: Dict[K, List[ScorecardCase]] = {}
    for c in cases:
        grouped.setdefault(key(c), []).append(c)
    return grouped


def group_by_surgeon(cases: Iterable[ScorecardCase]) -> Dict[str, List[ScorecardCase]]:
    return group_by(cases, lambda c: c.surgeon_id)


def group_by_procedure(cases: Iterable[ScorecardCase]) -> Dict[str, List[ScorecardCase]]:
    return group_by(cases, lambda c: c.procedure_type_id)


# =====================================================
# CASE-LEVEL DERIVED VALUES
# =====================================================

def case_duration(c: ScorecardCase):
    """Patient-in -> patient-out minutes, None when undefined."""
    return minutes_between(c.patient_in_at, c.patient_out_at)


def prep_to_incision(c: ScorecardCase):
    """Prep/drape complete -> incision minutes, None when undefined."""
    return minutes_between(c.prep_drape_complete_at, c.incision_at)


# =====================================================
# SURGEON PROFILE HELPERS
# =====================================================

def detect_flip_room(cases: Iterable[ScorecardCase]) -> bool:
    """True if the surgeon used more than one OR room on any single day."""
    rooms_by_day = defaultdict(set)
    for c in cases:
        rooms_by_day[scheduled_day(c.scheduled_date)].add(c.or_room_id)
    return any(len(rooms) > 1 for rooms in rooms_by_day.values())


def procedure_breakdown(cases: Iterable[ScorecardCase]) -> List[ProcedureCount]:
    counts: Dict[str, int] = {}
    for c in cases:
        name = c.procedure_name or c.procedure_type_id
        counts[name] = counts.get(name, 0) + 1

    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [ProcedureCount(name=name, count=count) for name, count in ordered]
