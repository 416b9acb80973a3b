# orbit_score/pillars/case_metrics.py

"""
Case-level metrics shared by the pillar calculators and the cohort index.

Each helper returns None when the case cannot be scored, so callers can
filter without treating "not recorded" as zero.
"""

from datetime import tzinfo
from typing import Dict, Iterable, List, Optional

from orbit_score.config.scoring_config import ScoringSettings
from orbit_score.core.grouping import case_duration, prep_to_incision
from orbit_score.core.records import CaseFinancials, ScorecardCase
from orbit_score.core.scoring import graduated_case_score
from orbit_score.core.timeutils import time_to_minutes, utc_to_local_minutes


def margin_per_minute(
    c: ScorecardCase,
    financials: Dict[str, CaseFinancials],
) -> Optional[float]:
    """Profit per OR minute. profit == 0 is valid, profit None is not."""
    fin = financials.get(c.id)
    if fin is None or fin.profit is None:
        return None

    duration = case_duration(c)
    if not duration or duration <= 0:
        return None

    return fin.profit / duration


def valid_durations(cases: Iterable[ScorecardCase]) -> List[float]:
    durations = []
    for c in cases:
        d = case_duration(c)
        if d is not None and d > 0:
            durations.append(d)
    return durations


def actual_start(c: ScorecardCase, settings: ScoringSettings):
    if settings.start_time_milestone == "incision":
        return c.incision_at
    return c.patient_in_at


def adherence_case_score(
    c: ScorecardCase,
    settings: ScoringSettings,
    zone: tzinfo,
) -> Optional[float]:
    """Graduated on-time score for one case (0.0 - 1.0)."""
    started = actual_start(c, settings)
    if not started or not c.start_time:
        return None

    try:
        scheduled = time_to_minutes(c.start_time)
    except ValueError:
        return None

    actual = utc_to_local_minutes(started, zone)
    delta = actual - scheduled

    minutes_over = max(0, delta - settings.start_time_grace_minutes)
    return graduated_case_score(minutes_over, settings.start_time_floor_minutes)


def availability_case_score(
    c: ScorecardCase,
    settings: ScoringSettings,
) -> Optional[float]:
    """Graduated prep-to-incision gap score for one case (0.0 - 1.0)."""
    gap = prep_to_incision(c)
    if gap is None:
        return None

    minutes_over = max(0, gap - settings.waiting_on_surgeon_minutes)
    return graduated_case_score(minutes_over, settings.waiting_on_surgeon_floor_minutes)


def score_cases_for_adherence(
    cases: Iterable[ScorecardCase],
    settings: ScoringSettings,
    zone: tzinfo,
) -> List[float]:
    scores = (adherence_case_score(c, settings, zone) for c in cases)
    return [s for s in scores if s is not None]


def score_cases_for_availability(
    cases: Iterable[ScorecardCase],
    settings: ScoringSettings,
) -> List[float]:
    scores = (availability_case_score(c, settings) for c in cases)
    return [s for s in scores if s is not None]
