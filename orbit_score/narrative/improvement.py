# orbit_score/narrative/improvement.py

"""
IMPROVEMENT PLAN GENERATOR
--------------------------
Turns a scorecard (ideally with diagnostics) into an actionable plan:

- one recommendation per pillar below the improvement threshold
- data-driven headline + insight from the pillar diagnostics
- 2-4 concrete actions
- projected minutes / hours / dollars, annualized

Impact estimates assume a facility-standard OR cost per minute.
"""

from dataclasses import dataclass, field, replace
from typing import List

from orbit_score.config.scoring_config import ScoringSettings
from orbit_score.core.records import GradeInfo, Scorecard
from orbit_score.core.stats import round_half_up, round_to
from orbit_score.pillars.base import PILLARS, PillarDefinition
from orbit_score.scorecard.composite import compute_composite, get_grade

# Typical OR minutes per case, used to translate per-minute gaps
ESTIMATED_CASE_MINUTES = 90

TOP_TIER_SCORE = 90
STRETCH_TARGET = 90
STRETCH_ELIGIBLE_SCORE = 70


@dataclass
class ImprovementRecommendation:
    pillar: str
    pillar_label: str
    pillar_color: str
    priority: int
    current_score: int
    target_score: int
    composite_impact: int
    headline: str
    insight: str
    actions: List[str] = field(default_factory=list)
    projected_minutes_saved: int = 0
    projected_annual_hours: float = 0.0
    projected_annual_dollars: int = 0


@dataclass
class Strength:
    pillar_label: str
    score: int
    message: str


@dataclass
class ImprovementPlan:
    surgeon_name: str
    current_composite: int
    current_grade: GradeInfo
    projected_composite: int
    projected_grade: GradeInfo
    total_projected_hours: float
    total_projected_dollars: int
    recommendations: List[ImprovementRecommendation]
    strengths: List[Strength]


# =====================================================
# PILLAR-SPECIFIC ANALYSIS
# =====================================================

def _profitability(diag, annual_case_multiplier):
    scored = [c for c in diag.procedure_cohorts if not c.skipped_reason]
    if not scored:
        return None

    worst = min(scored, key=lambda c: c.raw_score)
    gap = worst.cohort_median - worst.surgeon_value

    headline = (
        f"${gap:.0f}/min below peers on {worst.procedure_name}"
        if gap > 0
        else "Close to peer median - small optimizations add up"
    )

    if worst.surgeon_value > 0:
        follow_up = (
            "This suggests longer OR times are diluting per-minute revenue."
            if gap > 5
            else "The gap is modest - focus on consistency to maximize scheduling."
        )
        insight = (
            f"Your {worst.procedure_name} cases generate ${worst.surgeon_value:.2f}/min "
            f"vs the peer median of ${worst.cohort_median:.2f}/min. {follow_up}"
        )
    else:
        insight = (
            f"Your {worst.procedure_name} cases are operating at a loss "
            f"(${worst.surgeon_value:.2f}/min). Reducing OR time is the most "
            f"direct path to profitability."
        )

    actions = [
        "Review case setup and equipment positioning protocols to reduce non-cutting time",
        "Identify the 10% longest cases - look for common patterns (equipment, team, time of day)",
        "Work with OR coordinator to ensure preferred instrument trays are pre-staged",
    ]
    if gap > 10:
        actions.append(
            "Consider a focused OR time reduction initiative with a target of "
            "reducing average case time by 10-15 minutes"
        )

    cohort_cases = worst.valid_cases * annual_case_multiplier
    minutes = round_half_up((gap * 0.5 if gap > 0 else 2) * cohort_cases)
    return headline, insight, actions, minutes


def _consistency(diag, annual_case_multiplier):
    scored = [c for c in diag.procedure_cohorts if not c.skipped_reason]
    if not scored:
        return None

    worst = max(scored, key=lambda c: c.surgeon_value)
    variability = round_half_up(worst.surgeon_value * ESTIMATED_CASE_MINUTES)
    peer_variability = round_half_up(worst.cohort_median * ESTIMATED_CASE_MINUTES)

    headline = (
        f"+/-{variability} min variability on {worst.procedure_name} "
        f"(peers: +/-{peer_variability} min)"
    )
    insight = (
        f"Your {worst.procedure_name} CV is {worst.surgeon_value * 100:.1f}% vs the peer "
        f"median of {worst.cohort_median * 100:.1f}%. Case durations vary by roughly "
        f"+/-{variability} minutes around your average, which makes accurate "
        f"scheduling harder."
    )
    actions = [
        "Request consistent OR team assignments - familiar teams reduce variability",
        "Standardize your pre-incision checklist to eliminate variable setup time",
        "Track cases that run 20%+ over your average and identify the root cause",
        "Dictate expected duration to the scheduler per case rather than using defaults",
    ]

    cohort_cases = worst.valid_cases * annual_case_multiplier
    excess = max(0, variability - peer_variability)
    return headline, insight, actions, round_half_up(excess * 0.5 * cohort_cases)


def _adherence(diag, settings: ScoringSettings, target_score, annual_cases):
    if diag.total_cases_scored == 0:
        return None

    floor = settings.start_time_floor_minutes
    grace = settings.start_time_grace_minutes

    # case score X means (1 - X) * floor minutes past grace
    avg_late = round_half_up((1 - diag.avg_case_score) * floor)
    target_late = round_half_up((1 - target_score / 100) * floor)
    at_zero_pct = round_half_up(diag.cases_at_zero / diag.total_cases_scored * 100)

    headline = (
        f"Starting ~{avg_late} min late on average "
        f"({diag.cases_at_zero} cases severely late)"
    )
    insight = (
        f"Your average on-time score is {round_half_up(diag.avg_case_score * 100)}% "
        f"across {diag.total_cases_scored} cases. {diag.cases_at_zero} cases scored zero "
        f"({at_zero_pct}%), meaning they started {floor:g}+ minutes past grace. "
        f"Late starts cascade through the schedule."
    )
    actions = [
        f"Arrive to pre-op {grace + 5:g} minutes before scheduled start to complete "
        f"assessments within the grace window",
        (
            f"Investigate the {diag.cases_at_zero} severely late cases - are they "
            f"clustered on certain days, rooms, or case positions?"
            if diag.cases_at_zero > 3
            else "Maintain awareness of the scheduled start time for each case position"
        ),
        "Coordinate with the OR front desk to receive 15-minute pre-start alerts",
        "For first cases of the day, verify that pre-op assessment is complete "
        "before scheduled OR time",
    ]

    return headline, insight, actions, max(0, avg_late - target_late) * annual_cases


def _availability(diag, settings: ScoringSettings, target_score, annual_cases):
    gap_floor = settings.waiting_on_surgeon_floor_minutes
    gap_grace = settings.waiting_on_surgeon_minutes

    avg_excess = round_half_up((1 - diag.avg_gap_score) * gap_floor) if diag.gap_cases_scored else 0

    if avg_excess > 0:
        headline = f"OR team waiting ~{avg_excess} min per case for surgeon"
        insight = (
            f"Your average prep-to-incision gap score is "
            f"{round_half_up(diag.avg_gap_score * 100)}% across {diag.gap_cases_scored} "
            f"cases. The team completes prep and waits roughly {avg_excess} minutes "
            f"beyond the expected {gap_grace:g}-minute window with full staff standing by."
        )
    else:
        headline = (
            f"{diag.delay_rate:.0f}% of cases have surgeon-caused delays"
            if diag.delay_rate > 0
            else "Availability score below target"
        )
        insight = (
            f"Your delay rate of {diag.delay_rate:.1f}% indicates surgeon-caused "
            f"delays are impacting the schedule."
        )

    actions = [
        "Scrub in during patient prep - be present in the OR before draping is complete",
        f"Target being gowned and gloved within {gap_grace:g} minutes of the patient "
        f"entering the room",
        "Use the callback system to time your arrival precisely with prep completion",
        "For flip-room setups, transition to the next room immediately after closing",
    ]

    target_excess = round_half_up((1 - target_score / 100) * gap_floor)
    return headline, insight, actions, max(0, avg_excess - target_excess) * annual_cases


# =====================================================
# PLAN
# =====================================================

def _analyze(
    pillar: PillarDefinition,
    scorecard: Scorecard,
    settings: ScoringSettings,
    target_score: int,
    annual_case_multiplier: int,
):
    diag = scorecard.diagnostics
    if diag is None:
        return None

    annual_cases = scorecard.case_count * annual_case_multiplier

    if pillar.key == "profitability":
        return _profitability(diag.profitability, annual_case_multiplier)
    if pillar.key == "consistency":
        return _consistency(diag.consistency, annual_case_multiplier)
    if pillar.key == "sched_adherence":
        return _adherence(diag.sched_adherence, settings, target_score, annual_cases)
    if pillar.key == "availability":
        return _availability(diag.availability, settings, target_score, annual_cases)
    return None


def generate_improvement_plan(
    scorecard: Scorecard,
    settings: ScoringSettings,
    or_cost_per_minute: float = 60,
    annual_case_multiplier: int = 4,
    improvement_threshold: int = 80,
) -> ImprovementPlan:
    """
    Builds an improvement plan for one surgeon.

    Pillars below `improvement_threshold` get a recommendation; pillars at
    or above it are reported as strengths. Without diagnostics every
    recommendation falls back to a generic plan.
    """
    annual_cases = scorecard.case_count * annual_case_multiplier
    pillar_scores = scorecard.pillars.as_dict()

    recommendations: List[ImprovementRecommendation] = []
    strengths: List[Strength] = []

    for p in PILLARS:
        score = pillar_scores[p.key]

        if score >= improvement_threshold:
            message = (
                f"Top-tier {p.label.lower()} - a model for peers"
                if score >= TOP_TIER_SCORE
                else f"Strong {p.label.lower()} - above facility average"
            )
            strengths.append(Strength(pillar_label=p.label, score=score, message=message))
            continue

        target = STRETCH_TARGET if score >= STRETCH_ELIGIBLE_SCORE else improvement_threshold
        composite_impact = round_half_up((target - score) * p.weight)

        analysis = _analyze(p, scorecard, settings, target, annual_case_multiplier)
        if analysis is None:
            analysis = (
                f"{p.label} at {score} - below the facility target of {improvement_threshold}",
                "This pillar is scoring below the facility target. Review the detailed "
                "diagnostics for specific areas to address.",
                [
                    "Review pillar diagnostics with your OR director",
                    "Identify the top 2-3 cases that scored lowest",
                ],
                round_half_up(annual_cases * 2),  # conservative 2 min/case
            )

        headline, insight, actions, minutes = analysis

        recommendations.append(ImprovementRecommendation(
            pillar=p.key,
            pillar_label=p.label,
            pillar_color=p.color,
            priority=0,
            current_score=score,
            target_score=target,
            composite_impact=composite_impact,
            headline=headline,
            insight=insight,
            actions=actions,
            projected_minutes_saved=minutes,
            projected_annual_hours=round_to(minutes / 60, 1),
            projected_annual_dollars=round_half_up(minutes * or_cost_per_minute),
        ))

    recommendations.sort(key=lambda r: r.composite_impact, reverse=True)
    for i, r in enumerate(recommendations, start=1):
        r.priority = i

    projected_pillars = replace(
        scorecard.pillars,
        **{r.pillar: r.target_score for r in recommendations},
    )
    projected_composite = compute_composite(projected_pillars)

    return ImprovementPlan(
        surgeon_name=scorecard.surgeon_name,
        current_composite=scorecard.composite,
        current_grade=scorecard.grade,
        projected_composite=projected_composite,
        projected_grade=get_grade(projected_composite),
        total_projected_hours=round_to(sum(r.projected_annual_hours for r in recommendations), 1),
        total_projected_dollars=sum(r.projected_annual_dollars for r in recommendations),
        recommendations=recommendations,
        strengths=strengths,
    )
