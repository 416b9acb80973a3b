from dataclasses import replace

import pytest

from orbit_score.config.scoring_config import ScoringSettings
from orbit_score.core.records import PillarScores
from orbit_score.scorecard import (
    MIN_CASE_THRESHOLD,
    ScorecardInput,
    calculate_scores,
    classify_trend,
    compute_composite,
    get_grade,
    scorecards_to_json,
)


def _input(cases, financials, **kwargs):
    return ScorecardInput(
        cases=cases,
        financials=financials,
        flags=kwargs.pop("flags", []),
        settings=ScoringSettings(),
        timezone="UTC",
        **kwargs,
    )


# -------------------------------------------------
# Gating
# -------------------------------------------------

def test_low_volume_surgeons_are_excluded(hip_scenario):
    scorecards = calculate_scores(hip_scenario())
    assert [s.surgeon_id for s in scorecards] == ["x"]


def test_gate_applies_regardless_of_metrics(hip_scenario):
    data = hip_scenario(x_margin=500.0)
    x_cases = [c for c in data.cases if c.surgeon_id == "x"]
    peers = [c for c in data.cases if c.surgeon_id != "x"]

    thin = replace(data, cases=peers + x_cases[: MIN_CASE_THRESHOLD - 1])
    assert calculate_scores(thin) == []

    exact = replace(data, cases=peers + x_cases[:MIN_CASE_THRESHOLD])
    assert len(calculate_scores(exact)) == 1


# -------------------------------------------------
# End-to-end
# -------------------------------------------------

def test_median_equal_to_peers_scores_fifty(hip_scenario):
    [scorecard] = calculate_scores(hip_scenario(x_margin=10.0))

    assert scorecard.pillars.profitability == 50
    assert scorecard.composite == 50
    assert scorecard.grade.letter == "D"


def test_three_mads_above_peers_scores_hundred(hip_scenario):
    [scorecard] = calculate_scores(hip_scenario(x_margin=13.0))

    assert scorecard.pillars.profitability == 100
    # other pillars have no signal and sit at 50
    assert scorecard.pillars.consistency == 50
    assert scorecard.pillars.sched_adherence == 50
    assert scorecard.pillars.availability == 50
    assert scorecard.composite == 65


def test_scorecard_identity_fields(hip_scenario, make_case):
    data = hip_scenario()
    extra = [
        make_case("x-flip", "x", day=0, room="OR-9"),
        make_case("x-knee-0", "x", procedure="knee", day=1),
        make_case("x-knee-1", "x", procedure="knee", day=2),
    ]
    [scorecard] = calculate_scores(replace(data, cases=list(data.cases) + extra))

    assert scorecard.surgeon_name == "Dr. X"
    assert scorecard.first_name == "Test"
    assert scorecard.case_count == 23
    assert scorecard.flip_room is True
    assert scorecard.procedures == ["Hip Arthroplasty", "Knee"]
    assert [(p.name, p.count) for p in scorecard.procedure_breakdown] == [
        ("Hip Arthroplasty", 21),
        ("Knee", 2),
    ]


def test_single_room_is_not_flip(hip_scenario):
    [scorecard] = calculate_scores(hip_scenario())
    assert scorecard.flip_room is False


# -------------------------------------------------
# Ordering & determinism
# -------------------------------------------------

def test_sorted_by_composite_descending(make_facility, peer_margins):
    margins = {"y": (20, 10.0), "x": (20, 13.0)}
    margins.update(peer_margins)
    cases, financials = make_facility(margins)

    scorecards = calculate_scores(_input(cases, financials))

    assert [s.surgeon_id for s in scorecards] == ["x", "y"]
    assert scorecards[0].pillars.profitability == 100
    assert scorecards[1].pillars.profitability == 44


def test_ties_keep_input_order(make_facility, peer_margins):
    margins = {"b": (20, 10.0), "a": (20, 10.0)}
    margins.update(peer_margins)
    cases, financials = make_facility(margins)

    scorecards = calculate_scores(_input(cases, financials))

    assert [s.surgeon_id for s in scorecards] == ["b", "a"]
    assert scorecards[0].composite == scorecards[1].composite


def test_identical_inputs_identical_output(hip_scenario):
    data = hip_scenario(x_margin=11.5, enable_diagnostics=True)

    first = calculate_scores(data)
    second = calculate_scores(data)

    assert first == second
    assert scorecards_to_json(first) == scorecards_to_json(second)


def test_thread_pool_matches_serial(make_facility, peer_margins):
    margins = {"x": (20, 13.0), "y": (20, 10.0), "z": (18, 9.5)}
    margins.update(peer_margins)
    cases, financials = make_facility(margins)
    data = _input(cases, financials)

    assert calculate_scores(data, max_workers=4) == calculate_scores(data)


# -------------------------------------------------
# Trend
# -------------------------------------------------

def test_trend_up_against_previous_period(hip_scenario):
    previous = hip_scenario(x_margin=10.0)
    data = hip_scenario(
        x_margin=13.0,
        previous_period_cases=previous.cases,
        previous_period_financials=previous.financials,
    )

    [scorecard] = calculate_scores(data)

    assert scorecard.trend == "up"
    assert scorecard.previous_composite == 50


def test_trend_down_against_previous_period(hip_scenario):
    previous = hip_scenario(x_margin=13.0)
    data = hip_scenario(
        x_margin=10.0,
        previous_period_cases=previous.cases,
        previous_period_financials=previous.financials,
    )

    [scorecard] = calculate_scores(data)

    assert scorecard.trend == "down"
    assert scorecard.previous_composite == 65


def test_no_previous_period_is_stable(hip_scenario):
    [scorecard] = calculate_scores(hip_scenario())

    assert scorecard.trend == "stable"
    assert scorecard.previous_composite is None


def test_previous_period_below_gate_is_stable(hip_scenario):
    previous = hip_scenario(x_margin=10.0)
    thin = [c for c in previous.cases if c.surgeon_id != "x" or c.id in ("x-0", "x-1")]
    data = hip_scenario(
        x_margin=13.0,
        previous_period_cases=thin,
        previous_period_financials=previous.financials,
    )

    [scorecard] = calculate_scores(data)

    assert scorecard.trend == "stable"
    assert scorecard.previous_composite is None


def test_classify_trend():
    assert classify_trend(75, 70) == "up"
    assert classify_trend(65, 70) == "down"
    assert classify_trend(70, 70) == "stable"
    assert classify_trend(70, None) == "stable"


# -------------------------------------------------
# Composite & grade
# -------------------------------------------------

def test_composite_weights():
    assert compute_composite(PillarScores(100, 100, 100, 100)) == 100
    assert compute_composite(PillarScores(50, 50, 50, 50)) == 50
    # 24 + 15 + 17.5 + 18 = 74.5
    assert compute_composite(PillarScores(80, 60, 70, 90)) == 75


@pytest.mark.parametrize("score, letter", [
    (100, "A"), (90, "A"), (89, "B"), (80, "B"),
    (79, "C"), (70, "C"), (69, "D"), (10, "D"),
])
def test_grade_bands(score, letter):
    assert get_grade(score).letter == letter


def test_grade_metadata():
    grade = get_grade(95)
    assert grade.label == "Elite"
    assert grade.text.startswith("#")
    assert grade.bg.startswith("#")


# -------------------------------------------------
# Diagnostics & errors
# -------------------------------------------------

def test_diagnostics_only_when_enabled(hip_scenario):
    [plain] = calculate_scores(hip_scenario())
    [detailed] = calculate_scores(hip_scenario(enable_diagnostics=True))

    assert plain.diagnostics is None
    assert detailed.diagnostics is not None
    assert detailed.diagnostics.profitability.procedure_cohorts[0].cohort_size == 5
    assert detailed.diagnostics.profitability.final_score == detailed.pillars.profitability
    assert detailed.diagnostics.availability.final_score == detailed.pillars.availability


def test_diagnostics_do_not_change_scores(hip_scenario):
    [plain] = calculate_scores(hip_scenario(x_margin=11.0))
    [detailed] = calculate_scores(hip_scenario(x_margin=11.0, enable_diagnostics=True))

    assert plain.pillars == detailed.pillars
    assert plain.composite == detailed.composite


def test_unknown_timezone_raises(hip_scenario):
    with pytest.raises(ValueError):
        calculate_scores(replace(hip_scenario(), timezone="Nowhere/City"))


def test_empty_input_returns_empty_list():
    assert calculate_scores(_input([], [])) == []
