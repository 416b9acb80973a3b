from orbit_score.config.scoring_config import ScoringSettings
from orbit_score.core.diagnostics import DiagnosticsCollector
from orbit_score.core.records import CaseFinancials, CaseFlag
from orbit_score.core.timeutils import resolve_timezone
from orbit_score.pillars import (
    CohortIndex,
    calculate_availability,
    calculate_consistency,
    calculate_profitability,
    calculate_schedule_adherence,
    volume_weighted_blend,
)
from orbit_score.pillars.case_metrics import (
    adherence_case_score,
    availability_case_score,
    margin_per_minute,
)

UTC = resolve_timezone("UTC")


def index_for(cases, financials=(), flags=(), settings=None):
    return CohortIndex(cases, financials, flags, settings or ScoringSettings(), UTC)


# -------------------------------------------------
# Blending
# -------------------------------------------------

def test_volume_weighting_favours_high_volume():
    assert volume_weighted_blend([(80, 10), (20, 2)]) == 70


def test_blend_without_cohorts_is_neutral():
    assert volume_weighted_blend([]) == 50


# -------------------------------------------------
# Case metrics
# -------------------------------------------------

def test_zero_profit_is_valid_margin(make_case):
    c = make_case("c1", "x", duration=100)
    assert margin_per_minute(c, {"c1": CaseFinancials("c1", profit=0.0)}) == 0.0
    assert margin_per_minute(c, {"c1": CaseFinancials("c1", profit=None)}) is None
    assert margin_per_minute(c, {}) is None


def test_adherence_case_score_decay(make_case, settings):
    on_time = make_case("a", "x", start_time="07:30:00", start_offset=3)
    half = make_case("b", "x", start_time="07:30:00", start_offset=13)
    late = make_case("c", "x", start_time="07:30:00", start_offset=30)

    assert adherence_case_score(on_time, settings, UTC) == 1.0
    assert adherence_case_score(half, settings, UTC) == 0.5
    assert adherence_case_score(late, settings, UTC) == 0.0


def test_adherence_case_needs_start_time(make_case, settings):
    assert adherence_case_score(make_case("a", "x"), settings, UTC) is None
    assert adherence_case_score(make_case("b", "x", start_time="TBD"), settings, UTC) is None


def test_incision_milestone(make_case):
    c = make_case("a", "x", start_time="07:30:00", prep_gap=30)

    assert adherence_case_score(c, ScoringSettings(), UTC) == 1.0
    assert adherence_case_score(c, ScoringSettings(start_time_milestone="incision"), UTC) == 0.0


def test_prep_to_incision_gap_score(make_case, settings):
    assert availability_case_score(make_case("a", "x", prep_gap=3), settings) == 1.0
    assert availability_case_score(make_case("b", "x", prep_gap=8), settings) == 0.5
    assert availability_case_score(make_case("c", "x", prep_gap=20), settings) == 0.0
    assert availability_case_score(make_case("d", "x"), settings) is None


# -------------------------------------------------
# Profitability
# -------------------------------------------------

def test_profitability_at_peer_median(hip_scenario):
    data = hip_scenario(x_margin=10.0)
    assert calculate_profitability("x", index_for(data.cases, data.financials)) == 50


def test_profitability_three_mads_above(hip_scenario):
    data = hip_scenario(x_margin=13.0)
    assert calculate_profitability("x", index_for(data.cases, data.financials)) == 100


def test_profitability_diagnostics(hip_scenario):
    data = hip_scenario(x_margin=11.0)
    sink = DiagnosticsCollector()

    score = calculate_profitability("x", index_for(data.cases, data.financials), sink)
    diag = sink.build().profitability

    assert score == 67
    assert diag.final_score == 67
    assert diag.method == "single cohort"

    cohort = diag.procedure_cohorts[0]
    assert cohort.procedure_name == "Hip Arthroplasty"
    assert cohort.cohort_size == 5
    assert cohort.cohort_median == 10.0
    assert cohort.effective_mad == 1.0
    assert cohort.valid_cases == 20


def test_profitability_skips_thin_procedures(make_case):
    cases = [make_case(f"x-{i}", "x", day=i) for i in range(20)]
    financials = [CaseFinancials("x-0", profit=500.0), CaseFinancials("x-1", profit=0.0)]
    sink = DiagnosticsCollector()

    assert calculate_profitability("x", index_for(cases, financials), sink) == 50

    diag = sink.build().profitability
    assert diag.method.startswith("default")
    skipped = diag.procedure_cohorts[0]
    assert skipped.skipped_reason.startswith("Only 2 valid cases (need 3)")
    assert "2 with financials" in skipped.skipped_reason


def test_profitability_blends_procedures_by_volume(make_case):
    cases, financials = [], []

    def add(case_id, surgeon_id, procedure, profit, day):
        cases.append(make_case(case_id, surgeon_id, procedure=procedure, day=day))
        financials.append(CaseFinancials(case_id, profit=profit))

    # x: 15 hip cases at 11.8 $/min, 3 knee cases at 8.2 $/min
    for i in range(15):
        add(f"x-hip-{i}", "x", "hip", 1180.0, i)
    for i in range(3):
        add(f"x-knee-{i}", "x", "knee", 820.0, i)

    # both cohorts: peer medians 8..12, median 10, effective MAD 1
    for p, profit in enumerate((800.0, 900.0, 1000.0, 1100.0, 1200.0)):
        for procedure in ("hip", "knee"):
            for i in range(3):
                add(f"p{p}-{procedure}-{i}", f"p{p}", procedure, profit, i)

    sink = DiagnosticsCollector()
    score = calculate_profitability("x", index_for(cases, financials), sink)
    diag = sink.build().profitability

    # (80 * 15 + 20 * 3) / 18 = 70
    assert score == 70
    assert diag.final_score == 70
    assert diag.method == "volume-weighted across 2 cohorts"
    assert [(c.procedure_id, c.raw_score, c.valid_cases) for c in diag.procedure_cohorts] == [
        ("hip", 80, 15),
        ("knee", 20, 3),
    ]


# -------------------------------------------------
# Consistency
# -------------------------------------------------

def test_consistency_peers_exclude_self_and_thin_samples(make_case):
    cases = [make_case(f"x-{i}", "x", duration=90 + i, day=i) for i in range(5)]
    cases += [make_case(f"p-{i}", "p", duration=100, day=i) for i in range(3)]
    cases += [make_case(f"q-{i}", "q", duration=100, day=i) for i in range(2)]

    index = index_for(cases)
    assert index.peer_duration_cvs("hip", "x") == [0.0]


def test_consistency_records_skipped_procedures(make_case):
    cases = [make_case(f"x-{i}", "x", day=i) for i in range(10)]
    cases += [make_case(f"k-{i}", "x", procedure="knee", day=i) for i in range(2)]
    sink = DiagnosticsCollector()

    calculate_consistency("x", index_for(cases), sink)
    diag = sink.build().consistency

    assert diag.method == "single cohort"
    knee = [c for c in diag.procedure_cohorts if c.procedure_id == "knee"][0]
    assert knee.skipped_reason == "Only 2 valid durations (need 3)"


# -------------------------------------------------
# Schedule adherence
# -------------------------------------------------

def _adherence_facility(make_case):
    cases = [
        make_case(f"x-{i}", "x", day=i, start_time="07:30:00", start_offset=30)
        for i in range(20)
    ]
    cases += [make_case(f"a-{i}", "a", day=i, start_time="07:30:00", start_offset=13) for i in range(3)]
    cases += [make_case(f"b-{i}", "b", day=i, start_time="07:30:00") for i in range(3)]
    cases += [
        make_case("c-0", "c", start_time="07:30:00", start_offset=13),
        make_case("c-1", "c", day=1, start_time="07:30:00"),
    ]
    return cases


def test_adherence_scores_against_peers(make_case):
    index = index_for(_adherence_facility(make_case))

    # peers raw: a=50, c=75, b=100
    assert calculate_schedule_adherence("x", index) == 10
    assert calculate_schedule_adherence("b", index) == 83


def test_adherence_diagnostics(make_case):
    sink = DiagnosticsCollector()
    calculate_schedule_adherence("x", index_for(_adherence_facility(make_case)), sink)
    diag = sink.build().sched_adherence

    assert diag.total_cases_scored == 20
    assert diag.cases_at_zero == 20
    assert diag.cases_within_grace == 0
    assert diag.cohort_size == 3
    assert diag.cohort_median == 75.0


def test_adherence_without_scoreable_cases_is_neutral(make_case):
    cases = [make_case(f"x-{i}", "x", day=i) for i in range(20)]
    assert calculate_schedule_adherence("x", index_for(cases)) == 50


# -------------------------------------------------
# Availability
# -------------------------------------------------

def _delay_facility(make_case):
    cases = [make_case(f"x-{i}", "x", day=i) for i in range(20)]
    for peer in ("a", "b", "c"):
        cases += [make_case(f"{peer}-{i}", peer, day=i) for i in range(5)]
    # below the 5-case peer gate
    cases += [make_case(f"d-{i}", "d", day=i) for i in range(4)]

    flags = [
        CaseFlag("b-0", "delay"),
        CaseFlag("c-0", "delay"),
        CaseFlag("c-1", "delay"),
        CaseFlag("x-0", "threshold"),
    ] + [CaseFlag(f"d-{i}", "delay") for i in range(4)]
    return cases, flags


def test_availability_delay_rate_lower_is_better(make_case):
    cases, flags = _delay_facility(make_case)
    index = index_for(cases, flags=flags)

    assert index.delay_rate("x") == 0.0
    assert index.delay_rate("d") == 100.0
    assert sorted(index.peer_delay_rates("x")) == [0.0, 20.0, 40.0]

    # gap sub-metric 50, delay sub-metric 67 -> round(58.5) = 59
    assert calculate_availability("x", index) == 59


def test_availability_needs_three_gap_cases(make_case):
    cases = [make_case(f"x-{i}", "x", day=i, prep_gap=30 if i < 2 else None) for i in range(20)]
    sink = DiagnosticsCollector()

    assert calculate_availability("x", index_for(cases), sink) == 50
    diag = sink.build().availability
    assert diag.gap_cases_scored == 2
    assert diag.gap_pillar_score == 50


def test_availability_unknown_surgeon_records_neutral(make_case):
    cases = [make_case(f"x-{i}", "x", day=i) for i in range(20)]
    sink = DiagnosticsCollector()

    assert calculate_availability("nobody", index_for(cases), sink) == 50
    diag = sink.build().availability
    assert diag.final_score == 50
    assert diag.gap_pillar_score == 50
    assert diag.delay_pillar_score == 50
