from datetime import datetime, timedelta, timezone

import pytest

from orbit_score.config.scoring_config import ScoringSettings
from orbit_score.core.records import CaseFinancials, CaseFlag, ScorecardCase
from orbit_score.scorecard.assembler import ScorecardInput

BASE_DAY = datetime(2026, 3, 2, tzinfo=timezone.utc)


def build_case(
    case_id,
    surgeon_id,
    procedure="hip",
    duration=100,
    day=0,
    room="OR-1",
    start_time=None,
    start_offset=0,
    prep_gap=None,
    last_name=None,
):
    """
    One completed case. Patient-in is 07:30 UTC (+ start_offset minutes)
    on BASE_DAY + day; patient-out follows after `duration` minutes.
    """
    scheduled = BASE_DAY + timedelta(days=day)
    patient_in = scheduled.replace(hour=7, minute=30) + timedelta(minutes=start_offset)

    prep_done = incision = None
    if prep_gap is not None:
        prep_done = patient_in + timedelta(minutes=10)
        incision = prep_done + timedelta(minutes=prep_gap)

    return ScorecardCase(
        id=case_id,
        surgeon_id=surgeon_id,
        procedure_type_id=procedure,
        or_room_id=room,
        scheduled_date=scheduled.date().isoformat(),
        surgeon_first_name="Test",
        surgeon_last_name=last_name or surgeon_id.upper(),
        procedure_name="Hip Arthroplasty" if procedure == "hip" else procedure.title(),
        start_time=start_time,
        patient_in_at=patient_in.isoformat(),
        incision_at=incision.isoformat() if incision else None,
        prep_drape_complete_at=prep_done.isoformat() if prep_done else None,
        patient_out_at=(patient_in + timedelta(minutes=duration)).isoformat(),
    )


def build_facility(surgeon_margins, duration=100, room_offset=0):
    """
    surgeon_margins: {surgeon_id: (case_count, margin_per_minute)}

    Every case is a 100-minute hip case, so profit = margin * duration.
    """
    cases, financials = [], []

    for s_idx, (surgeon_id, (count, margin)) in enumerate(surgeon_margins.items()):
        for i in range(count):
            case_id = f"{surgeon_id}-{i}"
            cases.append(build_case(
                case_id,
                surgeon_id,
                duration=duration,
                day=i,
                room=f"OR-{s_idx + room_offset}",
            ))
            financials.append(CaseFinancials(case_id=case_id, profit=margin * duration))

    return cases, financials


PEER_MARGINS = {
    "p1": (3, 8.0),
    "p2": (3, 9.0),
    "p3": (3, 10.0),
    "p4": (3, 11.0),
    "p5": (3, 12.0),
}


@pytest.fixture
def make_case():
    return build_case


@pytest.fixture
def make_facility():
    return build_facility


@pytest.fixture
def peer_margins():
    return dict(PEER_MARGINS)


@pytest.fixture
def settings():
    return ScoringSettings()


@pytest.fixture
def hip_scenario():
    """
    Surgeon X with 20 hip cases and margin-per-minute `x_margin`, plus
    five low-volume peers whose medians are 8, 9, 10, 11 and 12 $/min
    (cohort median 10, effective MAD 1).
    """
    def _build(x_margin=10.0, enable_diagnostics=False, **extra):
        margins = {"x": (20, x_margin)}
        margins.update(PEER_MARGINS)
        cases, financials = build_facility(margins)
        return ScorecardInput(
            cases=cases,
            financials=financials,
            flags=extra.pop("flags", []),
            settings=ScoringSettings(),
            timezone="UTC",
            enable_diagnostics=enable_diagnostics,
            **extra,
        )
    return _build


@pytest.fixture
def delay_flag():
    def _flag(case_id):
        return CaseFlag(case_id=case_id, flag_type="delay", severity="warning")
    return _flag


@pytest.fixture
def facility_extract_dir(tmp_path):
    """
    On-disk extract: surgeon x (20 hip cases, 13 $/min) and five
    low-volume peers (8-12 $/min), all in January 2026, all on time
    in America/Chicago (CST).
    """
    extract = tmp_path / "extract"
    extract.mkdir()

    case_rows = [
        "id,surgeon_id,procedure_type_id,or_room_id,scheduled_date,start_time,"
        "status,data_validated,surgeon_first_name,surgeon_last_name,procedure_name,"
        "patient_in_at,patient_out_at"
    ]
    fin_rows = ["case_id,profit"]

    margins = {"x": (20, 13.0)}
    margins.update(PEER_MARGINS)

    for s_idx, (surgeon_id, (count, margin)) in enumerate(margins.items()):
        for i in range(count):
            case_id = f"{surgeon_id}-{i}"
            day = f"2026-01-{i + 5:02d}"
            case_rows.append(
                f"{case_id},{surgeon_id},hip,OR-{s_idx},{day},07:30:00,completed,true,"
                f"Test,{surgeon_id.upper()},Hip Arthroplasty,"
                f"{day}T13:30:00Z,{day}T15:10:00Z"
            )
            fin_rows.append(f"{case_id},{margin * 100}")

    (extract / "cases.csv").write_text("\n".join(case_rows) + "\n")
    (extract / "financials.csv").write_text("\n".join(fin_rows) + "\n")
    return extract
