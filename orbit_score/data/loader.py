# orbit_score/data/loader.py

"""
FACILITY EXTRACT LOADER
-----------------------
Reads a facility extract (cases / financials / flags / milestones tables)
from disk with pandas and converts it into engine records.

Extract layout (any of .csv / .xlsx / .json per table):

    <extract_dir>/cases.csv         required
    <extract_dir>/financials.csv    optional
    <extract_dir>/flags.csv         optional
    <extract_dir>/milestones.csv    optional, long format
                                    (case_id, name, recorded_at)
"""

from dataclasses import dataclass, fields
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pandas as pd
from dateutil import parser as date_parser

from orbit_score.core.records import (
    CaseFinancials,
    CaseFlag,
    DateRange,
    ScorecardCase,
)
from orbit_score.utils.logger import get_logger

log = get_logger("orbit_score.loader")

SUPPORTED_EXT = (".csv", ".xlsx", ".xls", ".json")

MILESTONE_COLUMNS = {
    "patient_in": "patient_in_at",
    "incision": "incision_at",
    "prep_drape_complete": "prep_drape_complete_at",
    "closing": "closing_at",
    "patient_out": "patient_out_at",
}


@dataclass
class FacilityExtract:
    cases: pd.DataFrame
    financials: pd.DataFrame
    flags: pd.DataFrame


# =====================================================
# SAFE TABULAR LOADER
# =====================================================

def read_table(path: Path) -> pd.DataFrame:
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".csv":
        for enc in (None, "utf-8", "latin-1", "cp1252"):
            try:
                return pd.read_csv(path, encoding=enc, dtype=str, keep_default_na=True)
            except (UnicodeDecodeError, pd.errors.ParserError):
                continue

    if suffix in (".xls", ".xlsx"):
        return pd.read_excel(path, dtype=object)

    if suffix == ".json":
        return pd.read_json(path, orient="records", dtype=False, convert_dates=False)

    raise ValueError(f"Unsupported or unreadable file: {path}")


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.lower()
        .str.replace(" ", "_")
    )
    # empty strings are "not recorded"
    return df.replace(r"^\s*$", pd.NA, regex=True)


def _find_table(directory: Path, name: str) -> Optional[Path]:
    for ext in SUPPORTED_EXT:
        candidate = directory / f"{name}{ext}"
        if candidate.exists():
            return candidate
    return None


def _load_optional(directory: Path, name: str) -> pd.DataFrame:
    path = _find_table(directory, name)
    if path is None:
        log.info("No %s table in %s", name, directory)
        return pd.DataFrame()
    return normalize_columns(read_table(path))


# =====================================================
# MILESTONES (long -> wide)
# =====================================================

def attach_milestones(cases: pd.DataFrame, milestones: pd.DataFrame) -> pd.DataFrame:
    """
    Pivots (case_id, name, recorded_at) rows into *_at columns.
    Existing non-null case columns win over pivoted values.
    """
    required = {"case_id", "name", "recorded_at"}
    if milestones.empty or not required.issubset(milestones.columns):
        return cases

    known = milestones[milestones["name"].isin(list(MILESTONE_COLUMNS))]
    known = known.dropna(subset=["recorded_at"])
    if known.empty:
        return cases

    wide = (
        known.drop_duplicates(subset=["case_id", "name"], keep="last")
        .pivot(index="case_id", columns="name", values="recorded_at")
        .rename(columns=MILESTONE_COLUMNS)
    )

    merged = cases.merge(wide, how="left", left_on="id", right_index=True, suffixes=("", "_ms"))
    for col in wide.columns:
        if f"{col}_ms" in merged.columns:
            merged[col] = merged[col].fillna(merged[f"{col}_ms"])
            merged = merged.drop(columns=[f"{col}_ms"])

    return merged


# =====================================================
# EXTRACT ENTRY
# =====================================================

def load_facility_extract(directory: str) -> FacilityExtract:
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Extract directory not found: {directory}")

    cases_path = _find_table(directory, "cases")
    if cases_path is None:
        raise FileNotFoundError(f"No cases table in {directory}")

    cases = normalize_columns(read_table(cases_path))
    rows_original = len(cases)

    # Only completed, validated cases are scored
    if "status" in cases.columns:
        cases = cases[cases["status"].fillna("").str.lower() == "completed"]
    if "data_validated" in cases.columns:
        validated = cases["data_validated"].astype(str).str.lower().isin(["true", "1", "yes"])
        cases = cases[validated]

    cases = attach_milestones(cases, _load_optional(directory, "milestones"))
    cases = cases.reset_index(drop=True)

    log.info("Loaded %d of %d cases from %s", len(cases), rows_original, cases_path.name)

    return FacilityExtract(
        cases=cases,
        financials=_load_optional(directory, "financials"),
        flags=_load_optional(directory, "flags"),
    )


# =====================================================
# PERIODS
# =====================================================

def _to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(str(value)).date()


def resolve_period(
    start=None,
    end=None,
    lookback_days: int = 90,
    today: Optional[date] = None,
) -> Tuple[DateRange, DateRange]:
    """
    Current window defaults to the last `lookback_days` ending today.
    The previous window has the same length and ends the day before
    the current window starts.
    """
    end_dt = _to_date(end) if end else (today or date.today())
    start_dt = _to_date(start) if start else end_dt - timedelta(days=lookback_days)

    if start_dt > end_dt:
        raise ValueError(f"Period start {start_dt} is after end {end_dt}")

    period_days = (end_dt - start_dt).days
    prev_start = start_dt - timedelta(days=period_days)
    prev_end = start_dt - timedelta(days=1)

    return (
        DateRange(start=start_dt.isoformat(), end=end_dt.isoformat()),
        DateRange(start=prev_start.isoformat(), end=prev_end.isoformat()),
    )


def _scheduled_days(cases: pd.DataFrame) -> pd.Series:
    return pd.to_datetime(cases["scheduled_date"], errors="coerce").dt.strftime("%Y-%m-%d")


def filter_period(cases: pd.DataFrame, period: DateRange) -> pd.DataFrame:
    if cases.empty:
        return cases
    days = _scheduled_days(cases)
    mask = (days >= period.start) & (days <= period.end)
    return cases[mask.fillna(False)]


def filter_by_case_ids(df: pd.DataFrame, case_ids: Iterable[str]) -> pd.DataFrame:
    if df.empty or "case_id" not in df.columns:
        return df
    return df[df["case_id"].astype(str).isin(set(case_ids))]


# =====================================================
# DATAFRAME -> RECORDS
# =====================================================

def _rows(df: pd.DataFrame) -> List[dict]:
    if df.empty:
        return []
    clean = df.astype(object).where(pd.notna(df), None)
    return clean.to_dict(orient="records")


def _optional_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value) -> Optional[str]:
    return None if value is None else str(value)


def to_case_records(df: pd.DataFrame) -> List[ScorecardCase]:
    known = {f.name for f in fields(ScorecardCase)}
    text_fields = {
        "id", "surgeon_id", "procedure_type_id", "or_room_id",
        "surgeon_first_name", "surgeon_last_name", "procedure_name",
    }

    records = []
    for row in _rows(df):
        kwargs = {k: v for k, v in row.items() if k in known}
        for k in text_fields:
            if k in kwargs:
                kwargs[k] = "" if kwargs[k] is None else str(kwargs[k])
        kwargs["start_time"] = _optional_str(kwargs.get("start_time"))
        kwargs["scheduled_date"] = str(kwargs.get("scheduled_date") or "")[:10]
        records.append(ScorecardCase(**kwargs))
    return records


def to_financial_records(df: pd.DataFrame) -> List[CaseFinancials]:
    return [
        CaseFinancials(
            case_id=str(row.get("case_id")),
            profit=_optional_float(row.get("profit")),
            reimbursement=_optional_float(row.get("reimbursement")),
            or_time_cost=_optional_float(row.get("or_time_cost")),
        )
        for row in _rows(df)
    ]


def to_flag_records(df: pd.DataFrame) -> List[CaseFlag]:
    return [
        CaseFlag(
            case_id=str(row.get("case_id")),
            flag_type=str(row.get("flag_type") or ""),
            severity=str(row.get("severity") or ""),
            delay_type_name=_optional_str(row.get("delay_type_name")),
            created_by=_optional_str(row.get("created_by")),
        )
        for row in _rows(df)
    ]
