"""
Glue between a loaded facility extract and the scoring engine.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from orbit_score.config.defaults import DEFAULT_CONFIG
from orbit_score.config.loader import load_scoring_settings
from orbit_score.core.records import Scorecard
from orbit_score.data.loader import (
    FacilityExtract,
    filter_by_case_ids,
    filter_period,
    resolve_period,
    to_case_records,
    to_financial_records,
    to_flag_records,
)
from orbit_score.scorecard.assembler import ScorecardInput, calculate_scores

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = DEFAULT_CONFIG["facility"]["timezone"]


def build_scorecard_input(
    extract: FacilityExtract,
    config: Dict[str, Any],
    start: Optional[str] = None,
    end: Optional[str] = None,
    today: Optional[date] = None,
) -> ScorecardInput:
    """
    Splits the extract into current / previous windows and converts
    both into engine records.
    """
    period_cfg = config.get("period") or {}
    current, previous = resolve_period(
        start=start or period_cfg.get("start"),
        end=end or period_cfg.get("end"),
        lookback_days=period_cfg.get("lookback_days", 90),
        today=today,
    )

    current_cases = filter_period(extract.cases, current)
    previous_cases = filter_period(extract.cases, previous)

    current_ids = current_cases["id"].astype(str) if not current_cases.empty else []
    previous_ids = previous_cases["id"].astype(str) if not previous_cases.empty else []

    logger.info(
        "Period %s..%s: %d cases (previous %s..%s: %d cases)",
        current.start, current.end, len(current_cases),
        previous.start, previous.end, len(previous_cases),
    )

    previous_records = to_case_records(previous_cases)

    return ScorecardInput(
        cases=to_case_records(current_cases),
        financials=to_financial_records(filter_by_case_ids(extract.financials, current_ids)),
        flags=to_flag_records(filter_by_case_ids(extract.flags, current_ids)),
        settings=load_scoring_settings(config),
        timezone=(config.get("facility") or {}).get("timezone") or DEFAULT_TIMEZONE,
        date_range=current,
        previous_period_cases=previous_records or None,
        previous_period_financials=(
            to_financial_records(filter_by_case_ids(extract.financials, previous_ids))
            or None
        ),
        previous_period_flags=(
            to_flag_records(filter_by_case_ids(extract.flags, previous_ids))
            or None
        ),
        enable_diagnostics=bool(config.get("diagnostics")),
    )


def score_extract(
    extract: FacilityExtract,
    config: Dict[str, Any],
    start: Optional[str] = None,
    end: Optional[str] = None,
    today: Optional[date] = None,
) -> List[Scorecard]:
    data = build_scorecard_input(extract, config, start=start, end=end, today=today)
    return calculate_scores(data, max_workers=config.get("max_workers"))
