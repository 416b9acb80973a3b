import json
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from orbit_score.core.records import Scorecard


def scorecard_to_dict(scorecard: Scorecard) -> Dict[str, Any]:
    """JSON-safe dict. Diagnostics are omitted when not collected."""
    payload = asdict(scorecard)
    if payload.get("diagnostics") is None:
        payload.pop("diagnostics", None)
    return payload


def scorecards_to_json(scorecards: Iterable[Scorecard], indent: int = 2) -> str:
    return json.dumps([scorecard_to_dict(s) for s in scorecards], indent=indent)


def surgeon_response(
    scorecard: Scorecard,
    facility_id: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Flat single-surgeon shape consumed by the mobile client
    (one row per surgeon, pillar scores as *_score columns).
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    pillars = scorecard.pillars

    body = {
        "id": str(uuid.uuid4()),
        "facility_id": facility_id,
        "surgeon_id": scorecard.surgeon_id,
        "composite_score": scorecard.composite,
        "profitability_score": pillars.profitability,
        "consistency_score": pillars.consistency,
        "sched_adherence_score": pillars.sched_adherence,
        "availability_score": pillars.availability,
        "case_count": scorecard.case_count,
        "trend": scorecard.trend,
        "previous_composite": scorecard.previous_composite,
        "created_at": generated_at.isoformat(),
    }
    if scorecard.diagnostics is not None:
        body["diagnostics"] = asdict(scorecard.diagnostics)

    return body
