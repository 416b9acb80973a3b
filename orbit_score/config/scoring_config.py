from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


START_MILESTONES = ("patient_in", "incision")

DEFAULT_MIN_PROCEDURE_CASES = 3


# -------------------------------------------------
# FACILITY SCORING SETTINGS
# -------------------------------------------------
@dataclass(frozen=True)
class ScoringSettings:
    """
    Facility-configured thresholds for the scoring engine.

    start_time_milestone decides which milestone marks the actual case
    start for schedule adherence (patient_in | incision).
    """
    start_time_milestone: str = "patient_in"
    start_time_grace_minutes: float = 3
    start_time_floor_minutes: float = 20
    waiting_on_surgeon_minutes: float = 3
    waiting_on_surgeon_floor_minutes: float = 10
    min_procedure_cases: int = DEFAULT_MIN_PROCEDURE_CASES

    @property
    def min_cases_per_procedure(self) -> int:
        # 0 / None are treated as "not configured"
        return self.min_procedure_cases or DEFAULT_MIN_PROCEDURE_CASES

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> "ScoringSettings":
        """
        Builds settings from a config / database row, ignoring unknown keys
        and keeping defaults for keys that are missing or None.
        """
        values = values or {}
        known = {f.name for f in fields(cls)}
        kwargs = {
            k: v for k, v in values.items()
            if k in known and v is not None
        }
        return cls(**kwargs)
