"""Pillar calculators - Profitability, Consistency, Schedule Adherence, Availability."""

from .base import PILLARS, PILLAR_WEIGHTS, PillarDefinition, volume_weighted_blend
from .cohorts import CohortIndex
from .profitability import calculate_profitability
from .consistency import calculate_consistency
from .adherence import calculate_schedule_adherence
from .availability import calculate_availability

__all__ = [
    "PILLARS",
    "PILLAR_WEIGHTS",
    "PillarDefinition",
    "volume_weighted_blend",
    "CohortIndex",
    "calculate_profitability",
    "calculate_consistency",
    "calculate_schedule_adherence",
    "calculate_availability",
]
