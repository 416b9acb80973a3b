"""Core Engine Module - cohort statistics, normalization, records."""

from .stats import mean, stddev, coefficient_of_variation, median, mad
from .scoring import mad_score, graduated_case_score, effective_mad
from .records import (
    ScorecardCase,
    CaseFinancials,
    CaseFlag,
    DateRange,
    PillarScores,
    GradeInfo,
    ProcedureCount,
    Scorecard,
)
from .diagnostics import DiagnosticsCollector, NullDiagnostics, PillarDiagnostics

__all__ = [
    "mean",
    "stddev",
    "coefficient_of_variation",
    "median",
    "mad",
    "mad_score",
    "graduated_case_score",
    "effective_mad",
    "ScorecardCase",
    "CaseFinancials",
    "CaseFlag",
    "DateRange",
    "PillarScores",
    "GradeInfo",
    "ProcedureCount",
    "Scorecard",
    "DiagnosticsCollector",
    "NullDiagnostics",
    "PillarDiagnostics",
]
