from .markdown import ScorecardReport
from .formatters import fmt_currency, fmt_trend

__all__ = [
    "ScorecardReport",
    "fmt_currency",
    "fmt_trend",
]
