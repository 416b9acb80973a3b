from .loader import load_config, load_scoring_settings
from .defaults import DEFAULT_CONFIG
from .scoring_config import ScoringSettings

__all__ = [
    "load_config",
    "load_scoring_settings",
    "DEFAULT_CONFIG",
    "ScoringSettings",
]
