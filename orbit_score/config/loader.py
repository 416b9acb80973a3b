import yaml
import copy
from pathlib import Path
from typing import Any, Dict, Optional

from .defaults import DEFAULT_CONFIG
from orbit_score.config.scoring_config import ScoringSettings


# -------------------------------------------------
# SCORING SETTINGS LOADER
# -------------------------------------------------
def load_scoring_settings(cfg: Dict[str, Any]) -> ScoringSettings:
    return ScoringSettings.from_dict(cfg.get("scoring", {}))


# -------------------------------------------------
# MAIN CONFIG LOADER
# -------------------------------------------------
def load_config(path: Optional[str]) -> dict:
    """
    Load and merge user config with engine defaults.

    Rules:
    - Defaults ALWAYS win if user omits fields
    - every section is OPTIONAL
    - output_dir MUST always exist
    """

    # -------------------------------------------------
    # 1. Load user config (if provided)
    # -------------------------------------------------
    user_config = {}

    if path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}

        if not isinstance(user_config, dict):
            raise ValueError("Config file must contain a YAML dictionary")

    # -------------------------------------------------
    # 2. Merge with defaults
    # -------------------------------------------------
    config = copy.deepcopy(DEFAULT_CONFIG)

    for key, value in user_config.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value

    # -------------------------------------------------
    # 3. Enforce REQUIRED invariants
    # -------------------------------------------------
    config.setdefault("output_dir", "runs")
    config.setdefault("metadata", {})
    config.setdefault("export_pdf", False)

    facility = config.get("facility") or {}
    if not facility.get("timezone"):
        facility["timezone"] = DEFAULT_CONFIG["facility"]["timezone"]
    config["facility"] = facility

    # -------------------------------------------------
    # 4. Typed scoring settings
    # -------------------------------------------------
    config["scoring_settings"] = load_scoring_settings(config)

    return config
