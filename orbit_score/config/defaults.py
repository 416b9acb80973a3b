DEFAULT_CONFIG = {
    # -----------------------------
    # FACILITY
    # -----------------------------
    "facility": {
        "id": None,
        "timezone": "America/Chicago",
    },

    # -----------------------------
    # SCORING SETTINGS
    # -----------------------------
    # Mirrors the facility analytics settings row
    "scoring": {
        "start_time_milestone": "patient_in",  # patient_in | incision
        "start_time_grace_minutes": 3,
        "start_time_floor_minutes": 20,
        "waiting_on_surgeon_minutes": 3,
        "waiting_on_surgeon_floor_minutes": 10,
        "min_procedure_cases": 3,
    },

    # -----------------------------
    # SCORING WINDOW
    # -----------------------------
    # Previous period = same length, immediately before (for trend)
    "period": {
        "start": None,
        "end": None,
        "lookback_days": 90,
    },

    "diagnostics": False,

    # -----------------------------
    # IMPROVEMENT PLANS
    # -----------------------------
    "improvement": {
        "enabled": True,
        "or_cost_per_minute": 60,
        "annual_case_multiplier": 4,   # quarterly window -> x4
        "improvement_threshold": 80,   # below B
    },

    # -----------------------------
    # REPORTING
    # -----------------------------
    "report": {
        "format": "md",        # md is SOURCE OF TRUTH
        "charts": True,
    },

    # -----------------------------
    # OUTPUT CONTROL
    # -----------------------------
    "output_dir": "runs",

    "export_pdf": False,

    # -----------------------------
    # METADATA (OPTIONAL)
    # -----------------------------
    "metadata": {
        "engine": "ORbit Score",
    },
}
