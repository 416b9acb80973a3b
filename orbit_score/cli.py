"""
ORbit Score CLI
v2.1 - Markdown + JSON + ReportLab PDF
"""

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import List, Optional, Dict, Any
from dataclasses import replace
from datetime import date, datetime, timezone
import importlib

from orbit_score.__version__ import __version__
from orbit_score.config.loader import load_config
from orbit_score.data.loader import load_facility_extract
from orbit_score.narrative.improvement import generate_improvement_plan
from orbit_score.pipeline import build_scorecard_input
from orbit_score.scorecard.assembler import MIN_CASE_THRESHOLD, calculate_scores
from orbit_score.scorecard.export import scorecards_to_json, surgeon_response

logger = logging.getLogger(__name__)


# -------------------------------------------------
# PROGRAMMATIC ENTRY (CLI / API)
# -------------------------------------------------
def run_extract(
    extract_dir: str,
    config_path: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    generate_pdf: bool = False,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Scores one facility extract and writes the run artifacts.

    Returns:
        {
            "scorecards": <List[Scorecard]>,
            "case_counts": <current-period cases per surgeon>,
            "json": <path>,
            "markdown": <path>,
            "pdf": <path or None>,
            "run_dir": <path>
        }
    """

    # -------------------------------------------------
    # Config & run directory (AUTHORITATIVE)
    # -------------------------------------------------
    final_config = config if config is not None else load_config(config_path)

    if final_config.get("run_dir"):
        run_dir = Path(final_config["run_dir"])
    else:
        run_dir = (
            Path(final_config.get("output_dir") or "runs")
            / datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
        )
        final_config["run_dir"] = str(run_dir)

    run_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Run directory: %s", run_dir)

    improvement_cfg = final_config.get("improvement") or {}
    plans_enabled = bool(improvement_cfg.get("enabled"))
    diagnostics_requested = bool(final_config.get("diagnostics"))

    # -------------------------------------------------
    # SCORING
    # -------------------------------------------------
    # Plans read pillar diagnostics; artifacts carry them only on request
    scoring_config = dict(final_config, diagnostics=diagnostics_requested or plans_enabled)

    extract = load_facility_extract(extract_dir)
    data = build_scorecard_input(extract, scoring_config, start=start, end=end, today=today)
    scorecards = calculate_scores(data, max_workers=final_config.get("max_workers"))

    case_counts: Dict[str, int] = {}
    for c in data.cases:
        case_counts[c.surgeon_id] = case_counts.get(c.surgeon_id, 0) + 1

    plans = {}
    if plans_enabled:
        for s in scorecards:
            plans[s.surgeon_id] = generate_improvement_plan(
                s,
                data.settings,
                or_cost_per_minute=improvement_cfg.get("or_cost_per_minute", 60),
                annual_case_multiplier=improvement_cfg.get("annual_case_multiplier", 4),
                improvement_threshold=improvement_cfg.get("improvement_threshold", 80),
            )

    if not diagnostics_requested:
        scorecards = [replace(s, diagnostics=None) for s in scorecards]

    json_path = run_dir / "scorecards.json"
    json_path.write_text(scorecards_to_json(scorecards), encoding="utf-8")

    # -------------------------------------------------
    # VISUALS (matplotlib - lazy)
    # -------------------------------------------------
    visuals: List[Dict[str, Any]] = []
    if (final_config.get("report") or {}).get("charts", True) and scorecards:
        charts = importlib.import_module("orbit_score.reporting.visuals")
        visuals_dir = run_dir / "visuals"

        path = charts.leaderboard_chart(scorecards, visuals_dir / "leaderboard.png")
        if path:
            visuals.append({"path": str(path), "caption": "Composite ORbit Score by surgeon"})

        for s in scorecards:
            path = charts.pillar_chart(s, visuals_dir / f"pillars_{s.surgeon_id}.png")
            visuals.append({"path": str(path), "caption": f"{s.surgeon_name} pillar scores"})

    # -------------------------------------------------
    # MARKDOWN REPORT (SOURCE OF TRUTH)
    # -------------------------------------------------
    markdown = importlib.import_module("orbit_score.reporting.markdown")
    metadata = dict(final_config.get("metadata") or {})
    metadata.setdefault("surgeons_scored", len(scorecards))

    md_path = markdown.ScorecardReport().build(
        scorecards,
        run_dir,
        plans=plans,
        visuals=visuals,
        metadata=metadata,
    )

    pdf_path = None

    # -------------------------------------------------
    # PDF (ReportLab)
    # -------------------------------------------------
    if generate_pdf or final_config.get("export_pdf"):
        try:
            pdf_mod = importlib.import_module("orbit_score.reporting.pdf_renderer")
            pdf_path = run_dir / "ORbit_Scorecard_Report.pdf"
            pdf_mod.ScorecardPDFRenderer().render(
                payload={
                    "meta": metadata,
                    "scorecards": scorecards,
                    "plans": plans,
                    "visuals": visuals,
                },
                output_path=pdf_path,
            )
            logger.info("PDF generated: %s", pdf_path)

        except Exception:
            logger.exception("PDF generation failed")
            pdf_path = None

    return {
        "scorecards": scorecards,
        "case_counts": case_counts,
        "json": str(json_path),
        "markdown": str(md_path),
        "pdf": str(pdf_path) if pdf_path else None,
        "run_dir": str(run_dir),
    }


def surgeon_lookup(scorecards, surgeon_id: str, case_count: int, facility_id=None) -> Dict[str, Any]:
    """Flat response for one surgeon, or an insufficient_cases error body."""
    for s in scorecards:
        if s.surgeon_id == surgeon_id:
            return surgeon_response(s, facility_id=facility_id)

    return {
        "error": "insufficient_cases",
        "message": (
            f"Surgeon has {case_count} completed cases in the period "
            f"(minimum {MIN_CASE_THRESHOLD} required)"
        ),
        "case_count": case_count,
    }


# -------------------------------------------------
# CLI ENTRY
# -------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=f"ORbit Score Engine v{__version__}"
    )

    parser.add_argument("input", nargs="?", help="Facility extract directory")
    parser.add_argument("--config", required=False, help="Path to config YAML")

    parser.add_argument("--start", help="Period start (YYYY-MM-DD)")
    parser.add_argument("--end", help="Period end (YYYY-MM-DD)")
    parser.add_argument("--surgeon", help="Print the flat scorecard for one surgeon")
    parser.add_argument("--diagnostics", action="store_true", help="Include pillar diagnostics")

    parser.add_argument("--pdf", action="store_true", help="Export PDF report")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    # ---- VERSION ----
    if args.version:
        print(f"ORbit Score Engine v{__version__}")
        return 0

    # ---- LOGGING ----
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if not args.input:
        parser.error("Extract directory required")

    input_path = Path(args.input)
    if not input_path.is_dir():
        parser.error(f"Extract directory not found: {input_path}")

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        parser.error(str(e))

    if args.diagnostics:
        config["diagnostics"] = True

    result = run_extract(
        extract_dir=str(input_path),
        config=config,
        start=args.start,
        end=args.end,
        generate_pdf=args.pdf,
    )

    # ---- SINGLE SURGEON ----
    if args.surgeon:
        body = surgeon_lookup(
            result["scorecards"],
            args.surgeon,
            case_count=result["case_counts"].get(args.surgeon, 0),
            facility_id=(config.get("facility") or {}).get("id"),
        )
        print(json.dumps(body, indent=2))
        return 1 if "error" in body else 0

    print("\n✅ Scorecards generated")
    print(f"🏆 Surgeons scored: {len(result['scorecards'])}")
    print(f"🧾 JSON: {result['json']}")
    print(f"📝 Markdown: {result['markdown']}")

    if result["pdf"]:
        print(f"📄 PDF: {result['pdf']}")

    print(f"📁 Run folder: {result['run_dir']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
