from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import uuid

from orbit_score.__version__ import __version__
from orbit_score.core.records import Scorecard
from orbit_score.narrative.improvement import ImprovementPlan
from orbit_score.pillars.base import PILLARS
from orbit_score.reporting.formatters import fmt_currency, fmt_trend


# =====================================================
# SCORECARD REPORT (MARKDOWN = SOURCE OF TRUTH)
# =====================================================

class ScorecardReport:
    """
    Renders scorecards + improvement plans into a Markdown report.

    Never computes scores; everything comes from the engine output.
    """

    name = "orbit_scorecards"

    def build(
        self,
        scorecards: List[Scorecard],
        output_dir: Path,
        plans: Optional[Dict[str, ImprovementPlan]] = None,
        visuals: Optional[List[Dict[str, Any]]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Path:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        report_path = output_dir / "ORbit_Scorecard_Report.md"
        run_id = f"OS-{datetime.now(timezone.utc):%Y%m%d}-{uuid.uuid4().hex[:6]}"
        plans = plans or {}

        with open(report_path, "w", encoding="utf-8") as f:
            self._write_header(f, run_id, metadata)
            self._write_leaderboard(f, scorecards)

            for vis in visuals or []:
                f.write(f"![{vis.get('caption')}]({vis.get('path')})\n")
                f.write(f"> {vis.get('caption')}\n\n")

            for scorecard in scorecards:
                self._write_surgeon_section(f, scorecard, plans.get(scorecard.surgeon_id))

            self._write_footer(f)

        return report_path

    # -------------------------------------------------
    # LEADERBOARD
    # -------------------------------------------------
    def _write_leaderboard(self, f, scorecards: List[Scorecard]):
        f.write("## Leaderboard\n\n")

        if not scorecards:
            f.write("_No surgeon met the minimum case volume for this period._\n\n")
            return

        f.write("| # | Surgeon | Cases | Score | Grade | Trend | Flip Room |\n")
        f.write("| :--- | :--- | ---: | ---: | :--- | :--- | :--- |\n")
        for rank, s in enumerate(scorecards, start=1):
            f.write(
                f"| {rank} | {s.surgeon_name} | {s.case_count} | {s.composite} | "
                f"{s.grade.letter} - {s.grade.label} | "
                f"{fmt_trend(s.trend, s.previous_composite)} | "
                f"{'Yes' if s.flip_room else 'No'} |\n"
            )
        f.write("\n---\n\n")

    # -------------------------------------------------
    # SURGEON SECTION
    # -------------------------------------------------
    def _write_surgeon_section(self, f, s: Scorecard, plan: Optional[ImprovementPlan]):
        f.write(f"## {s.surgeon_name} - {s.composite} ({s.grade.letter})\n\n")

        mix = ", ".join(f"{p.name} ({p.count})" for p in s.procedure_breakdown)
        f.write(f"**Case mix:** {mix}\n\n")

        values = s.pillars.as_dict()
        f.write("| Pillar | Weight | Score |\n")
        f.write("| :--- | ---: | ---: |\n")
        for p in PILLARS:
            f.write(f"| {p.label} | {p.weight:.0%} | {values[p.key]} |\n")
        f.write("\n")

        if s.diagnostics is not None:
            self._write_diagnostics(f, s)

        if plan is not None:
            self._write_plan(f, plan)

    def _write_diagnostics(self, f, s: Scorecard):
        diag = s.diagnostics
        f.write("### Cohort Diagnostics\n")
        f.write("| Pillar | Procedure | Surgeon | Peer Median | Eff. MAD | Peers | Score |\n")
        f.write("| :--- | :--- | ---: | ---: | ---: | ---: | ---: |\n")

        for label, pillar in (("Profitability", diag.profitability), ("Consistency", diag.consistency)):
            for c in pillar.procedure_cohorts:
                if c.skipped_reason:
                    f.write(f"| {label} | {c.procedure_name} | skipped: {c.skipped_reason} | | | | |\n")
                    continue
                f.write(
                    f"| {label} | {c.procedure_name} | {c.surgeon_value} | {c.cohort_median} | "
                    f"{c.effective_mad} | {c.cohort_size} | {c.raw_score} |\n"
                )

        adherence = diag.sched_adherence
        availability = diag.availability
        f.write(
            f"\n- **Schedule adherence:** {adherence.total_cases_scored} cases, "
            f"avg case score {adherence.avg_case_score}, "
            f"{adherence.cases_within_grace} within grace, {adherence.cases_at_zero} at zero\n"
        )
        f.write(
            f"- **Availability:** gap score {availability.gap_pillar_score} "
            f"({availability.gap_cases_scored} cases), delay rate {availability.delay_rate}% "
            f"-> {availability.delay_pillar_score}\n\n"
        )

    def _write_plan(self, f, plan: ImprovementPlan):
        f.write("### Improvement Plan\n")
        f.write(
            f"Projected: **{plan.current_composite} -> {plan.projected_composite}** "
            f"({plan.current_grade.letter} -> {plan.projected_grade.letter}), "
            f"{plan.total_projected_hours} OR hours / "
            f"{fmt_currency(plan.total_projected_dollars)} per year\n\n"
        )

        for r in plan.recommendations:
            f.write(f"{r.priority}. **{r.pillar_label}: {r.headline}**\n")
            f.write(f"   - {r.insight}\n")
            for action in r.actions:
                f.write(f"   - [ ] {action}\n")

        if plan.strengths:
            f.write("\n**Strengths**\n")
            for strength in plan.strengths:
                f.write(f"- {strength.pillar_label} ({strength.score}): {strength.message}\n")

        f.write("\n---\n\n")

    # -------------------------------------------------
    # HEADER & FOOTER
    # -------------------------------------------------
    def _write_header(self, f, run_id: str, metadata: Optional[Dict[str, Any]]):
        f.write("# ORbit Surgeon Scorecards\n\n")
        f.write(
            f"**Run ID:** `{run_id}` | "
            f"**Generated:** {datetime.now(timezone.utc):%Y-%m-%d %H:%M UTC}\n\n"
        )
        if metadata:
            for k, v in metadata.items():
                f.write(f"- **{k.replace('_',' ').title()}**: {v}\n")
        f.write("\n---\n\n")

    def _write_footer(self, f):
        f.write("\n---\n")
        f.write(f"_Generated by **ORbit Score Engine** v{__version__}_\n")
