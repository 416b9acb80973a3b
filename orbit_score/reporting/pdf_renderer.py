from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.colors import HexColor
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Image, Table, TableStyle, PageBreak
)
from reportlab.lib.units import inch
from reportlab.lib import utils

from orbit_score.pillars.base import PILLARS
from orbit_score.reporting.formatters import fmt_currency, fmt_trend


# =====================================================
# PAYLOAD NORMALIZER
# =====================================================

def normalize_pdf_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    payload = payload if isinstance(payload, dict) else {}
    return {
        "meta": payload.get("meta", {}) or {},
        "scorecards": payload.get("scorecards", []) or [],
        "plans": payload.get("plans", {}) or {},
        "visuals": payload.get("visuals", []) or [],
    }


# =====================================================
# SCORECARD PDF RENDERER
# =====================================================

class ScorecardPDFRenderer:
    PRIMARY = HexColor("#1f2937")
    BORDER = HexColor("#e5e7eb")
    HEADER_BG = HexColor("#f3f4f6")

    def render(self, payload: Dict[str, Any], output_path: Path) -> Path:
        payload = normalize_pdf_payload(payload)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        doc = SimpleDocTemplate(
            str(output_path),
            pagesize=A4,
            rightMargin=40,
            leftMargin=40,
            topMargin=40,
            bottomMargin=40,
        )

        styles = getSampleStyleSheet()
        story: List[Any] = []

        # -------------------------------------------------
        # STYLES
        # -------------------------------------------------
        def add_style(name, **kwargs):
            if name not in styles:
                styles.add(ParagraphStyle(name=name, **kwargs))

        add_style(
            "OrbitTitle",
            fontSize=22,
            alignment=TA_CENTER,
            spaceAfter=18,
            fontName="Helvetica-Bold",
            textColor=self.PRIMARY,
        )
        add_style(
            "OrbitSection",
            fontSize=15,
            spaceBefore=18,
            spaceAfter=10,
            fontName="Helvetica-Bold",
        )
        add_style("OrbitBody", fontSize=11, leading=15, spaceAfter=6)
        add_style(
            "OrbitCaption",
            fontSize=9,
            alignment=TA_CENTER,
            textColor=HexColor("#6b7280"),
            spaceAfter=12,
        )

        # =================================================
        # COVER
        # =================================================
        meta = payload["meta"]
        story.append(Paragraph("ORbit Surgeon Scorecards", styles["OrbitTitle"]))
        story.append(Paragraph(
            "<br/>".join(
                [f"{k.replace('_', ' ').title()}: {v}" for k, v in meta.items()]
                + [f"Generated: {datetime.now(timezone.utc):%Y-%m-%d}"]
            ),
            styles["OrbitBody"],
        ))
        story.append(PageBreak())

        # =================================================
        # LEADERBOARD
        # =================================================
        scorecards = payload["scorecards"]
        if scorecards:
            rows = [["#", "Surgeon", "Cases", "Score", "Grade", "Trend"]]
            grade_styles = []
            for rank, s in enumerate(scorecards, start=1):
                rows.append([
                    str(rank),
                    s.surgeon_name,
                    str(s.case_count),
                    str(s.composite),
                    f"{s.grade.letter} - {s.grade.label}",
                    fmt_trend(s.trend, s.previous_composite, symbols=False),
                ])
                grade_styles.append(("TEXTCOLOR", (4, rank), (4, rank), HexColor(s.grade.text)))
                grade_styles.append(("BACKGROUND", (4, rank), (4, rank), HexColor(s.grade.bg)))

            story.append(Paragraph("Leaderboard", styles["OrbitSection"]))
            table = Table(rows, colWidths=[0.4 * inch, 1.8 * inch, 0.7 * inch, 0.7 * inch, 1.6 * inch, 1.5 * inch])
            table.setStyle(TableStyle([
                ("GRID", (0, 0), (-1, -1), 0.5, self.BORDER),
                ("BACKGROUND", (0, 0), (-1, 0), self.HEADER_BG),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("PADDING", (0, 0), (-1, -1), 6),
            ] + grade_styles))
            story.append(table)

        # =================================================
        # VISUALS
        # =================================================
        for vis in payload["visuals"][:6]:
            path = Path(vis.get("path", ""))
            if not path.exists():
                continue
            img = utils.ImageReader(str(path))
            iw, ih = img.getSize()
            w = 6 * inch
            h = min((ih / iw) * w, 5 * inch)
            story.append(Spacer(1, 12))
            story.append(Image(str(path), width=w, height=h))
            story.append(Paragraph(vis.get("caption", ""), styles["OrbitCaption"]))

        story.append(PageBreak())

        # =================================================
        # PER-SURGEON PAGES
        # =================================================
        for s in scorecards:
            story.append(Paragraph(
                f"{s.surgeon_name} - {s.composite} ({s.grade.letter})",
                styles["OrbitSection"],
            ))

            values = s.pillars.as_dict()
            rows = [["Pillar", "Weight", "Score"]]
            for p in PILLARS:
                rows.append([p.label, f"{p.weight:.0%}", str(values[p.key])])

            table = Table(rows, colWidths=[3 * inch, 1 * inch, 1 * inch])
            table.setStyle(TableStyle([
                ("GRID", (0, 0), (-1, -1), 0.5, self.BORDER),
                ("BACKGROUND", (0, 0), (-1, 0), self.HEADER_BG),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("PADDING", (0, 0), (-1, -1), 6),
            ]))
            story.append(table)

            plan = payload["plans"].get(s.surgeon_id)
            if plan is not None:
                story.append(Spacer(1, 10))
                story.append(Paragraph(
                    f"<b>Projected:</b> {plan.current_composite} to {plan.projected_composite} | "
                    f"{plan.total_projected_hours} OR hours | "
                    f"{fmt_currency(plan.total_projected_dollars)} per year",
                    styles["OrbitBody"],
                ))
                for r in plan.recommendations[:4]:
                    story.append(Paragraph(
                        f"{r.priority}. <b>{r.pillar_label}:</b> {r.headline}",
                        styles["OrbitBody"],
                    ))
                    story.append(Paragraph(r.insight, styles["OrbitCaption"]))

            story.append(PageBreak())

        doc.build(story)
        return output_path
