from pathlib import Path
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import seaborn as sns  # noqa: E402

from orbit_score.core.records import Scorecard  # noqa: E402
from orbit_score.pillars.base import PILLARS  # noqa: E402
from orbit_score.scorecard.composite import GRADE_BANDS  # noqa: E402


def leaderboard_chart(scorecards: List[Scorecard], out: Path) -> Optional[Path]:
    """
    Horizontal composite bar chart, one bar per surgeon, coloured by grade.
    """
    if not scorecards:
        return None

    names = [s.surgeon_name for s in scorecards]
    composites = [s.composite for s in scorecards]
    palette = {s.surgeon_name: s.grade.text for s in scorecards}

    fig, ax = plt.subplots(figsize=(6, max(2.5, 0.4 * len(scorecards))))

    sns.barplot(x=composites, y=names, ax=ax, hue=names, palette=palette, legend=False)

    # -------------------------------
    # GRADE THRESHOLDS
    # -------------------------------
    for threshold, grade in GRADE_BANDS:
        ax.axvline(threshold, color=grade.text, linestyle="--", alpha=0.4)

    leader = scorecards[0]
    ax.set_title(
        f"{leader.surgeon_name} leads the facility at {leader.composite} ({leader.grade.letter})",
        fontsize=11,
        pad=10,
    )
    ax.set_xlabel("ORbit Score")
    ax.set_ylabel("")
    ax.set_xlim(0, 100)
    ax.grid(axis="x", linestyle="--", alpha=0.4)

    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out, dpi=200, bbox_inches="tight")
    plt.close(fig)
    return out


def pillar_chart(scorecard: Scorecard, out: Path) -> Path:
    """Four pillar scores for one surgeon in pillar colours."""
    values = scorecard.pillars.as_dict()

    labels = [p.label for p in PILLARS]
    scores = [values[p.key] for p in PILLARS]

    fig, ax = plt.subplots(figsize=(5, 2.5))
    sns.barplot(x=scores, y=labels, ax=ax, hue=labels, palette=[p.color for p in PILLARS], legend=False)

    ax.axvline(50, color="#6b7280", linestyle=":", alpha=0.6)
    ax.set_title(f"{scorecard.surgeon_name} - pillar breakdown", fontsize=10)
    ax.set_xlim(0, 100)
    ax.set_xlabel("Pillar score (50 = peer median)")
    ax.set_ylabel("")

    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out, dpi=200, bbox_inches="tight")
    plt.close(fig)
    return out
