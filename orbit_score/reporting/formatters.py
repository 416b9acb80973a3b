from typing import Optional

TREND_SYMBOLS = {"up": "▲", "down": "▼", "stable": "●"}


def fmt_currency(value: Optional[float]) -> str:
    """
    Canonical currency formatter for ALL reports.
    """
    if value is None:
        return "-"

    try:
        value = float(value)
    except (TypeError, ValueError):
        return "-"

    if abs(value) >= 1_000_000:
        return f"${value/1_000_000:.2f}M"
    if abs(value) >= 1_000:
        return f"${value/1_000:.1f}K"
    return f"${value:,.0f}"


def fmt_trend(trend: str, previous: Optional[int], symbols: bool = True) -> str:
    # built-in PDF fonts have no arrow glyphs
    prefix = TREND_SYMBOLS.get(trend, "●") + " " if symbols else ""
    if previous is None:
        return f"{prefix}new"
    return f"{prefix}{trend} (prev {previous})"
