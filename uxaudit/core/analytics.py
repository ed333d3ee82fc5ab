import math
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlsplit

from uxaudit.models.schema import (
    AnalyticsReport,
    AuditResult,
    AuditScoreSet,
    ChartPoint,
    HistoryEntry,
    ViolationCount,
)

LABEL_MAX = 25
DIMENSIONS = ("elegance", "clarity", "modernity")


def round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def average_scores(entries: Sequence[HistoryEntry]) -> Optional[AuditScoreSet]:
    """Mean of each score dimension, or ``None`` when there is no data."""
    if not entries:
        return None
    total = len(entries)
    means = {
        dim: round_half_up(sum(getattr(e.result.scores, dim) for e in entries) / total)
        for dim in DIMENSIONS
    }
    return AuditScoreSet(**means)


def violation_label(title: str) -> str:
    label = title
    # "Visibility: Menu hidden" -> "Visibility"
    if ":" in title:
        label = title.split(":", 1)[0].strip()
    if len(label) > LABEL_MAX:
        label = label[:LABEL_MAX] + "..."
    return label


def top_violations(entries: Sequence[HistoryEntry], limit: int = 5) -> List[ViolationCount]:
    counts: Dict[str, int] = {}
    full: Dict[str, str] = {}
    for entry in entries:
        for p in entry.result.problems:
            label = violation_label(p.problem)
            counts[label] = counts.get(label, 0) + 1
            full.setdefault(label, p.problem)

    # dicts keep first-seen order and sorted() is stable, so ties stay in that order
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [
        ViolationCount(label=label, full_label=full[label], count=count)
        for label, count in ranked[: max(limit, 0)]
    ]


def chart_series(entries: Sequence[HistoryEntry], limit: int = 10) -> List[ChartPoint]:
    points = []
    for entry in entries[: max(limit, 0)]:
        words = entry.result.summary.product.split()
        scores = entry.result.scores
        points.append(ChartPoint(
            display_name=words[0] if words else "",
            elegance=scores.elegance,
            clarity=scores.clarity,
            modernity=scores.modernity,
        ))
    return points


def summarize(
    entries: Sequence[HistoryEntry],
    violation_limit: int = 5,
    chart_limit: int = 10,
) -> AnalyticsReport:
    return AnalyticsReport(
        total=len(entries),
        averages=average_scores(entries),
        top_violations=top_violations(entries, violation_limit),
        chart=chart_series(entries, chart_limit),
    )


# ---------- per-audit display helpers ----------
def overall_score(result: AuditResult) -> int:
    s = result.scores
    return round_half_up((s.elegance + s.clarity + s.modernity) / 3)


def score_band(score: int) -> str:
    if score >= 80:
        return "good"
    if score >= 60:
        return "fair"
    return "poor"


def site_name(url: str) -> str:
    """Hostname without ``www.`` for display; the raw url if it has none."""
    candidate = url if url.startswith("http") else f"https://{url}"
    try:
        host = urlsplit(candidate).hostname
    except ValueError:
        host = None
    if not host:
        return url
    return host.replace("www.", "", 1)
