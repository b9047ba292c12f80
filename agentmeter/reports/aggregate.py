"""Folds per-document scores into corpus-wide summaries."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Dict, Iterable, Sequence, Tuple

from ..models import (
    SUB_SCORES,
    AggregateReport,
    History,
    RankedItem,
    ScoredDocument,
    TrendPoint,
    utc_timestamp,
)

# Contiguous, non-overlapping buckets: lower bound inclusive, upper bound exclusive
# except for the last tier, which also holds a perfect 100.
TIERS: Tuple[Tuple[str, float, float], ...] = (
    ("emerging", 0.0, 60.0),
    ("developing", 60.0, 70.0),
    ("stable", 70.0, 80.0),
    ("mature", 80.0, 90.0),
    ("optimized", 90.0, 100.0),
)

DEFAULT_TOP_ISSUES = 10
DEFAULT_TOP_STRENGTHS = 5
DEFAULT_TREND_LIMIT = 30


def tier_for(score: float) -> str:
    """Return the name of the tier that holds ``score``."""
    for name, lower, upper in TIERS[:-1]:
        if lower <= score < upper:
            return name
    if score < TIERS[0][1]:
        return TIERS[0][0]
    return TIERS[-1][0]


def score_label(score: float) -> str:
    if score >= 85:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Fair"
    return "Needs Work"


def score_class(score: float) -> str:
    return {"Excellent": "excellent", "Good": "good", "Fair": "fair"}.get(score_label(score), "poor")


def aggregate(
    entries: Iterable[ScoredDocument],
    *,
    now: str | None = None,
    top_issues: int = DEFAULT_TOP_ISSUES,
    top_strengths: int = DEFAULT_TOP_STRENGTHS,
) -> AggregateReport:
    """Summarise scores; the result does not depend on the order of ``entries``."""
    documents = tuple(sorted(entries, key=lambda entry: (entry.identifier, entry.path or "")))
    count = len(documents)

    averages: Dict[str, float] = {}
    for name in SUB_SCORES + ("overall",):
        total = sum(entry.score.value(name) for entry in documents)
        averages[name] = round(total / count, 2) if count else 0.0

    tiers: Dict[str, int] = {name: 0 for name, _, _ in TIERS}
    for entry in documents:
        tiers[tier_for(entry.score.overall)] += 1

    issues: Counter[str] = Counter()
    strengths: Counter[str] = Counter()
    for entry in documents:
        issues.update(set(entry.score.issues))
        strengths.update(set(entry.score.strengths))

    return AggregateReport(
        entries=documents,
        averages=averages,
        tiers=tiers,
        top_issues=_ranked(issues, top_issues),
        top_strengths=_ranked(strengths, top_strengths),
        generated_at=now or utc_timestamp(),
    )


def trend_point(report: AggregateReport) -> TrendPoint:
    """Snapshot a report for the historical trend chart."""
    return TrendPoint(
        timestamp=report.generated_at,
        document_count=report.document_count,
        averages=dict(report.averages),
        tiers=dict(report.tiers),
    )


def append_trend(
    history: History, point: TrendPoint, *, limit: int = DEFAULT_TREND_LIMIT
) -> History:
    """Return ``history`` with ``point`` appended, keeping only the newest ``limit`` points."""
    trends = history.trends + (point,)
    return replace(history, trends=trends[-limit:])


def _ranked(counter: Counter[str], limit: int) -> Tuple[RankedItem, ...]:
    ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return tuple(RankedItem(text=text, count=count) for text, count in ordered[:limit])


def rank_documents(report: AggregateReport) -> Sequence[ScoredDocument]:
    """Entries ordered best first, for tables."""
    return sorted(report.entries, key=lambda entry: (-entry.score.overall, entry.identifier))


__all__ = [
    "TIERS",
    "aggregate",
    "append_trend",
    "rank_documents",
    "score_class",
    "score_label",
    "tier_for",
    "trend_point",
]
