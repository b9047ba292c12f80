"""Per-document evolution summary built from the version history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models import History, Score, UsageMetrics, parse_timestamp
from ..versioning import latest_version, versions_for

LOW_QUALITY_THRESHOLD = 70.0
FAILURE_RATIO = 0.2


@dataclass(frozen=True)
class DocumentEvolution:
    """Current state of one tracked document."""

    identifier: str
    current_version: str
    quality: Score
    version_count: int
    last_updated: str
    usage: UsageMetrics


@dataclass(frozen=True)
class Recommendation:
    identifier: str
    issue: str
    suggestion: str


@dataclass(frozen=True)
class EvolutionReport:
    total_documents: int
    total_versions: int
    average_quality: float
    last_update: Optional[str]
    documents: Dict[str, DocumentEvolution] = field(default_factory=dict)
    recommendations: List[Recommendation] = field(default_factory=list)


def evolution_report(history: History) -> EvolutionReport:
    """Summarise the latest version, quality and usage of every tracked document."""
    identifiers = sorted({record.identifier for record in history.versions})
    documents: Dict[str, DocumentEvolution] = {}
    recommendations: List[Recommendation] = []

    for identifier in identifiers:
        latest = latest_version(history, identifier)
        if latest is None:  # pragma: no cover - identifiers come from the same history
            continue
        usage = history.usage.get(identifier, UsageMetrics())
        documents[identifier] = DocumentEvolution(
            identifier=identifier,
            current_version=latest.version,
            quality=latest.score,
            version_count=len(versions_for(history, identifier)),
            last_updated=latest.timestamp,
            usage=usage,
        )
        if latest.score.overall < LOW_QUALITY_THRESHOLD:
            recommendations.append(
                Recommendation(
                    identifier=identifier,
                    issue="Low quality score",
                    suggestion="Review and improve documentation, add examples",
                )
            )
        if usage.invocations > 0 and usage.failures > usage.successes * FAILURE_RATIO:
            recommendations.append(
                Recommendation(
                    identifier=identifier,
                    issue="High failure rate",
                    suggestion="Review trigger patterns and capabilities",
                )
            )

    qualities = [summary.quality.overall for summary in documents.values()]
    average = round(sum(qualities) / len(qualities), 2) if qualities else 0.0
    last_update = max(
        (summary.last_updated for summary in documents.values()),
        key=parse_timestamp,
        default=None,
    )

    return EvolutionReport(
        total_documents=len(documents),
        total_versions=len(history.versions),
        average_quality=average,
        last_update=last_update,
        documents=documents,
        recommendations=recommendations,
    )


__all__ = ["DocumentEvolution", "EvolutionReport", "Recommendation", "evolution_report"]
