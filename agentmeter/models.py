"""Core data models shared across agentmeter components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Dict, Mapping, Optional, Tuple

# Order matters: renderers and averages iterate sub-scores in this order.
SUB_SCORES: Tuple[str, ...] = ("yaml", "sections", "workflow", "documentation")

CHANGE_CREATED = "created"
CHANGE_ADDITION = "addition"
CHANGE_REMOVAL = "removal"


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with microseconds and a ``Z`` suffix."""
    moment = moment or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by :func:`utc_timestamp` (or any ISO-8601 string)."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class Score:
    """Weighted-heuristic quality assessment of one document."""

    yaml: float
    sections: float
    workflow: float
    documentation: float
    overall: float
    issues: Tuple[str, ...] = ()
    strengths: Tuple[str, ...] = ()

    def sub_scores(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in SUB_SCORES}

    def value(self, name: str) -> float:
        """Return a sub-score or ``overall`` by name."""
        if name != "overall" and name not in SUB_SCORES:
            raise KeyError(name)
        return getattr(self, name)


@dataclass(frozen=True)
class Change:
    """Line-level change summary between two versions of a document."""

    kind: str
    count: int
    samples: Tuple[str, ...] = ()
    description: Optional[str] = None


@dataclass(frozen=True)
class VersionRecord:
    """One immutable entry in a document's append-only history."""

    identifier: str
    version: str
    content_hash: str
    timestamp: str
    changes: Tuple[Change, ...]
    score: Score
    content: str
    path: Optional[str] = None
    size: int = 0


@dataclass(frozen=True)
class UsagePattern:
    """A single usage observation recorded for a document."""

    pattern: str
    timestamp: str
    success: bool


@dataclass(frozen=True)
class UsageMetrics:
    """Invocation counters for one document."""

    invocations: int = 0
    successes: int = 0
    failures: int = 0
    last_used: Optional[str] = None
    patterns: Tuple[UsagePattern, ...] = ()


@dataclass(frozen=True)
class TrendPoint:
    """Corpus-wide averages captured at one point in time."""

    timestamp: str
    document_count: int
    averages: Mapping[str, float]
    tiers: Mapping[str, int]


@dataclass(frozen=True)
class History:
    """Persisted evolution state: version log, usage counters and trend points."""

    versions: Tuple[VersionRecord, ...] = ()
    usage: Mapping[str, UsageMetrics] = field(default_factory=dict)
    trends: Tuple[TrendPoint, ...] = ()


@dataclass(frozen=True)
class ScoredDocument:
    """A score paired with the document it was computed from."""

    identifier: str
    score: Score
    path: Optional[str] = None


@dataclass(frozen=True)
class RankedItem:
    """An issue or strength string with the number of documents reporting it."""

    text: str
    count: int


@dataclass(frozen=True)
class AggregateReport:
    """Corpus-wide rollup of document scores."""

    entries: Tuple[ScoredDocument, ...]
    averages: Mapping[str, float]
    tiers: Mapping[str, int]
    top_issues: Tuple[RankedItem, ...]
    top_strengths: Tuple[RankedItem, ...]
    generated_at: str

    @property
    def document_count(self) -> int:
        return len(self.entries)


__all__ = [
    "AggregateReport",
    "CHANGE_ADDITION",
    "CHANGE_CREATED",
    "CHANGE_REMOVAL",
    "Change",
    "History",
    "RankedItem",
    "SUB_SCORES",
    "Score",
    "ScoredDocument",
    "TrendPoint",
    "UsageMetrics",
    "UsagePattern",
    "VersionRecord",
    "parse_timestamp",
    "utc_timestamp",
]
