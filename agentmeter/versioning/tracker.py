"""Append-only version history for agent/role documents.

Every function here takes an explicit :class:`~agentmeter.models.History`
value and returns a new one; loading and saving the history file happens in
:mod:`agentmeter.stores`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..document import Document
from ..logging import get_logger
from ..models import Change, History, VersionRecord, parse_timestamp, utc_timestamp
from ..scoring import ContentScorer
from .changes import DEFAULT_MINOR_THRESHOLD, classify_change, detect_changes
from .semver import INITIAL_VERSION, SemanticVersion

STATUS_TRACKED = "tracked"
STATUS_UNCHANGED = "unchanged"

_logger = get_logger("versioning")


@dataclass(frozen=True)
class RecordOutcome:
    """Result of :func:`record_version`."""

    history: History
    status: str
    version: str
    record: VersionRecord

    @property
    def changes(self) -> Tuple[Change, ...]:
        if self.status == STATUS_UNCHANGED:
            return ()
        return self.record.changes


def versions_for(history: History, identifier: str) -> List[VersionRecord]:
    """Return the records of one document in append order."""
    return [record for record in history.versions if record.identifier == identifier]


def latest_version(history: History, identifier: str) -> Optional[VersionRecord]:
    """Return the newest record by timestamp; ties resolve to the later append."""
    latest: Optional[VersionRecord] = None
    latest_key = None
    for position, record in enumerate(history.versions):
        if record.identifier != identifier:
            continue
        key = (parse_timestamp(record.timestamp), position)
        if latest_key is None or key > latest_key:
            latest, latest_key = record, key
    return latest


def record_version(
    history: History,
    document: Document,
    *,
    scorer: ContentScorer | None = None,
    now: str | None = None,
    minor_threshold: int = DEFAULT_MINOR_THRESHOLD,
) -> RecordOutcome:
    """Record ``document`` as the next version of its identifier.

    Identical content leaves the history untouched and reports ``unchanged``.
    Otherwise the change is classified against the latest recorded content
    and a new record with a bumped semantic version is appended.
    """
    previous = latest_version(history, document.identifier)
    if previous is not None and previous.content_hash == document.content_hash:
        _logger.debug("%s unchanged at %s", document.identifier, previous.version)
        return RecordOutcome(
            history=history,
            status=STATUS_UNCHANGED,
            version=previous.version,
            record=previous,
        )

    old_text = previous.content if previous is not None else None
    if previous is None:
        version = INITIAL_VERSION
    else:
        kind = classify_change(document.text, old_text, minor_threshold=minor_threshold)
        version = SemanticVersion.parse(previous.version).bump(kind)
        _logger.debug("%s classified as %s change", document.identifier, kind)

    timestamp = now or utc_timestamp()
    if previous is not None and parse_timestamp(timestamp) < parse_timestamp(previous.timestamp):
        # Keep the new record the latest even if the clock moved backwards.
        timestamp = previous.timestamp

    scorer = scorer or ContentScorer()
    record = VersionRecord(
        identifier=document.identifier,
        version=str(version),
        content_hash=document.content_hash,
        timestamp=timestamp,
        changes=detect_changes(document.text, old_text),
        score=scorer.score_document(document),
        content=document.text,
        path=str(document.path) if document.path is not None else None,
        size=len(document.text),
    )
    _logger.info("Tracked %s version %s", document.identifier, record.version)
    return RecordOutcome(
        history=replace(history, versions=history.versions + (record,)),
        status=STATUS_TRACKED,
        version=record.version,
        record=record,
    )


__all__ = [
    "RecordOutcome",
    "STATUS_TRACKED",
    "STATUS_UNCHANGED",
    "latest_version",
    "record_version",
    "versions_for",
]
