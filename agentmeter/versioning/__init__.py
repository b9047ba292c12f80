"""Version tracking and usage learning for agent/role documents."""

from .changes import classify_change, detect_changes
from .semver import INITIAL_VERSION, SemanticVersion
from .tracker import (
    STATUS_TRACKED,
    STATUS_UNCHANGED,
    RecordOutcome,
    latest_version,
    record_version,
    versions_for,
)
from .usage import learn_patterns, record_usage

__all__ = [
    "INITIAL_VERSION",
    "RecordOutcome",
    "STATUS_TRACKED",
    "STATUS_UNCHANGED",
    "SemanticVersion",
    "classify_change",
    "detect_changes",
    "latest_version",
    "learn_patterns",
    "record_usage",
    "record_version",
    "versions_for",
]
