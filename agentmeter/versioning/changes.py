"""Line-set change detection and classification between document versions."""

from __future__ import annotations

import re
from typing import FrozenSet, List, Optional, Sequence, Tuple

from ..models import CHANGE_ADDITION, CHANGE_CREATED, CHANGE_REMOVAL, Change
from .semver import BUMP_MAJOR, BUMP_MINOR, BUMP_PATCH

SAMPLE_LIMIT = 3
DEFAULT_MINOR_THRESHOLD = 3

_BULLET_PATTERN = re.compile(r"^\s*[-*]\s+\S")


def detect_changes(new_text: str, old_text: Optional[str]) -> Tuple[Change, ...]:
    """Summarise added and removed lines; the first version is a single ``created`` change."""
    if old_text is None:
        line_count = len(new_text.splitlines())
        return (Change(kind=CHANGE_CREATED, count=line_count, description="Initial version"),)

    new_lines = new_text.splitlines()
    old_lines = old_text.splitlines()
    new_set = set(new_lines)
    old_set = set(old_lines)

    changes: List[Change] = []
    additions = [line for line in new_lines if line not in old_set]
    if additions:
        changes.append(
            Change(kind=CHANGE_ADDITION, count=len(additions), samples=tuple(additions[:SAMPLE_LIMIT]))
        )
    removals = [line for line in old_lines if line not in new_set]
    if removals:
        changes.append(
            Change(kind=CHANGE_REMOVAL, count=len(removals), samples=tuple(removals[:SAMPLE_LIMIT]))
        )
    return tuple(changes)


def classify_change(
    new_text: str,
    old_text: Optional[str],
    *,
    minor_threshold: int = DEFAULT_MINOR_THRESHOLD,
) -> str:
    """Return ``major`` for heading changes, ``minor`` for new bullets, else ``patch``."""
    if old_text is None:
        return BUMP_MAJOR
    new_lines = new_text.splitlines()
    old_lines = old_text.splitlines()
    if _headings(new_lines) != _headings(old_lines):
        return BUMP_MAJOR
    if len(_new_bullets(new_lines, old_lines)) > minor_threshold:
        return BUMP_MINOR
    return BUMP_PATCH


def _headings(lines: Sequence[str]) -> FrozenSet[str]:
    return frozenset(line.rstrip() for line in lines if line.startswith("##"))


def _new_bullets(new_lines: Sequence[str], old_lines: Sequence[str]) -> List[str]:
    existing = set(old_lines)
    return [line for line in new_lines if _BULLET_PATTERN.match(line) and line not in existing]


__all__ = ["DEFAULT_MINOR_THRESHOLD", "classify_change", "detect_changes"]
