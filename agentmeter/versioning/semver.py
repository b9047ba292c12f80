"""Semantic version values for document history."""

from __future__ import annotations

import re
from typing import NamedTuple

from ..errors import ParseError

BUMP_MAJOR = "major"
BUMP_MINOR = "minor"
BUMP_PATCH = "patch"

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class SemanticVersion(NamedTuple):
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: str) -> "SemanticVersion":
        match = _VERSION_PATTERN.match(value.strip()) if isinstance(value, str) else None
        if not match:
            raise ParseError(f"Invalid semantic version: {value!r}")
        return cls(*(int(part) for part in match.groups()))

    def bump(self, kind: str) -> "SemanticVersion":
        if kind == BUMP_MAJOR:
            return SemanticVersion(self.major + 1, 0, 0)
        if kind == BUMP_MINOR:
            return SemanticVersion(self.major, self.minor + 1, 0)
        return SemanticVersion(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


INITIAL_VERSION = SemanticVersion(1, 0, 0)


__all__ = [
    "BUMP_MAJOR",
    "BUMP_MINOR",
    "BUMP_PATCH",
    "INITIAL_VERSION",
    "SemanticVersion",
]
