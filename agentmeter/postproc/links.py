"""Link and path-reference validation for markdown documentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import re
from typing import List, Tuple

from ..errors import StorageError

TERMINOLOGY: Tuple[Tuple[str, str], ...] = (
    ("research-only", "research-plan-execute"),
    ("specialist agent", "specialist"),
    ("orchestrator agent", "orchestrator"),
)


@dataclass
class LinkReport:
    """Problems found in one documentation file."""

    path: Path
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class DocLinkValidator:
    """Ensures markdown links and project path references are reachable."""

    _LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
    _PATH_PATTERN = re.compile(r"(?<![\w/.])(Examples/[^)\s`'\"]+|\.claude/[^)\s`'\"]+)")

    def __init__(self, root: Path) -> None:
        self.root = root

    def validate(self, path: Path) -> LinkReport:
        report = LinkReport(path=path)
        try:
            markdown = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise StorageError(f"File does not exist: {path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

        for match in self._LINK_PATTERN.finditer(markdown):
            target = match.group(2).strip()
            if not target:
                report.errors.append(f"Empty link target in {path}")
                continue
            if target.startswith(("http://", "https://", "mailto:", "#")):
                continue
            cleaned = target.split("#", 1)[0].split("?", 1)[0]
            if not cleaned.endswith(".md"):
                continue
            resolved = (path.parent / cleaned).resolve()
            if not resolved.exists():
                report.errors.append(f"Broken link in {path}: {target} -> {resolved}")

        for match in self._PATH_PATTERN.finditer(markdown):
            reference = match.group(1).rstrip(".,;:")
            if _is_pattern(reference):
                continue
            if not (self.root / reference).exists():
                report.warnings.append(f"Potentially broken path reference in {path}: {reference}")

        for old, preferred in TERMINOLOGY:
            if old in markdown:
                report.warnings.append(
                    f'Terminology inconsistency in {path}: Found "{old}", prefer "{preferred}"'
                )
        return report


def _is_pattern(reference: str) -> bool:
    # Globs and placeholders such as .claude/doc/[agent]-[timestamp].md name no single file.
    return any(char in reference for char in "*[]{}<>")


__all__ = ["DocLinkValidator", "LinkReport", "TERMINOLOGY"]
