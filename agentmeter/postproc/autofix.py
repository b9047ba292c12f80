"""Applies standard structural fixes to agent/role templates."""

from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
from pathlib import Path
import re
import shutil
from typing import Any, Dict, Iterable, List, Optional

import yaml

from ..config import AutoFixConfig
from ..document import Document, load_document, split_frontmatter
from ..errors import StorageError
from ..gates import OUTPUT_MARKER, RESEARCH_DIRECTIVES, SESSION_MARKERS
from ..logging import get_logger
from ..scoring import DEFAULT_REQUIRED_SECTIONS
from ..scoring.policy import ScoringInput, has_section
from .section_templates import (
    CONTEXT7_STEP,
    CONTEXT_STEP,
    OUTPUT_SPEC,
    RESEARCH_DIRECTIVE,
    SEQUENTIAL_STEP,
    render_section,
)

FIX_FRONTMATTER = "add-frontmatter"
FIX_FIELD = "add-field"
FIX_EXAMPLES = "fix-examples"
FIX_SECTION = "add-section"
FIX_DIRECTIVE = "add-directive"
FIX_CONTEXT = "add-context"
FIX_CONTEXT7 = "add-context7"
FIX_SEQUENTIAL = "add-sequential"
FIX_OUTPUT = "add-output"

MIN_EXAMPLES = 2

_COLORS = (
    "#2196F3",
    "#4CAF50",
    "#FF9800",
    "#9C27B0",
    "#F44336",
    "#00BCD4",
    "#795548",
    "#607D8B",
    "#E91E63",
    "#3F51B5",
)


@dataclass(frozen=True)
class Fix:
    """One planned change to a document."""

    kind: str
    description: str
    target: Optional[str] = None
    value: Any = None
    content: Optional[str] = None


@dataclass
class FixSummary:
    fixed: int = 0
    skipped: int = 0
    failed: int = 0
    planned: Dict[str, List[Fix]] = field(default_factory=dict)


class AutoFixer:
    """Plans and applies fixes for missing frontmatter, sections and workflow steps."""

    def __init__(
        self,
        config: AutoFixConfig | None = None,
        *,
        required_sections: Iterable[str] | None = None,
        root: Path | None = None,
    ) -> None:
        self.config = config or AutoFixConfig()
        self.required_sections = tuple(required_sections or DEFAULT_REQUIRED_SECTIONS)
        self.root = root
        self.logger = get_logger("postproc.autofix")

    def plan(self, document: Document) -> List[Fix]:
        fixes: List[Fix] = []
        if not document.has_frontmatter:
            fixes.append(
                Fix(FIX_FRONTMATTER, "Add missing YAML frontmatter", value=self._frontmatter(document))
            )
        elif document.frontmatter is None:
            # Malformed YAML is left for a human; rewriting it would lose content.
            self.logger.warning(
                "Skipping frontmatter fixes for %s: %s", document.identifier, document.frontmatter_error
            )
        else:
            fixes.extend(self._field_fixes(document))

        data = ScoringInput.from_document(document)
        added: List[str] = []
        for title in self.required_sections:
            if has_section(title)(data):
                continue
            content = render_section(title, _domain(document))
            added.append(content)
            fixes.append(Fix(FIX_SECTION, f"Add missing {title} section", target=title, content=content))

        # Later checks see the text as it will look once the sections are appended.
        projected = "\n\n".join([document.text] + added)
        if not document.is_orchestrator and not any(d in projected for d in RESEARCH_DIRECTIVES):
            fixes.append(Fix(FIX_DIRECTIVE, "Add research-only directive"))
        if not any(marker in projected for marker in SESSION_MARKERS):
            fixes.append(Fix(FIX_CONTEXT, "Add session context integration"))
        if "Context7 MCP" not in projected and "mcp__context7" not in projected:
            fixes.append(Fix(FIX_CONTEXT7, "Add Context7 MCP integration"))
        if "Sequential MCP" not in projected and "mcp__sequential" not in projected:
            fixes.append(Fix(FIX_SEQUENTIAL, "Add Sequential MCP integration"))
        if OUTPUT_MARKER not in projected:
            fixes.append(Fix(FIX_OUTPUT, "Add output path specification"))
        return fixes

    def apply(self, text: str, fixes: Iterable[Fix]) -> str:
        for fix in fixes:
            if fix.kind == FIX_FRONTMATTER:
                text = f"---\n{_dump_yaml(fix.value)}---\n\n{text}"
            elif fix.kind in (FIX_FIELD, FIX_EXAMPLES):
                text = _set_frontmatter_field(text, fix.target or "Examples", fix.value)
            elif fix.kind == FIX_SECTION:
                text = _append_block(text, fix.content or "")
            elif fix.kind == FIX_DIRECTIVE:
                text = _insert_after_heading(
                    text,
                    "Goal",
                    RESEARCH_DIRECTIVE,
                    fallback="## Goal\nYour goal is to create comprehensive implementation plans and specifications.",
                )
            elif fix.kind == FIX_CONTEXT:
                text = _insert_after_heading(text, "Core Workflow", CONTEXT_STEP)
            elif fix.kind == FIX_CONTEXT7:
                text = _append_to_section(text, "Core Workflow", CONTEXT7_STEP)
            elif fix.kind == FIX_SEQUENTIAL:
                text = _append_to_section(text, "Core Workflow", SEQUENTIAL_STEP)
            elif fix.kind == FIX_OUTPUT:
                text = _append_to_section(text, "Output Format", OUTPUT_SPEC)
            else:
                raise ValueError(f"Unknown fix kind: {fix.kind}")
        return text

    def fix_paths(
        self,
        paths: Iterable[Path],
        *,
        dry_run: bool = False,
        backup_dir: Path | None = None,
    ) -> FixSummary:
        summary = FixSummary()
        for path in paths:
            try:
                document = load_document(path)
                fixes = self.plan(document)
                summary.planned[str(path)] = fixes
                if not fixes:
                    summary.skipped += 1
                    self.logger.debug("No fixes needed for %s", path)
                    continue
                self.logger.info("%d fix(es) planned for %s", len(fixes), path)
                if dry_run:
                    continue
                if backup_dir is not None:
                    self._backup(path, backup_dir)
                path.write_text(self.apply(document.text, fixes), encoding="utf-8")
                summary.fixed += 1
            except (StorageError, OSError) as exc:
                summary.failed += 1
                self.logger.error("Failed to fix %s: %s", path, exc)
        return summary

    # ------------------------------------------------------------------
    # Internals

    def _field_fixes(self, document: Document) -> List[Fix]:
        frontmatter = document.frontmatter or {}
        fixes: List[Fix] = []
        if not frontmatter.get("name"):
            fixes.append(Fix(FIX_FIELD, "Add missing name field", target="name", value=_display_name(document)))
        if not frontmatter.get("description"):
            fixes.append(
                Fix(
                    FIX_FIELD,
                    "Add missing description field",
                    target="description",
                    value=_description(document),
                )
            )
        if not frontmatter.get("model"):
            fixes.append(Fix(FIX_FIELD, "Add missing model field", target="model", value=self._model(document)))
        examples = frontmatter.get("Examples")
        if not isinstance(examples, list) or len(examples) < MIN_EXAMPLES:
            fixes.append(
                Fix(FIX_EXAMPLES, "Add/fix Examples array", target="Examples", value=_examples(document))
            )
        return fixes

    def _frontmatter(self, document: Document) -> Dict[str, Any]:
        return {
            "name": _display_name(document),
            "description": _description(document),
            "model": self._model(document),
            "color": _color(document),
            "Examples": _examples(document),
        }

    def _model(self, document: Document) -> str:
        if document.is_orchestrator:
            return self.config.orchestrator_model
        return self.config.default_model

    def _backup(self, path: Path, backup_dir: Path) -> None:
        relative = Path(path.name)
        if self.root is not None:
            try:
                relative = path.resolve().relative_to(self.root.resolve())
            except ValueError:
                pass
        target = backup_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        self.logger.debug("Backed up %s to %s", path, target)


def _stem(document: Document) -> str:
    return document.path.stem if document.path is not None else document.identifier


def _display_name(document: Document) -> str:
    return " ".join(word.capitalize() for word in _stem(document).split("-") if word)


def _domain(document: Document) -> str:
    words = [word for word in _stem(document).split("-") if word]
    if len(words) > 1:
        words = words[:-1]
    return " ".join(words)


def _description(document: Document) -> str:
    domain = _domain(document)
    if document.is_orchestrator:
        return (
            f"Use this agent PROACTIVELY when tasks require {domain} orchestration and "
            f"coordination. Analyzes tasks requiring multiple specialists and coordinates "
            f"systematic execution across {domain} domains."
        )
    return (
        f"Use this agent PROACTIVELY when tasks involve {domain}. Specializes in {domain} "
        f"analysis and planning with deep expertise in related technologies."
    )


def _examples(document: Document) -> List[str]:
    domain = _domain(document)
    return [
        f"Complex {domain} architecture design requiring systematic analysis",
        f"{domain} implementation with multiple integration points",
        f"{domain} optimization and performance enhancement planning",
    ]


def _color(document: Document) -> str:
    key = str(document.path) if document.path is not None else document.identifier
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return _COLORS[int(digest, 16) % len(_COLORS)]


def _dump_yaml(data: Dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, width=1000)


def _set_frontmatter_field(text: str, name: str, value: Any) -> str:
    raw, body = split_frontmatter(text)
    if raw is None:
        return text
    loaded = yaml.safe_load(raw) if raw.strip() else {}
    data: Dict[str, Any] = dict(loaded or {})
    data[name] = value
    return f"---\n{_dump_yaml(data)}---\n{body}"


def _heading_pattern(title: str) -> re.Pattern[str]:
    return re.compile(rf"^(#{{2,}})\s+{re.escape(title)}[^\n]*$", re.IGNORECASE | re.MULTILINE)


def _append_block(text: str, block: str) -> str:
    return f"{text.rstrip()}\n\n{block.strip()}\n"


def _insert_after_heading(text: str, title: str, line: str, *, fallback: str | None = None) -> str:
    match = _heading_pattern(title).search(text)
    if match is None:
        header = fallback or f"## {title}"
        return _append_block(text, f"{header}\n{line}")
    return f"{text[:match.end()]}\n{line}{text[match.end():]}"


def _append_to_section(text: str, title: str, line: str) -> str:
    match = _heading_pattern(title).search(text)
    if match is None:
        return _append_block(text, f"## {title}\n{line}")
    # The section ends at the next heading of the same or a higher level.
    level = len(match.group(1))
    following = re.compile(rf"^#{{2,{level}}}\s", re.MULTILINE).search(text, match.end())
    end = following.start() if following else len(text)
    section = text[:end].rstrip()
    rest = text[end:]
    if not rest:
        return f"{section}\n{line}\n"
    return f"{section}\n{line}\n\n{rest}"


__all__ = ["AutoFixer", "Fix", "FixSummary"]
