"""Data-driven scoring policy: weighted checks per sub-score."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Sequence, Tuple

from ..config import AgentMeterConfig, ConfigError
from ..document import Document
from ..models import SUB_SCORES

# Sub-score whose checks read the parsed frontmatter.
FRONTMATTER_SUB_SCORE = "yaml"

DEFAULT_REQUIRED_SECTIONS: Tuple[str, ...] = (
    "Goal",
    "Core Workflow",
    "Output Format",
    "Rules",
    "Core Competencies",
    "Planning Approach",
    "Quality Standards",
)

DEFAULT_WEIGHTS: Dict[str, float] = {
    "yaml": 0.30,
    "sections": 0.25,
    "workflow": 0.25,
    "documentation": 0.20,
}

_HEADING_PATTERN = re.compile(r"^##\s", re.MULTILINE)


@dataclass(frozen=True)
class ScoringInput:
    """Pre-computed views of a document shared by every check."""

    text: str
    body: str
    frontmatter: Mapping[str, Any]
    word_count: int
    section_count: int

    @classmethod
    def from_document(cls, document: Document) -> "ScoringInput":
        return cls(
            text=document.text,
            body=document.body,
            frontmatter=document.frontmatter or {},
            word_count=len(document.text.split()),
            section_count=len(_HEADING_PATTERN.findall(document.body)),
        )


Predicate = Callable[[ScoringInput], bool]


@dataclass(frozen=True)
class Check:
    """A single weighted heuristic; ``issue`` is reported when it fails."""

    label: str
    weight: float
    predicate: Predicate
    issue: str


@dataclass(frozen=True)
class StrengthRule:
    """Reports ``label`` when ``sub_score`` (or ``overall``) reaches ``threshold``."""

    sub_score: str
    threshold: float
    label: str


def has_field(name: str) -> Predicate:
    def _check(data: ScoringInput) -> bool:
        return bool(data.frontmatter.get(name))

    return _check


def examples_at_least(count: int, key: str = "Examples") -> Predicate:
    def _check(data: ScoringInput) -> bool:
        examples = data.frontmatter.get(key)
        return isinstance(examples, list) and len(examples) >= count

    return _check


def has_section(title: str) -> Predicate:
    pattern = re.compile(rf"^#{{2,}}\s+{re.escape(title)}", re.IGNORECASE | re.MULTILINE)

    def _check(data: ScoringInput) -> bool:
        return bool(pattern.search(data.body))

    return _check


def contains_any(*needles: str) -> Predicate:
    def _check(data: ScoringInput) -> bool:
        return any(needle in data.text for needle in needles)

    return _check


def min_words(count: int) -> Predicate:
    def _check(data: ScoringInput) -> bool:
        return data.word_count >= count

    return _check


def min_sections(count: int) -> Predicate:
    def _check(data: ScoringInput) -> bool:
        return data.section_count >= count

    return _check


def _yaml_checks() -> Tuple[Check, ...]:
    return (
        Check("name", 25, has_field("name"), "Missing name field"),
        Check("description", 25, has_field("description"), "Missing description field"),
        Check("model", 20, has_field("model"), "Missing model field"),
        Check("examples", 20, examples_at_least(1), "Missing or invalid Examples array"),
        Check("examples-depth", 10, examples_at_least(3), "Fewer than 3 Examples"),
    )


def _section_checks(sections: Sequence[str]) -> Tuple[Check, ...]:
    weight = 100.0 / len(sections)
    return tuple(
        Check(f"section:{title}", weight, has_section(title), f"Missing section: {title}")
        for title in sections
    )


def _workflow_checks() -> Tuple[Check, ...]:
    return (
        Check(
            "context7",
            30,
            contains_any("Context7 MCP", "mcp__context7"),
            "Missing Context7 MCP integration",
        ),
        Check(
            "sequential",
            25,
            contains_any("Sequential MCP", "mcp__sequential"),
            "Missing Sequential MCP integration",
        ),
        Check("mcp-catalog", 20, contains_any("mcp-catalog"), "Missing mcp-catalog usage"),
        Check(
            "output-path",
            25,
            contains_any(".claude/doc/"),
            "Missing output to .claude/doc/ specification",
        ),
    )


def _documentation_checks() -> Tuple[Check, ...]:
    return (
        Check("words-400", 20, min_words(400), "Documentation under 400 words"),
        Check("words-800", 20, min_words(800), "Documentation under 800 words"),
        Check(
            "proactive-trigger",
            30,
            contains_any("Use this agent PROACTIVELY"),
            "Missing 'Use this agent PROACTIVELY' trigger",
        ),
        Check("section-depth", 30, min_sections(6), "Fewer than 6 body sections"),
    )


DEFAULT_STRENGTHS: Tuple[StrengthRule, ...] = (
    StrengthRule("yaml", 90, "Excellent YAML compliance"),
    StrengthRule("sections", 90, "Complete section coverage"),
    StrengthRule("workflow", 80, "Strong workflow integration"),
    StrengthRule("documentation", 80, "Thorough documentation"),
    StrengthRule("overall", 85, "High overall quality"),
)


@dataclass(frozen=True)
class ScoringPolicy:
    """The check table, combination weights and strength thresholds for scoring."""

    checks: Mapping[str, Tuple[Check, ...]]
    weights: Mapping[str, float]
    strengths: Tuple[StrengthRule, ...] = DEFAULT_STRENGTHS

    def __post_init__(self) -> None:
        unknown = set(self.checks) - set(SUB_SCORES)
        if unknown:
            raise ConfigError(f"Unknown sub-scores in check table: {', '.join(sorted(unknown))}")
        unknown = set(self.weights) - set(SUB_SCORES)
        if unknown:
            raise ConfigError(f"Unknown sub-scores in weights: {', '.join(sorted(unknown))}")
        if any(weight < 0 for weight in self.weights.values()):
            raise ConfigError("Scoring weights must not be negative")
        if sum(self.weights.values()) <= 0:
            raise ConfigError("Scoring weights must sum to a positive value")
        for check_table in self.checks.values():
            if any(check.weight < 0 for check in check_table):
                raise ConfigError("Check weights must not be negative")

    @classmethod
    def default(
        cls,
        *,
        required_sections: Sequence[str] | None = None,
        weights: Mapping[str, float] | None = None,
    ) -> "ScoringPolicy":
        sections = tuple(required_sections or DEFAULT_REQUIRED_SECTIONS)
        if not sections:
            raise ConfigError("At least one required section is needed")
        merged = dict(DEFAULT_WEIGHTS)
        if weights:
            merged.update(weights)
        return cls(
            checks={
                "yaml": _yaml_checks(),
                "sections": _section_checks(sections),
                "workflow": _workflow_checks(),
                "documentation": _documentation_checks(),
            },
            weights=merged,
        )

    @classmethod
    def from_config(cls, config: AgentMeterConfig) -> "ScoringPolicy":
        return cls.default(
            required_sections=config.scoring.required_sections or None,
            weights=config.scoring.weights or None,
        )

    @property
    def required_sections(self) -> Tuple[str, ...]:
        return tuple(
            check.label.split(":", 1)[1]
            for check in self.checks.get("sections", ())
            if check.label.startswith("section:")
        )

    def combine(self, values: Mapping[str, float]) -> float:
        """Weighted average of sub-scores, bounded to [0, 100]."""
        total_weight = sum(self.weights.get(name, 0.0) for name in SUB_SCORES)
        weighted = sum(values.get(name, 0.0) * self.weights.get(name, 0.0) for name in SUB_SCORES)
        return bound_score(weighted / total_weight)


def bound_score(value: float) -> float:
    return round(min(100.0, max(0.0, value)), 2)


__all__ = [
    "Check",
    "bound_score",
    "DEFAULT_REQUIRED_SECTIONS",
    "DEFAULT_STRENGTHS",
    "DEFAULT_WEIGHTS",
    "FRONTMATTER_SUB_SCORE",
    "Predicate",
    "ScoringInput",
    "ScoringPolicy",
    "StrengthRule",
    "contains_any",
    "examples_at_least",
    "has_field",
    "has_section",
    "min_sections",
    "min_words",
]
