"""Pre-commit quality gates for agent/role templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .config import GateConfig
from .document import Document
from .errors import AgentMeterError
from .logging import get_logger
from .models import Score
from .scoring import MISSING_FRONTMATTER_ISSUE, ContentScorer, ScoringPolicy
from .scoring.policy import ScoringInput, has_section

REQUIRED_FIELDS = ("name", "description", "model", "Examples")
RESEARCH_DIRECTIVES = ("NEVER do the actual implementation", "ONLY creates plans")
PROHIBITED_PHRASES = (
    "edit the file",
    "create the file",
    "write the code",
    "run the command",
    "execute directly",
)
SESSION_MARKERS = (".claude/tasks/", "context_session_")
OUTPUT_MARKER = ".claude/doc/"
TIMESTAMP_MARKER = "[timestamp]"


@dataclass(frozen=True)
class GateIssue:
    """A single failing condition for one document."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class GateResult:
    path: str
    score: Optional[Score] = None
    errors: List[GateIssue] = field(default_factory=list)
    warnings: List[GateIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors


class ValidationError(AgentMeterError):
    """Raised when one or more documents fail the quality gates."""

    def __init__(self, message: str, issues: Sequence[GateIssue]) -> None:
        super().__init__(message)
        self.issues = list(issues)


@dataclass
class GateReport:
    results: List[GateResult] = field(default_factory=list)

    @property
    def errors(self) -> List[GateIssue]:
        return [issue for result in self.results for issue in result.errors]

    @property
    def warnings(self) -> List[GateIssue]:
        return [issue for result in self.results for issue in result.warnings]

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.results)

    def raise_for_errors(self) -> None:
        errors = self.errors
        if errors:
            failing = len([result for result in self.results if not result.passed])
            raise ValidationError(
                f"{len(errors)} quality gate error(s) in {failing} document(s)", errors
            )


class QualityGate:
    """Checks one document against structural rules and minimum scores."""

    def __init__(
        self,
        policy: ScoringPolicy | None = None,
        thresholds: GateConfig | None = None,
    ) -> None:
        self.policy = policy or ScoringPolicy.default()
        self.thresholds = thresholds or GateConfig()
        self._scorer = ContentScorer(self.policy)
        self.logger = get_logger("gates")

    def check(self, document: Document) -> GateResult:
        label = str(document.path) if document.path is not None else document.identifier
        result = GateResult(path=label)

        def error(message: str) -> None:
            result.errors.append(GateIssue(label, message))

        def warning(message: str) -> None:
            result.warnings.append(GateIssue(label, message))

        self._check_frontmatter(document, error)
        self._check_sections(document, error)
        self._check_research_only(document, error)
        if not any(marker in document.text for marker in SESSION_MARKERS):
            error("Missing session context integration")
        if OUTPUT_MARKER not in document.text:
            error("Missing output to .claude/doc/ specification")
        if TIMESTAMP_MARKER not in document.text:
            warning("Should include [timestamp] in output filename")

        score = self._scorer.score_document(document)
        result.score = score
        self._check_scores(score, error, warning)

        self.logger.debug(
            "Gate %s: %d error(s), %d warning(s)", label, len(result.errors), len(result.warnings)
        )
        return result

    # ------------------------------------------------------------------
    # Rules

    def _check_frontmatter(self, document: Document, error) -> None:
        if not document.has_frontmatter:
            error(MISSING_FRONTMATTER_ISSUE)
            return
        if document.frontmatter is None:
            error(f"Invalid YAML syntax - {document.frontmatter_error}")
            return
        for name in REQUIRED_FIELDS:
            if not document.frontmatter.get(name):
                error(f"Missing required YAML field: {name}")
        examples = document.frontmatter.get("Examples")
        minimum = self.thresholds.min_examples
        if not isinstance(examples, list) or len(examples) < minimum:
            error(f"Examples must be an array with at least {minimum} entries")

    def _check_sections(self, document: Document, error) -> None:
        data = ScoringInput.from_document(document)
        for title in self.policy.required_sections:
            if not has_section(title)(data):
                error(f"Missing required section: {title}")

    def _check_research_only(self, document: Document, error) -> None:
        if not document.is_orchestrator and not any(
            directive in document.text for directive in RESEARCH_DIRECTIVES
        ):
            error("Missing research-only directive for specialist agent")
        lowered = document.text.lower()
        found = [phrase for phrase in PROHIBITED_PHRASES if phrase in lowered]
        if found:
            error(f"Contains implementation instructions: {', '.join(found)}")

    def _check_scores(self, score: Score, error, warning) -> None:
        limits = self.thresholds
        if score.overall < limits.min_overall:
            error(f"Overall quality score {score.overall:.1f} below minimum {limits.min_overall:g}")
        if score.yaml < limits.min_yaml:
            error(f"YAML compliance {score.yaml:.1f} below minimum {limits.min_yaml:g}")
        if score.sections < limits.min_sections:
            error(f"Section coverage {score.sections:.1f} below minimum {limits.min_sections:g}")
        if score.workflow < limits.min_workflow:
            warning(
                f"Workflow score {score.workflow:.1f} below recommended {limits.min_workflow:g}"
            )


def run_gates(documents: Iterable[Document], gate: QualityGate | None = None) -> GateReport:
    """Run ``gate`` over every document and collect the results."""
    gate = gate or QualityGate()
    return GateReport(results=[gate.check(document) for document in documents])


__all__ = [
    "GateIssue",
    "GateReport",
    "GateResult",
    "QualityGate",
    "ValidationError",
    "run_gates",
]
