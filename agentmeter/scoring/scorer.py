"""Maps document text to a deterministic, explainable quality score."""

from __future__ import annotations

from typing import Dict, Iterable, List

from ..document import Document
from ..logging import get_logger
from ..models import SUB_SCORES, Score
from .policy import FRONTMATTER_SUB_SCORE, Check, ScoringInput, ScoringPolicy, bound_score

MISSING_FRONTMATTER_ISSUE = "Missing YAML frontmatter"


class ContentScorer:
    """Evaluates the policy's check table against a document.

    Scoring is a pure function of the document text: the same text always
    yields an identical :class:`~agentmeter.models.Score`.
    """

    def __init__(self, policy: ScoringPolicy | None = None) -> None:
        self.policy = policy or ScoringPolicy.default()
        self.logger = get_logger("scoring")

    def score(self, text: str, *, identifier: str = "document") -> Score:
        return self.score_document(Document.from_text(identifier, text))

    def score_document(self, document: Document) -> Score:
        data = ScoringInput.from_document(document)
        issues: List[str] = []
        values: Dict[str, float] = {}

        for name in SUB_SCORES:
            checks = self.policy.checks.get(name, ())
            if name == FRONTMATTER_SUB_SCORE and document.frontmatter is None:
                # Unparsable or absent frontmatter zeroes this sub-score only.
                issues.append(document.frontmatter_error or MISSING_FRONTMATTER_ISSUE)
                values[name] = 0.0
                continue
            values[name] = self._evaluate(checks, data, issues)

        overall = self.policy.combine(values)
        measured = dict(values, overall=overall)
        strengths = [
            rule.label
            for rule in self.policy.strengths
            if measured.get(rule.sub_score, 0.0) >= rule.threshold
        ]
        self.logger.debug(
            "Scored %s: overall=%.2f issues=%d", document.identifier, overall, len(issues)
        )
        return Score(
            yaml=values["yaml"],
            sections=values["sections"],
            workflow=values["workflow"],
            documentation=values["documentation"],
            overall=overall,
            issues=tuple(issues),
            strengths=tuple(strengths),
        )

    @staticmethod
    def _evaluate(checks: Iterable[Check], data: ScoringInput, issues: List[str]) -> float:
        total = 0.0
        for check in checks:
            if check.predicate(data):
                total += check.weight
            else:
                issues.append(check.issue)
        return bound_score(total)


__all__ = ["ContentScorer", "MISSING_FRONTMATTER_ISSUE"]
