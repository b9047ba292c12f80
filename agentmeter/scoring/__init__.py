"""Weighted-heuristic scoring of agent/role templates."""

from .policy import (
    DEFAULT_REQUIRED_SECTIONS,
    Check,
    ScoringInput,
    ScoringPolicy,
    StrengthRule,
)
from .scorer import MISSING_FRONTMATTER_ISSUE, ContentScorer

__all__ = [
    "Check",
    "ContentScorer",
    "DEFAULT_REQUIRED_SECTIONS",
    "MISSING_FRONTMATTER_ISSUE",
    "ScoringInput",
    "ScoringPolicy",
    "StrengthRule",
]
