"""Tests for the content scorer."""

from __future__ import annotations

import pytest

from agentmeter.scoring import MISSING_FRONTMATTER_ISSUE, ContentScorer, ScoringPolicy
from tests._fixtures.corpus_builder import COMPLETE_AGENT, MINIMAL_AGENT


def test_empty_document_scores_zero_with_missing_frontmatter_issue() -> None:
    score = ContentScorer().score("")

    assert score.yaml == 0
    assert score.sections == 0
    assert score.workflow == 0
    assert score.documentation == 0
    assert score.overall == 0
    assert MISSING_FRONTMATTER_ISSUE in score.issues
    assert score.strengths == ()


def test_partial_frontmatter_scenario() -> None:
    score = ContentScorer().score(MINIMAL_AGENT)

    assert score.yaml == 50
    assert score.sections == pytest.approx(100 / 7, abs=0.01)
    assert "Missing model field" in score.issues
    assert "Missing or invalid Examples array" in score.issues
    assert "Missing name field" not in score.issues
    assert "Missing section: Goal" not in score.issues
    assert "Missing section: Rules" in score.issues
    assert score.overall == pytest.approx(0.30 * 50 + 0.25 * 100 / 7, abs=0.01)


def test_complete_agent_scores_high_with_strengths() -> None:
    score = ContentScorer().score(COMPLETE_AGENT)

    assert score.yaml == 100
    assert score.sections == 100
    assert score.workflow == 100
    # Short fixture: the two word-count checks fail.
    assert score.documentation == 60
    assert score.overall == pytest.approx(92.0)
    assert "Excellent YAML compliance" in score.strengths
    assert "Complete section coverage" in score.strengths
    assert "High overall quality" in score.strengths
    assert "Thorough documentation" not in score.strengths
    assert "Documentation under 400 words" in score.issues


def test_scores_are_bounded_and_deterministic() -> None:
    scorer = ContentScorer()
    texts = ["", MINIMAL_AGENT, COMPLETE_AGENT, COMPLETE_AGENT * 40, "## Goal\n" * 500]

    for text in texts:
        first = scorer.score(text)
        assert first == scorer.score(text)
        for value in (first.yaml, first.sections, first.workflow, first.documentation, first.overall):
            assert 0 <= value <= 100


def test_malformed_yaml_only_zeroes_yaml_sub_score() -> None:
    text = COMPLETE_AGENT.replace("model: sonnet", "model: [sonnet")
    score = ContentScorer().score(text)

    assert score.yaml == 0
    assert any(issue.startswith("YAML parsing error") for issue in score.issues)
    assert score.sections == 100
    assert score.workflow == 100


def test_long_documentation_earns_word_count_credit() -> None:
    padding = "\n".join(["word " * 100] * 9)
    score = ContentScorer().score(COMPLETE_AGENT + padding)

    assert score.documentation == 100
    assert "Thorough documentation" in score.strengths


def test_custom_required_sections_change_section_weights() -> None:
    policy = ScoringPolicy.default(required_sections=["Goal", "Rules"])
    score = ContentScorer(policy).score(MINIMAL_AGENT)

    assert score.sections == 50
    assert score.issues.count("Missing section: Rules") == 1
