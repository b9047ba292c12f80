"""Tests for the quality gates."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentmeter.config import GateConfig
from agentmeter.document import Document, load_document
from agentmeter.gates import QualityGate, ValidationError, run_gates
from tests._fixtures.corpus_builder import COMPLETE_AGENT, MINIMAL_AGENT, CorpusBuilder


def _messages(issues) -> list[str]:
    return [issue.message for issue in issues]


def test_complete_agent_passes_all_gates(corpus_builder: CorpusBuilder) -> None:
    path = corpus_builder.agent("api-specialist")

    result = QualityGate().check(load_document(path))

    assert result.passed, _messages(result.errors)
    assert result.warnings == []
    assert result.score is not None and result.score.overall >= 70


def test_minimal_agent_reports_every_failing_rule() -> None:
    result = QualityGate().check(Document.from_text("weak", MINIMAL_AGENT))
    messages = _messages(result.errors)

    assert "Missing required YAML field: model" in messages
    assert "Missing required YAML field: Examples" in messages
    assert "Examples must be an array with at least 2 entries" in messages
    assert "Missing required section: Rules" in messages
    assert "Missing research-only directive for specialist agent" in messages
    assert "Missing session context integration" in messages
    assert "Missing output to .claude/doc/ specification" in messages
    assert any(message.startswith("Overall quality score") for message in messages)
    assert "Should include [timestamp] in output filename" in _messages(result.warnings)
    assert any(message.startswith("Workflow score") for message in _messages(result.warnings))


def test_missing_frontmatter_is_reported() -> None:
    result = QualityGate().check(Document.from_text("bare", "## Goal\n"))

    assert "Missing YAML frontmatter" in _messages(result.errors)


def test_prohibited_phrases_are_errors() -> None:
    text = COMPLETE_AGENT + "\nThen Edit the file and run the command.\n"

    result = QualityGate().check(Document.from_text("doer", text))

    assert "Contains implementation instructions: edit the file, run the command" in _messages(result.errors)


def test_orchestrators_do_not_need_research_directive(corpus_builder: CorpusBuilder) -> None:
    text = COMPLETE_AGENT.replace("This agent ONLY creates plans. NEVER do the actual implementation.", "")
    specialist = load_document(corpus_builder.agent("api-specialist", text))
    orchestrator = load_document(corpus_builder.agent("lead-orchestrator", text, kind="orchestrators"))

    assert "Missing research-only directive for specialist agent" in _messages(QualityGate().check(specialist).errors)
    assert QualityGate().check(orchestrator).passed


def test_thresholds_are_configurable() -> None:
    gate = QualityGate(thresholds=GateConfig(min_overall=95))

    result = gate.check(Document.from_text("api", COMPLETE_AGENT))

    assert _messages(result.errors) == ["Overall quality score 92.0 below minimum 95"]


def test_run_gates_raises_with_all_issues(tmp_path: Path) -> None:
    documents = [Document.from_text("good", COMPLETE_AGENT), Document.from_text("weak", MINIMAL_AGENT)]

    report = run_gates(documents)

    assert not report.passed
    with pytest.raises(ValidationError) as excinfo:
        report.raise_for_errors()
    assert excinfo.value.issues == report.errors
    assert {issue.path for issue in excinfo.value.issues} == {"weak"}
    assert "in 1 document(s)" in str(excinfo.value)
