"""Tests for documentation link validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentmeter.errors import StorageError
from agentmeter.postproc import DocLinkValidator
from tests._fixtures.corpus_builder import CorpusBuilder


def test_relative_markdown_links_resolve_from_document_directory(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "docs/guide.md": "See [setup](setup.md), [missing](gone.md#top) and [web](https://example.com/x.md).\n",
            "docs/setup.md": "# Setup\n",
        }
    )
    root = corpus_builder.path()

    report = DocLinkValidator(root).validate(root / "docs" / "guide.md")

    assert len(report.errors) == 1
    assert "gone.md#top" in report.errors[0]
    assert not report.ok


def test_path_references_are_warnings(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "README.md": (
                "Agents live in Examples/agents/api.md and Examples/agents/none.md.\n"
                "Plans go to .claude/doc/[agent]-[timestamp].md.\n"
            ),
            "Examples/agents/api.md": "# API\n",
        }
    )
    root = corpus_builder.path()

    report = DocLinkValidator(root).validate(root / "README.md")

    assert report.ok
    assert report.warnings == [
        f"Potentially broken path reference in {root / 'README.md'}: Examples/agents/none.md"
    ]


def test_terminology_inconsistencies_are_warnings(tmp_path: Path) -> None:
    doc = tmp_path / "doc.md"
    doc.write_text("The orchestrator agent follows a research-only flow.\n", encoding="utf-8")

    report = DocLinkValidator(tmp_path).validate(doc)

    assert any('prefer "research-plan-execute"' in warning for warning in report.warnings)
    assert any('Found "orchestrator agent"' in warning for warning in report.warnings)


def test_missing_file_raises_storage_error(tmp_path: Path) -> None:
    with pytest.raises(StorageError, match="File does not exist"):
        DocLinkValidator(tmp_path).validate(tmp_path / "nope.md")
