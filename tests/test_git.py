"""Tests for staged-file selection."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from agentmeter.errors import AgentMeterError
from agentmeter.git import StagedFiles
from tests._fixtures.corpus_builder import CorpusBuilder


def test_staged_paths_keep_existing_corpus_documents(corpus_builder: CorpusBuilder) -> None:
    kept = corpus_builder.agent("api-specialist")
    calls: list[list[str]] = []

    def runner(args, *, cwd: Path) -> str:
        calls.append(list(args))
        return "\n".join(
            [
                "Examples/agents/specialists/api-specialist.md",
                "Examples/agents/specialists/deleted-specialist.md",
                "Examples/agents/README.md",
                "src/app.py",
                "",
            ]
        )

    staged = StagedFiles(runner=runner).paths(corpus_builder.path())

    assert staged == [kept]
    assert calls == [["git", "diff", "--cached", "--name-only"]]


def test_git_failure_is_reported(tmp_path: Path) -> None:
    def runner(args, *, cwd: Path) -> str:
        raise subprocess.CalledProcessError(128, list(args))

    with pytest.raises(AgentMeterError, match="Failed to get staged files"):
        StagedFiles(runner=runner).paths(tmp_path)
