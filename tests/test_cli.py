"""Tests for the agentmeter command line."""

from __future__ import annotations

import json

import pytest

from agentmeter import cli
from tests._fixtures.corpus_builder import MINIMAL_AGENT, CorpusBuilder


def _run(corpus_builder: CorpusBuilder, *args: str) -> None:
    cli.main(["--root", str(corpus_builder.path()), *args])


def test_parser_accepts_subcommand_verbose_flag() -> None:
    parser = cli._build_parser()

    args = parser.parse_args(["report", "--format", "html", "-v"])

    assert args.command == "report"
    assert args.format == "html"
    assert args.verbose is True


def test_parser_rejects_unknown_format() -> None:
    with pytest.raises(SystemExit):
        cli._build_parser().parse_args(["report", "--format", "pdf"])


def test_score_json_output(corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    corpus_builder.agent("api-specialist")

    _run(corpus_builder, "score", "--json")

    payload = json.loads(capsys.readouterr().out)
    assert [entry["identifier"] for entry in payload] == ["api-specialist"]
    assert payload[0]["score"]["overall"] == pytest.approx(92.0)


def test_track_prints_versions(corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    corpus_builder.agent("api-specialist")

    _run(corpus_builder, "track")
    _run(corpus_builder, "track")

    lines = capsys.readouterr().out.splitlines()
    assert lines == ["api-specialist: 1.0.0 (tracked)", "api-specialist: 1.0.0 (unchanged)"]


def test_report_markdown_to_stdout(corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    corpus_builder.agent("api-specialist")

    _run(corpus_builder, "report")

    out = capsys.readouterr().out
    assert out.startswith("# Agent Quality Report")
    assert "api-specialist" in out


def test_report_html_to_file(corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    corpus_builder.agent("api-specialist")
    output = corpus_builder.path() / "report.html"

    _run(corpus_builder, "report", "--format", "html", "--output", str(output), "--record-trend")

    assert "Report written to" in capsys.readouterr().out
    html = output.read_text(encoding="utf-8")
    assert "Agent Quality Dashboard" in html
    assert "chart.js" in html


def test_report_save_uses_reports_directory(
    corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    corpus_builder.agent("api-specialist")

    _run(corpus_builder, "report", "--format", "json", "--save")

    saved = corpus_builder.path() / ".agentmeter" / "reports" / "quality-metrics.json"
    assert "Report written to" in capsys.readouterr().out
    assert json.loads(saved.read_text(encoding="utf-8"))["document_count"] == 1


def test_log_file_records_debug_detail(
    corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    corpus_builder.agent("api-specialist")
    log_file = corpus_builder.path() / "logs" / "agentmeter.log"

    cli.main(["--root", str(corpus_builder.path()), "--log-file", str(log_file), "track"])

    logged = log_file.read_text(encoding="utf-8")
    assert "INFO agentmeter.versioning: Tracked api-specialist version 1.0.0" in logged
    assert "DEBUG agentmeter.corpus: Found 1 document(s)" in logged
    assert "DEBUG" not in capsys.readouterr().err


def test_usage_and_history(corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    corpus_builder.agent("api-specialist")
    _run(corpus_builder, "track")
    _run(corpus_builder, "usage", "api-specialist", "success", "plan the api")
    capsys.readouterr()

    _run(corpus_builder, "history", "--json")

    payload = json.loads(capsys.readouterr().out)
    assert payload["total_documents"] == 1
    assert payload["documents"]["api-specialist"]["usage"]["invocations"] == 1


def test_gate_passes_for_complete_corpus(
    corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    corpus_builder.agent("api-specialist")

    _run(corpus_builder, "gate")

    assert "All quality gates passed for 1 document(s)." in capsys.readouterr().out


def test_gate_failure_exits_with_code_one(
    corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    corpus_builder.agent("weak-specialist", MINIMAL_AGENT)

    with pytest.raises(SystemExit) as excinfo:
        _run(corpus_builder, "gate")

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "Missing required section: Rules" in err
    assert "quality gate error(s)" in err


def test_fix_dry_run_lists_fixes(corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    weak = corpus_builder.agent("weak-specialist", MINIMAL_AGENT)

    _run(corpus_builder, "fix", "--dry-run")

    out = capsys.readouterr().out
    assert "Fixed: 0, skipped: 0, failed: 0 (dry-run)" in out
    assert weak.read_text(encoding="utf-8") == MINIMAL_AGENT


def test_validate_docs_failure_exits(
    corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    (guide,) = corpus_builder.write({"docs/guide.md": "See [missing](missing.md).\n"})

    with pytest.raises(SystemExit) as excinfo:
        _run(corpus_builder, "validate-docs", str(guide))

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "error: Broken link" in captured.out
    assert "agentmeter validate-docs failed" in captured.err


def test_config_error_exits(corpus_builder: CorpusBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    (corpus_builder.path() / ".agentmeter.yml").write_text("- nope\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        _run(corpus_builder, "score")

    assert excinfo.value.code == 1
    assert "agentmeter score failed" in capsys.readouterr().err
