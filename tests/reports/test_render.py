"""Tests for report rendering."""

from __future__ import annotations

import json

import pytest

from agentmeter.models import Score, ScoredDocument, TrendPoint
from agentmeter.reports import ReportRenderer, aggregate


def _report():
    entries = [
        ScoredDocument(
            identifier="api-specialist",
            score=Score(90, 100, 80, 60, 85.5, issues=("Missing mcp-catalog usage",), strengths=("High overall quality",)),
            path="Examples/agents/specialists/api-specialist.md",
        ),
        ScoredDocument(
            identifier="<script>",
            score=Score(0, 0, 0, 0, 0, issues=("Missing YAML frontmatter",)),
        ),
    ]
    return aggregate(entries, now="2024-01-01T00:00:00.000000Z")


def test_render_json_round_trips_report_fields() -> None:
    payload = json.loads(ReportRenderer().render(_report(), "json"))

    assert payload["document_count"] == 2
    assert payload["generated_at"] == "2024-01-01T00:00:00.000000Z"
    assert payload["averages"]["overall"] == pytest.approx(42.75)
    assert payload["top_issues"][0]["count"] == 1


def test_render_markdown_lists_documents_best_first() -> None:
    markdown = ReportRenderer().render(_report(), "markdown")

    assert markdown.startswith("# Agent Quality Report")
    assert "| YAML Compliance | 45.0 |" in markdown
    assert markdown.index("api-specialist") < markdown.index("<script>")
    assert "- Missing YAML frontmatter (1 documents)" in markdown
    assert "| Mature (80-89) | 1 |" in markdown


def test_render_html_escapes_identifiers_and_skips_chart_without_trends() -> None:
    html = ReportRenderer().render(_report(), "html")

    assert "<title>Agent Quality Dashboard</title>" in html
    assert "&lt;script&gt;" in html
    assert "<td title=\"&lt;script&gt;\">" in html
    assert "chart.js" not in html


def test_render_html_embeds_trend_chart() -> None:
    trends = [
        TrendPoint("2024-01-01T00:00:00Z", 2, {"overall": 40.0}, {}),
        TrendPoint("2024-01-02T00:00:00Z", 2, {"overall": 60.0}, {}),
    ]

    html = ReportRenderer().render(_report(), "html", trends=trends)

    assert "cdn.jsdelivr.net/npm/chart.js" in html
    assert "trend-up" in html
    assert "2024-01-02" in html


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported report format"):
        ReportRenderer().render(_report(), "pdf")
