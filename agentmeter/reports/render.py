"""JSON, Markdown and HTML renderings of an aggregate report."""

from __future__ import annotations

from dataclasses import asdict
import json
from pathlib import Path
from typing import Any, Dict, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..models import SUB_SCORES, AggregateReport, TrendPoint
from .aggregate import TIERS, rank_documents, score_class, score_label

SUB_SCORE_TITLES: Dict[str, str] = {
    "yaml": "YAML Compliance",
    "sections": "Section Coverage",
    "workflow": "Workflow Integration",
    "documentation": "Documentation",
    "overall": "Overall",
}

TIER_TITLES: Dict[str, str] = {
    "emerging": "Emerging (<60)",
    "developing": "Developing (60-69)",
    "stable": "Stable (70-79)",
    "mature": "Mature (80-89)",
    "optimized": "Optimized (90+)",
}

FORMATS = ("json", "markdown", "html")


def report_to_dict(report: AggregateReport) -> Dict[str, Any]:
    payload = asdict(report)
    payload["document_count"] = report.document_count
    return payload


class ReportRenderer:
    """Renders an :class:`AggregateReport` without adding any business logic."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(enabled_extensions=("html",), default=False),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["score_class"] = score_class
        self._env.filters["score_label"] = score_label
        self._env.filters["md_cell"] = _markdown_cell

    def render(
        self, report: AggregateReport, fmt: str, *, trends: Sequence[TrendPoint] = ()
    ) -> str:
        if fmt == "json":
            return self.render_json(report)
        if fmt == "markdown":
            return self.render_markdown(report)
        if fmt == "html":
            return self.render_html(report, trends=trends)
        raise ValueError(f"Unsupported report format: {fmt}")

    def render_json(self, report: AggregateReport) -> str:
        return json.dumps(report_to_dict(report), indent=2, sort_keys=True) + "\n"

    def render_markdown(self, report: AggregateReport) -> str:
        template = self._env.get_template("report.md")
        return template.render(**self._context(report))

    def render_html(self, report: AggregateReport, *, trends: Sequence[TrendPoint] = ()) -> str:
        template = self._env.get_template("dashboard.html")
        context = self._context(report)
        context["trends"] = list(trends)
        context["trend"] = _trend_summary(trends)
        context["chart"] = _chart_data(trends)
        return template.render(**context)

    @staticmethod
    def _context(report: AggregateReport) -> Dict[str, Any]:
        return {
            "report": report,
            "documents": rank_documents(report),
            "sub_scores": SUB_SCORES,
            "titles": SUB_SCORE_TITLES,
            "tiers": [(name, TIER_TITLES[name], report.tiers.get(name, 0)) for name, _, _ in TIERS],
        }


def _markdown_cell(value: object) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def _trend_summary(trends: Sequence[TrendPoint]) -> Dict[str, str]:
    if len(trends) < 2:
        return {"indicator": "", "css": "trend-stable"}
    diff = trends[-1].averages.get("overall", 0.0) - trends[-2].averages.get("overall", 0.0)
    if diff > 1:
        return {"indicator": "up", "css": "trend-up"}
    if diff < -1:
        return {"indicator": "down", "css": "trend-down"}
    return {"indicator": "stable", "css": "trend-stable"}


def _chart_data(trends: Sequence[TrendPoint]) -> Dict[str, Any]:
    return {
        "labels": [point.timestamp[:10] for point in trends],
        "datasets": [
            {
                "label": SUB_SCORE_TITLES[name],
                "data": [point.averages.get(name, 0.0) for point in trends],
            }
            for name in ("overall",) + SUB_SCORES
        ],
    }


__all__ = ["FORMATS", "ReportRenderer", "report_to_dict"]
