"""Corpus aggregation and report rendering."""

from .aggregate import (
    TIERS,
    aggregate,
    append_trend,
    rank_documents,
    score_class,
    score_label,
    tier_for,
    trend_point,
)
from .evolution import EvolutionReport, evolution_report
from .render import FORMATS, ReportRenderer, report_to_dict

__all__ = [
    "EvolutionReport",
    "FORMATS",
    "ReportRenderer",
    "TIERS",
    "aggregate",
    "append_trend",
    "evolution_report",
    "rank_documents",
    "report_to_dict",
    "score_class",
    "score_label",
    "tier_for",
    "trend_point",
]
