"""Coordinates scoring, tracking, reporting and gating over a project corpus."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import CONFIG_FILENAME, AgentMeterConfig, load_config
from .corpus import CorpusScanner
from .document import Document, load_document
from .errors import AgentMeterError, StorageError
from .gates import GateReport, QualityGate, run_gates
from .git import StagedFiles
from .logging import get_logger
from .models import AggregateReport, ScoredDocument, TrendPoint, UsageMetrics
from .postproc import AutoFixer, DocLinkValidator, FixSummary, LinkReport
from .reports import (
    EvolutionReport,
    ReportRenderer,
    aggregate,
    append_trend,
    evolution_report,
    trend_point,
)
from .scoring import ContentScorer, ScoringPolicy
from .stores import HistoryStore
from .versioning import RecordOutcome, learn_patterns, record_usage, record_version


REPORT_FILENAMES: Dict[str, str] = {
    "json": "quality-metrics.json",
    "markdown": "quality-report.md",
    "html": "quality-dashboard.html",
}


@dataclass
class ReportOutcome:
    """A rendered report and where it was written, if anywhere."""

    report: AggregateReport
    content: str
    path: Optional[Path]


@dataclass
class LearnOutcome:
    patterns: Dict[str, List[Tuple[str, int]]]
    path: Path


class Orchestrator:
    """Entry point shared by the CLI and the HTTP service."""

    def __init__(
        self,
        root: Path | str = ".",
        *,
        config: AgentMeterConfig | None = None,
        renderer: ReportRenderer | None = None,
        staged_files: StagedFiles | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.config = config or load_config(self.root / CONFIG_FILENAME)
        self.policy = ScoringPolicy.from_config(self.config)
        self.scorer = ContentScorer(self.policy)
        self.scanner = CorpusScanner.from_config(self.config.corpus)
        self.store = HistoryStore(
            self.config.history.path, lock_timeout=self.config.history.lock_timeout
        )
        self.renderer = renderer or ReportRenderer()
        self.staged_files = staged_files or StagedFiles()
        self.logger = get_logger("orchestrator")

    # ------------------------------------------------------------------
    # Discovery

    def discover(self, paths: Sequence[Path] | None = None) -> List[Path]:
        """Resolve explicit paths (files or directories) or scan the configured corpus."""
        if not paths:
            return self.scanner.scan(self.root)
        found: List[Path] = []
        for path in paths:
            if path.is_dir():
                found.extend(
                    candidate
                    for candidate in sorted(path.rglob("*.md"))
                    if not any(
                        candidate.match(pattern) for pattern in self.scanner.exclude
                    )
                )
            else:
                found.append(path)
        return found

    def load(self, paths: Iterable[Path]) -> List[Document]:
        return [load_document(path, identifier=path.stem) for path in paths]

    # ------------------------------------------------------------------
    # Scoring and reports

    def score_paths(self, paths: Sequence[Path] | None = None) -> List[ScoredDocument]:
        documents = self.load(self.discover(paths))
        scored = [
            ScoredDocument(
                identifier=document.identifier,
                score=self.scorer.score_document(document),
                path=self._relative(document.path),
            )
            for document in documents
        ]
        self.logger.info("Scored %d document(s)", len(scored))
        return scored

    def build_report(
        self,
        paths: Sequence[Path] | None = None,
        *,
        record_trend: bool = False,
    ) -> Tuple[AggregateReport, Tuple[TrendPoint, ...]]:
        """Aggregate the corpus and return the report with the stored trend points."""
        report = aggregate(
            self.score_paths(paths),
            top_issues=self.config.reports.top_issues,
            top_strengths=self.config.reports.top_strengths,
        )
        if not record_trend:
            return report, self.store.load().trends
        with self.store.transaction() as transaction:
            history = append_trend(
                transaction.load(), trend_point(report), limit=self.config.history.trend_limit
            )
            transaction.save(history)
        self.logger.info("Recorded trend point (%d kept)", len(history.trends))
        return report, history.trends

    def render_report(
        self,
        fmt: str,
        *,
        paths: Sequence[Path] | None = None,
        output: Path | None = None,
        save: bool = False,
        record_trend: bool = False,
    ) -> ReportOutcome:
        """Render a report; ``save`` without ``output`` writes into the reports directory."""
        report, trends = self.build_report(paths, record_trend=record_trend)
        content = self.renderer.render(report, fmt, trends=trends)
        if output is None and save:
            output = self.config.reports.output_dir / REPORT_FILENAMES[fmt]
        if output is not None:
            try:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(content, encoding="utf-8")
            except OSError as exc:
                raise StorageError(f"Cannot write report {output}: {exc}") from exc
            self.logger.info("Report written to %s", output)
        return ReportOutcome(report=report, content=content, path=output)

    # ------------------------------------------------------------------
    # History

    def track(self, paths: Sequence[Path] | None = None) -> List[RecordOutcome]:
        documents = self.load(self.discover(paths))
        _check_unique_identifiers(documents)
        outcomes: List[RecordOutcome] = []
        with self.store.transaction() as transaction:
            history = transaction.load()
            original = history
            for document in documents:
                outcome = record_version(
                    history,
                    document,
                    scorer=self.scorer,
                    minor_threshold=self.config.versioning.minor_threshold,
                )
                history = outcome.history
                outcomes.append(outcome)
            if history is not original:
                transaction.save(history)
        return outcomes

    def record_usage(
        self, identifier: str, *, success: bool, pattern: str | None = None
    ) -> UsageMetrics:
        with self.store.transaction() as transaction:
            history, metrics = record_usage(
                transaction.load(), identifier, success=success, pattern=pattern
            )
            transaction.save(history)
        self.logger.info(
            "Recorded %s use of %s", "successful" if success else "failed", identifier
        )
        return metrics

    def learn(self, *, top_n: int = 10) -> LearnOutcome:
        patterns = learn_patterns(self.store.load(), top_n=top_n)
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.config.data_dir / "patterns" / f"learned_{stamp}.json"
        payload = {
            name: [{"word": word, "count": count} for word, count in ranked]
            for name, ranked in patterns.items()
        }
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot write learned patterns {target}: {exc}") from exc
        self.logger.info("Learned patterns saved to %s", target)
        return LearnOutcome(patterns=patterns, path=target)

    def history_report(self) -> EvolutionReport:
        return evolution_report(self.store.load())

    # ------------------------------------------------------------------
    # Gates and maintenance

    def run_gates(self, paths: Sequence[Path] | None = None, *, staged: bool = False) -> GateReport:
        if staged:
            selected = self.staged_files.paths(self.root, self.scanner)
        else:
            selected = self.discover(paths)
        gate = QualityGate(self.policy, self.config.gates)
        report = run_gates(self.load(selected), gate)
        self.logger.info(
            "Quality gates: %d document(s), %d error(s), %d warning(s)",
            len(report.results),
            len(report.errors),
            len(report.warnings),
        )
        return report

    def fix(
        self,
        paths: Sequence[Path] | None = None,
        *,
        dry_run: bool = False,
        backup: bool = True,
    ) -> FixSummary:
        backup_dir: Optional[Path] = None
        if backup and not dry_run:
            stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
            backup_dir = self.config.data_dir / "backups" / f"auto-fix-{stamp}"
        fixer = AutoFixer(
            self.config.autofix,
            required_sections=self.policy.required_sections,
            root=self.root,
        )
        summary = fixer.fix_paths(self.discover(paths), dry_run=dry_run, backup_dir=backup_dir)
        self.logger.info(
            "Auto-fix: %d fixed, %d skipped, %d failed",
            summary.fixed,
            summary.skipped,
            summary.failed,
        )
        return summary

    def validate_docs(self, paths: Sequence[Path]) -> List[LinkReport]:
        validator = DocLinkValidator(self.root)
        return [validator.validate(path) for path in paths]

    def _relative(self, path: Path | None) -> Optional[str]:
        if path is None:
            return None
        try:
            return path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return str(path)


def _check_unique_identifiers(documents: Sequence[Document]) -> None:
    """Refuse to mix two files into one version log."""
    seen: Dict[str, Path] = {}
    for document in documents:
        if document.path is None:
            continue
        path = document.path.resolve()
        other = seen.setdefault(document.identifier, path)
        if other != path:
            raise AgentMeterError(
                f"Duplicate document identifier '{document.identifier}': {other} and {path}; "
                "rename one of them before tracking"
            )


__all__ = ["LearnOutcome", "Orchestrator", "REPORT_FILENAMES", "ReportOutcome"]
