"""CLI entrypoints for agentmeter commands."""

from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import sys
from pathlib import Path
from typing import List, Sequence

from .config import ConfigError
from .errors import AgentMeterError
from .gates import ValidationError
from .logging import configure_logging
from .models import SUB_SCORES, ScoredDocument
from .orchestrator import Orchestrator
from .reports import FORMATS, score_label


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_paths_argument(parser: argparse.ArgumentParser, *, help_text: str) -> None:
    parser.add_argument("paths", nargs="*", type=Path, help=help_text)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentmeter",
        description="Score, version and report on markdown agent/role templates.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--root",
        type=Path,
        default=Path("."),
        help="Project root holding .agentmeter.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    score_parser = subparsers.add_parser("score", help="Print quality scores for documents.")
    _add_verbose_option(score_parser, suppress_default=True)
    _add_paths_argument(score_parser, help_text="Documents or directories (defaults to the corpus).")
    score_parser.add_argument("--json", action="store_true", help="Emit scores as JSON.")

    track_parser = subparsers.add_parser("track", help="Record new document versions in the history.")
    _add_verbose_option(track_parser, suppress_default=True)
    _add_paths_argument(track_parser, help_text="Documents or directories (defaults to the corpus).")

    report_parser = subparsers.add_parser("report", help="Render an aggregate quality report.")
    _add_verbose_option(report_parser, suppress_default=True)
    _add_paths_argument(report_parser, help_text="Documents or directories (defaults to the corpus).")
    report_parser.add_argument("--format", choices=FORMATS, default="markdown", help="Output format.")
    report_parser.add_argument("--output", type=Path, help="Write the report to this file.")
    report_parser.add_argument(
        "--save",
        action="store_true",
        help="Write the report into the configured reports directory (ignored with --output).",
    )
    report_parser.add_argument(
        "--record-trend",
        action="store_true",
        help="Append this report's averages to the stored trend history.",
    )

    history_parser = subparsers.add_parser("history", help="Summarise recorded versions and usage.")
    _add_verbose_option(history_parser, suppress_default=True)
    history_parser.add_argument("--json", action="store_true", help="Emit the summary as JSON.")

    usage_parser = subparsers.add_parser("usage", help="Record one invocation of a document.")
    _add_verbose_option(usage_parser, suppress_default=True)
    usage_parser.add_argument("name", help="Document identifier (file name without .md).")
    usage_parser.add_argument("outcome", choices=("success", "failure"))
    usage_parser.add_argument("pattern", nargs="?", help="Request text that triggered the document.")

    learn_parser = subparsers.add_parser("learn", help="Rank words from successful usage patterns.")
    _add_verbose_option(learn_parser, suppress_default=True)
    learn_parser.add_argument("--top", type=int, default=10, help="Words kept per document.")

    gate_parser = subparsers.add_parser("gate", help="Run quality gates; exits 1 on errors.")
    _add_verbose_option(gate_parser, suppress_default=True)
    _add_paths_argument(gate_parser, help_text="Documents or directories (defaults to the corpus).")
    gate_parser.add_argument(
        "--staged", action="store_true", help="Only check documents staged in Git."
    )

    fix_parser = subparsers.add_parser("fix", help="Apply standard structural fixes.")
    _add_verbose_option(fix_parser, suppress_default=True)
    _add_paths_argument(fix_parser, help_text="Documents or directories (defaults to the corpus).")
    fix_parser.add_argument("--dry-run", action="store_true", help="List fixes without writing.")
    fix_parser.add_argument("--no-backup", action="store_true", help="Skip backing up originals.")

    docs_parser = subparsers.add_parser(
        "validate-docs", help="Check links and path references in documentation."
    )
    _add_verbose_option(docs_parser, suppress_default=True)
    docs_parser.add_argument("paths", nargs="+", type=Path, help="Markdown files to check.")

    serve_parser = subparsers.add_parser("serve", help="Serve the dashboard and score API.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for agentmeter commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
        if args.command == "serve":
            from .service import run_service

            run_service(host=args.host, port=args.port, root=args.root)
            return
        orchestrator = Orchestrator(args.root)
        _dispatch(orchestrator, args)
    except ValidationError as exc:
        for issue in exc.issues:
            print(f"  - {issue}", file=sys.stderr)
        parser.exit(1, f"{exc}\n")
    except (AgentMeterError, ConfigError, FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"agentmeter {args.command} failed: {exc}\n")
    except Exception as exc:  # pragma: no cover
        parser.exit(
            1, f"agentmeter {args.command} failed: {exc}\nRun with --verbose for more details.\n"
        )


def _dispatch(orchestrator: Orchestrator, args: argparse.Namespace) -> None:
    if args.command == "score":
        scored = orchestrator.score_paths(args.paths)
        if args.json:
            print(json.dumps([asdict(entry) for entry in scored], indent=2))
        else:
            _print_scores(scored)
    elif args.command == "track":
        for outcome in orchestrator.track(args.paths):
            print(f"{outcome.record.identifier}: {outcome.version} ({outcome.status})")
    elif args.command == "report":
        result = orchestrator.render_report(
            args.format,
            paths=args.paths,
            output=args.output,
            save=args.save,
            record_trend=args.record_trend,
        )
        if result.path is None:
            sys.stdout.write(result.content)
        else:
            print(f"Report written to {_relativize(result.path)}")
    elif args.command == "history":
        report = orchestrator.history_report()
        if args.json:
            print(json.dumps(asdict(report), indent=2))
        else:
            print(f"Documents: {report.total_documents}")
            print(f"Versions: {report.total_versions}")
            print(f"Average quality: {report.average_quality:.1f}")
            print(f"Last update: {report.last_update or 'never'}")
            for summary in report.documents.values():
                usage = summary.usage
                print(
                    f"  {summary.identifier} {summary.current_version} "
                    f"quality={summary.quality.overall:.1f} versions={summary.version_count} "
                    f"uses={usage.invocations} failures={usage.failures}"
                )
            for item in report.recommendations:
                print(f"  ! {item.identifier}: {item.issue} - {item.suggestion}")
    elif args.command == "usage":
        metrics = orchestrator.record_usage(
            args.name, success=args.outcome == "success", pattern=args.pattern
        )
        print(
            f"{args.name}: {metrics.invocations} invocation(s), "
            f"{metrics.successes} success(es), {metrics.failures} failure(s)"
        )
    elif args.command == "learn":
        outcome = orchestrator.learn(top_n=args.top)
        for name, ranked in outcome.patterns.items():
            words = ", ".join(f"{word} ({count})" for word, count in ranked) or "(no successful patterns)"
            print(f"{name}: {words}")
        print(f"Patterns saved to {_relativize(outcome.path)}")
    elif args.command == "gate":
        report = orchestrator.run_gates(args.paths, staged=args.staged)
        if not report.results:
            print("No documents to check.")
            return
        for issue in report.warnings:
            print(f"warning: {issue}")
        report.raise_for_errors()
        print(f"All quality gates passed for {len(report.results)} document(s).")
    elif args.command == "fix":
        summary = orchestrator.fix(args.paths, dry_run=args.dry_run, backup=not args.no_backup)
        for path, fixes in summary.planned.items():
            for fix in fixes:
                print(f"{_relativize(Path(path))}: {fix.description}")
        suffix = " (dry-run)" if args.dry_run else ""
        print(
            f"Fixed: {summary.fixed}, skipped: {summary.skipped}, failed: {summary.failed}{suffix}"
        )
        if summary.failed:
            raise AgentMeterError(f"{summary.failed} document(s) could not be fixed")
    elif args.command == "validate-docs":
        reports = orchestrator.validate_docs(args.paths)
        errors = [message for report in reports for message in report.errors]
        for report in reports:
            for message in report.warnings:
                print(f"warning: {message}")
        for message in errors:
            print(f"error: {message}")
        print(f"Files checked: {len(reports)}, errors: {len(errors)}")
        if errors:
            raise AgentMeterError(f"{len(errors)} documentation error(s)")
    else:  # pragma: no cover - argparse enforces choices
        raise AgentMeterError("Unknown command")


def _print_scores(scored: Sequence[ScoredDocument]) -> None:
    header: List[str] = ["document", *SUB_SCORES, "overall", "status"]
    print("  ".join(header))
    for entry in scored:
        values = [f"{entry.score.value(name):.1f}" for name in (*SUB_SCORES, "overall")]
        print("  ".join([entry.identifier, *values, score_label(entry.score.overall)]))
        for issue in entry.score.issues:
            print(f"    - {issue}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
