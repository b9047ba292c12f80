"""Staged-file inspection for the pre-commit gate."""

from __future__ import annotations

from pathlib import Path
import subprocess
from typing import Callable, Iterable, List

from .corpus import CorpusScanner
from .errors import AgentMeterError
from .logging import get_logger


class StagedFiles:
    """Lists corpus documents staged in the Git index."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("git")

    def paths(self, root: Path, scanner: CorpusScanner | None = None) -> List[Path]:
        scanner = scanner or CorpusScanner()
        try:
            output = self._runner(["git", "diff", "--cached", "--name-only"], cwd=root)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise AgentMeterError(f"Failed to get staged files: {exc}") from exc

        staged: List[Path] = []
        for line in output.splitlines():
            rel_path = line.strip().replace("\\", "/")
            if not rel_path or not scanner.accepts(rel_path):
                continue
            candidate = root / rel_path
            # Deleted files stay in the diff but have nothing left to check.
            if candidate.is_file():
                staged.append(candidate)
        self.logger.debug("%d staged document(s)", len(staged))
        return staged

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["StagedFiles"]
