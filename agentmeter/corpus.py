"""Discovery of agent/role template files under a project root."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import DEFAULT_EXCLUDE, DEFAULT_INCLUDE, CorpusConfig
from .logging import get_logger

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".agentmeter",
}


def _matches(rel_path: str, pattern: str) -> bool:
    if fnmatchcase(rel_path, pattern):
        return True
    # "a/**/b" also matches "a/b".
    return "**/" in pattern and fnmatchcase(rel_path, pattern.replace("**/", ""))


class CorpusScanner:
    """Walks a project root and returns the markdown documents to analyse."""

    def __init__(
        self,
        include: Sequence[str] = DEFAULT_INCLUDE,
        exclude: Sequence[str] = DEFAULT_EXCLUDE,
    ) -> None:
        self.include = tuple(include)
        self.exclude = tuple(exclude)
        self.logger = get_logger("corpus")

    @classmethod
    def from_config(cls, config: CorpusConfig) -> "CorpusScanner":
        return cls(include=config.include, exclude=config.exclude)

    def scan(self, root: Path) -> List[Path]:
        """Return matching files sorted by relative path."""
        root_path = root.expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        found = sorted(self._iter_matches(root_path), key=lambda path: path.relative_to(root_path).as_posix())
        self.logger.debug("Found %d document(s) under %s", len(found), root_path)
        return found

    def accepts(self, rel_path: str) -> bool:
        """Whether a root-relative POSIX path belongs to the corpus."""
        name = rel_path.rsplit("/", 1)[-1]
        if any(fnmatchcase(name, pattern) or _matches(rel_path, pattern) for pattern in self.exclude):
            return False
        return any(_matches(rel_path, pattern) for pattern in self.include)

    def _iter_matches(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
            dirnames[:] = [name for name in dirnames if name not in _EXCLUDED_DIRS]
            for filename in filenames:
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if self.accepts(rel_path):
                    yield current_dir / filename


__all__ = ["CorpusScanner"]
