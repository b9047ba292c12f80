"""Markdown template documents and their YAML frontmatter."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import StorageError

_FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?", re.DOTALL | re.MULTILINE
)


def content_hash(text: str) -> str:
    """Return the SHA-256 hex digest of the UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def split_frontmatter(text: str) -> Tuple[Optional[str], str]:
    """Split text into the raw frontmatter block (or ``None``) and the body."""
    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end():]


def parse_frontmatter(raw: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Parse a raw frontmatter block.

    Returns ``(mapping, None)`` on success and ``(None, message)`` when the
    block is not valid YAML or does not describe a key-value mapping.
    """
    if not raw.strip():
        return {}, None
    try:
        loaded = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        detail = " ".join(str(exc).split())
        return None, f"YAML parsing error: {detail}"
    if loaded is None:
        return {}, None
    if not isinstance(loaded, dict):
        return None, "YAML parsing error: frontmatter is not a key-value mapping"
    return {str(key): value for key, value in loaded.items()}, None


@dataclass(frozen=True)
class Document:
    """One markdown agent/role template, immutable once read."""

    identifier: str
    text: str
    content_hash: str
    body: str
    frontmatter: Optional[Mapping[str, Any]] = None
    frontmatter_error: Optional[str] = None
    path: Optional[Path] = None

    @classmethod
    def from_text(
        cls, identifier: str, text: str, *, path: Path | None = None
    ) -> "Document":
        raw, body = split_frontmatter(text)
        frontmatter: Optional[Dict[str, Any]] = None
        error: Optional[str] = None
        if raw is not None:
            frontmatter, error = parse_frontmatter(raw)
        return cls(
            identifier=identifier,
            text=text,
            content_hash=content_hash(text),
            body=body,
            frontmatter=frontmatter,
            frontmatter_error=error,
            path=path,
        )

    @property
    def has_frontmatter(self) -> bool:
        return self.frontmatter is not None or self.frontmatter_error is not None

    @property
    def is_orchestrator(self) -> bool:
        if self.path is None:
            return False
        return "orchestrators" in self.path.parts


def load_document(path: Path, *, identifier: str | None = None) -> Document:
    """Read a markdown document from disk."""
    try:
        text = path.read_bytes().decode("utf-8")
    except FileNotFoundError as exc:
        raise StorageError(f"Document not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Cannot read document {path}: {exc}") from exc
    return Document.from_text(identifier or path.stem, text, path=path)


__all__ = [
    "Document",
    "content_hash",
    "load_document",
    "parse_frontmatter",
    "split_frontmatter",
]
