"""Persistent JSON store for the version history."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict
import json
import os
from pathlib import Path
import tempfile
import time
from typing import Any, Dict, Iterator, List, Mapping

from ..document import content_hash
from ..errors import ParseError, StorageError
from ..logging import get_logger
from ..models import (
    Change,
    History,
    Score,
    TrendPoint,
    UsageMetrics,
    UsagePattern,
    VersionRecord,
    utc_timestamp,
)

_HISTORY_VERSION = 1
_LOCK_POLL_SECONDS = 0.05


class HistoryStore:
    """Loads and saves :class:`~agentmeter.models.History` values.

    Writes go to a temporary file that is renamed over the history file, and
    :meth:`transaction` serialises read-modify-write cycles across processes
    with an advisory lock file.
    """

    def __init__(
        self,
        path: Path,
        *,
        lock_timeout: float = 10.0,
        lock_stale_seconds: float = 60.0,
    ) -> None:
        self.path = path
        self.lock_path = path.with_name(path.name + ".lock")
        self.lock_timeout = lock_timeout
        self.lock_stale_seconds = lock_stale_seconds
        self.logger = get_logger("stores.history")

    def load(self) -> History:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return History()
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read history file {self.path}: {exc}") from exc
        if not raw.strip():
            return History()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Malformed history file {self.path}: {exc}") from exc
        return history_from_dict(data)

    def save(self, history: History) -> None:
        payload = json.dumps(history_to_dict(history), indent=2, sort_keys=True) + "\n"
        try:
            _atomic_write_text(self.path, payload)
        except OSError as exc:
            raise StorageError(f"Cannot write history file {self.path}: {exc}") from exc
        self.logger.debug("Saved %d version records to %s", len(history.versions), self.path)

    @contextmanager
    def transaction(self) -> Iterator["HistoryTransaction"]:
        """Hold the history lock while the caller loads, modifies and saves."""
        with self._lock():
            yield HistoryTransaction(self)

    # ------------------------------------------------------------------
    # Internal helpers

    @contextmanager
    def _lock(self) -> Iterator[None]:
        token = f"{os.getpid()}-{time.time_ns()}"
        deadline = time.monotonic() + self.lock_timeout
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create history directory {self.lock_path.parent}: {exc}") from exc

        while True:
            try:
                fd = os.open(self.lock_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
            except FileExistsError:
                if self._lock_is_stale():
                    self._break_stale_lock(token)
                    continue
                if time.monotonic() >= deadline:
                    raise StorageError(
                        f"Timed out waiting for history lock {self.lock_path}"
                    ) from None
                time.sleep(_LOCK_POLL_SECONDS)
                continue
            except OSError as exc:
                raise StorageError(f"Cannot create history lock {self.lock_path}: {exc}") from exc
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({"token": token, "pid": os.getpid(), "created_at": utc_timestamp()}, handle)
            break

        try:
            yield
        finally:
            if self._lock_owner() == token:
                self.lock_path.unlink(missing_ok=True)

    def _lock_owner(self) -> str | None:
        try:
            data = json.loads(self.lock_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None
        return data.get("token") if isinstance(data, dict) else None

    def _lock_is_stale(self, path: Path | None = None) -> bool:
        try:
            age = time.time() - (path or self.lock_path).stat().st_mtime
        except FileNotFoundError:
            return False
        return age > self.lock_stale_seconds

    def _break_stale_lock(self, token: str) -> None:
        """Claim the lock file by renaming it, then drop it only if it is still stale.

        Another writer may have replaced the stale lock with a live one since it
        was inspected; a claimed live lock is linked back into place.
        """
        claimed = self.lock_path.with_name(f"{self.lock_path.name}.{token}")
        try:
            os.rename(self.lock_path, claimed)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"Cannot remove stale history lock {self.lock_path}: {exc}") from exc

        if self._lock_is_stale(claimed):
            self.logger.warning("Removing stale history lock %s", self.lock_path)
        else:
            try:
                os.link(claimed, self.lock_path)
            except FileExistsError:
                self.logger.warning("History lock %s was replaced while being restored", self.lock_path)
            except OSError as exc:
                raise StorageError(f"Cannot restore history lock {self.lock_path}: {exc}") from exc
        claimed.unlink(missing_ok=True)


class HistoryTransaction:
    """Load/save handle returned by :meth:`HistoryStore.transaction`."""

    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    def load(self) -> History:
        return self._store.load()

    def save(self, history: History) -> None:
        self._store.save(history)


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.tmp.", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


# ----------------------------------------------------------------------
# Serialisation


def history_to_dict(history: History) -> Dict[str, Any]:
    return {
        "version": _HISTORY_VERSION,
        "versions": [asdict(record) for record in history.versions],
        "usage": {name: asdict(metrics) for name, metrics in history.usage.items()},
        "trends": [asdict(point) for point in history.trends],
    }


def history_from_dict(data: object) -> History:
    if not isinstance(data, dict):
        raise ParseError("History file must contain a JSON object")
    if data.get("version") != _HISTORY_VERSION:
        raise ParseError(f"Unsupported history version: {data.get('version')!r}")
    versions = data.get("versions", [])
    usage = data.get("usage", {})
    trends = data.get("trends", [])
    if not isinstance(versions, list) or not isinstance(usage, dict) or not isinstance(trends, list):
        raise ParseError("History file has an unexpected layout")
    try:
        return History(
            versions=tuple(_record_from_dict(item) for item in versions),
            usage={str(name): _usage_from_dict(item) for name, item in usage.items()},
            trends=tuple(_trend_from_dict(item) for item in trends),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ParseError(f"Malformed history entry: {exc}") from exc


def _record_from_dict(payload: Mapping[str, Any]) -> VersionRecord:
    record = VersionRecord(
        identifier=str(payload["identifier"]),
        version=str(payload["version"]),
        content_hash=str(payload["content_hash"]),
        timestamp=str(payload["timestamp"]),
        changes=tuple(_change_from_dict(item) for item in payload.get("changes", [])),
        score=score_from_dict(payload["score"]),
        content=str(payload["content"]),
        path=payload.get("path"),
        size=int(payload.get("size", 0)),
    )
    if content_hash(record.content) != record.content_hash:
        raise ParseError(
            f"Content hash mismatch for {record.identifier} version {record.version}"
        )
    return record


def _change_from_dict(payload: Mapping[str, Any]) -> Change:
    return Change(
        kind=str(payload["kind"]),
        count=int(payload.get("count", 0)),
        samples=tuple(str(sample) for sample in payload.get("samples", [])),
        description=payload.get("description"),
    )


def score_from_dict(payload: Mapping[str, Any]) -> Score:
    return Score(
        yaml=float(payload["yaml"]),
        sections=float(payload["sections"]),
        workflow=float(payload["workflow"]),
        documentation=float(payload["documentation"]),
        overall=float(payload["overall"]),
        issues=tuple(str(issue) for issue in payload.get("issues", [])),
        strengths=tuple(str(strength) for strength in payload.get("strengths", [])),
    )


def _usage_from_dict(payload: Mapping[str, Any]) -> UsageMetrics:
    patterns: List[UsagePattern] = [
        UsagePattern(
            pattern=str(item["pattern"]),
            timestamp=str(item["timestamp"]),
            success=bool(item["success"]),
        )
        for item in payload.get("patterns", [])
    ]
    return UsageMetrics(
        invocations=int(payload.get("invocations", 0)),
        successes=int(payload.get("successes", 0)),
        failures=int(payload.get("failures", 0)),
        last_used=payload.get("last_used"),
        patterns=tuple(patterns),
    )


def _trend_from_dict(payload: Mapping[str, Any]) -> TrendPoint:
    return TrendPoint(
        timestamp=str(payload["timestamp"]),
        document_count=int(payload["document_count"]),
        averages={str(key): float(value) for key, value in payload["averages"].items()},
        tiers={str(key): int(value) for key, value in payload["tiers"].items()},
    )


__all__ = ["HistoryStore", "HistoryTransaction", "history_from_dict", "history_to_dict", "score_from_dict"]
