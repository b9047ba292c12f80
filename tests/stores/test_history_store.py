"""Tests for the JSON history store."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path

import pytest

from agentmeter.document import Document
from agentmeter.errors import ParseError, StorageError
from agentmeter.models import History, TrendPoint
from agentmeter.stores import HistoryStore
from agentmeter.versioning import record_usage, record_version
from tests._fixtures.corpus_builder import COMPLETE_AGENT


def _populated_history() -> History:
    history = record_version(History(), Document.from_text("api", COMPLETE_AGENT), now="2024-01-01T00:00:00.000000Z").history
    history, _ = record_usage(history, "api", success=True, pattern="plan api", now="2024-01-02T00:00:00.000000Z")
    trend = TrendPoint("2024-01-03T00:00:00.000000Z", 1, {"overall": 92.0}, {"optimized": 1})
    return History(versions=history.versions, usage=history.usage, trends=(trend,))


def test_missing_file_loads_empty_history(tmp_path: Path) -> None:
    assert HistoryStore(tmp_path / "history.json").load() == History()


def test_round_trip_preserves_history(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "data" / "history.json")
    history = _populated_history()

    store.save(history)

    assert store.load() == history
    payload = json.loads(store.path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert list(tmp_path.joinpath("data").iterdir()) == [store.path]


def test_malformed_json_raises_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ParseError, match="Malformed history file"):
        HistoryStore(path).load()


def test_unsupported_schema_version_raises_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"version": 99}), encoding="utf-8")

    with pytest.raises(ParseError, match="Unsupported history version"):
        HistoryStore(path).load()


def test_tampered_content_fails_hash_check(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json")
    store.save(_populated_history())
    payload = json.loads(store.path.read_text(encoding="utf-8"))
    payload["versions"][0]["content"] += "tampered"
    store.path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ParseError, match="Content hash mismatch"):
        store.load()


def test_transaction_releases_lock(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json")

    with store.transaction() as transaction:
        assert store.lock_path.exists()
        transaction.save(_populated_history())

    assert not store.lock_path.exists()
    assert len(store.load().versions) == 1


def test_held_lock_times_out(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json", lock_timeout=0.1)
    store.lock_path.write_text(json.dumps({"token": "other"}), encoding="utf-8")

    with pytest.raises(StorageError, match="Timed out"):
        with store.transaction():
            pass

    assert store.lock_path.exists()


def test_stale_lock_is_replaced(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json", lock_timeout=0.5, lock_stale_seconds=1.0)
    store.lock_path.write_text(json.dumps({"token": "crashed"}), encoding="utf-8")
    old = time.time() - 120
    os.utime(store.lock_path, (old, old))

    with store.transaction() as transaction:
        transaction.save(History())

    assert not store.lock_path.exists()


def test_stale_lock_takeover_does_not_break_a_fresh_lock(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "history.json"
    first = HistoryStore(path, lock_timeout=0.5, lock_stale_seconds=1.0)
    second = HistoryStore(path, lock_timeout=0.3, lock_stale_seconds=1.0)
    first.lock_path.write_text(json.dumps({"token": "crashed"}), encoding="utf-8")
    old = time.time() - 120
    os.utime(first.lock_path, (old, old))

    first_transaction = first.transaction()
    real_is_stale = second._lock_is_stale
    inspected: list[bool] = []

    def stale_then_raced(lock: Path | None = None) -> bool:
        stale = real_is_stale(lock)
        if lock is None and not inspected:
            inspected.append(stale)
            # The other writer clears the same stale lock and takes a fresh one.
            first_transaction.__enter__()
        return stale

    monkeypatch.setattr(second, "_lock_is_stale", stale_then_raced)

    try:
        with pytest.raises(StorageError, match="Timed out"):
            with second.transaction():
                pass
        assert inspected == [True]
        assert first.lock_path.exists()
        owner = json.loads(first.lock_path.read_text(encoding="utf-8"))["token"]
        assert owner != "crashed"
    finally:
        first_transaction.__exit__(None, None, None)

    assert not first.lock_path.exists()
    assert list(tmp_path.iterdir()) == []
