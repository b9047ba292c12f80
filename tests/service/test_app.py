from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from agentmeter.orchestrator import Orchestrator
from agentmeter.service import create_app
from tests._fixtures.corpus_builder import COMPLETE_AGENT, CorpusBuilder


def _client(corpus_builder: CorpusBuilder) -> TestClient:
    return TestClient(create_app(corpus_builder.path()))


def test_health_endpoint(corpus_builder: CorpusBuilder) -> None:
    response = _client(corpus_builder).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_report_endpoint_returns_aggregate(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.agent("api-specialist")

    response = _client(corpus_builder).get("/api/report")

    assert response.status_code == 200
    payload = response.json()
    assert payload["document_count"] == 1
    assert payload["entries"][0]["identifier"] == "api-specialist"
    assert payload["averages"]["overall"] == pytest.approx(92.0)


def test_history_endpoint_reflects_tracked_versions(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.agent("api-specialist")
    Orchestrator(corpus_builder.path()).track()

    response = _client(corpus_builder).get("/api/history")

    assert response.status_code == 200
    assert response.json()["documents"]["api-specialist"]["current_version"] == "1.0.0"


def test_score_endpoint(corpus_builder: CorpusBuilder) -> None:
    response = _client(corpus_builder).post(
        "/api/score", json={"text": COMPLETE_AGENT, "identifier": "api"}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["identifier"] == "api"
    assert payload["yaml"] == 100.0
    assert payload["overall"] == pytest.approx(92.0)


def test_score_endpoint_scores_off_the_event_loop(
    corpus_builder: CorpusBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    orchestrator = Orchestrator(corpus_builder.path())
    real_score = orchestrator.scorer.score
    threads: list[str] = []

    def score(text: str, *, identifier: str = "document"):
        try:
            asyncio.get_running_loop()
            threads.append("event-loop")
        except RuntimeError:
            threads.append("worker")
        return real_score(text, identifier=identifier)

    monkeypatch.setattr(orchestrator.scorer, "score", score)
    client = TestClient(
        create_app(corpus_builder.path(), orchestrator_factory=lambda: orchestrator)
    )

    response = client.post("/api/score", json={"text": COMPLETE_AGENT})

    assert response.status_code == 200
    assert threads == ["worker"]


def test_dashboard_renders_html(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.agent("api-specialist")

    response = _client(corpus_builder).get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Agent Quality Dashboard" in response.text


def test_missing_project_returns_404(tmp_path: Path) -> None:
    client = TestClient(create_app(tmp_path / "missing"))

    response = client.get("/api/report")

    assert response.status_code == 404
