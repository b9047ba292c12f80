"""FastAPI application serving the quality dashboard and score API."""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from ..config import ConfigError
from ..errors import AgentMeterError
from ..models import AggregateReport, TrendPoint
from ..orchestrator import Orchestrator
from ..reports import report_to_dict

_T = TypeVar("_T")


class ScoreRequest(BaseModel):
    text: str
    identifier: str = "document"


class ScoreResponse(BaseModel):
    identifier: str
    yaml: float
    sections: float
    workflow: float
    documentation: float
    overall: float
    issues: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


async def _in_executor(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    project_root: Path | str = ".",
    orchestrator_factory: Callable[[], Orchestrator] | None = None,
) -> FastAPI:
    """Create the FastAPI application for ``project_root``."""

    root = Path(project_root)
    factory = orchestrator_factory or (lambda: Orchestrator(root))
    app = FastAPI(title="agentmeter", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Per request, so configuration edits are picked up without a restart.
        return factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/api/report")
    async def report(orchestrator: Orchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
        built, _ = await _in_executor(orchestrator.build_report)
        return report_to_dict(built)

    @app.get("/api/history")
    async def history(orchestrator: Orchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
        evolution = await _in_executor(orchestrator.history_report)
        return asdict(evolution)

    @app.post("/api/score", response_model=ScoreResponse)
    async def score(
        payload: ScoreRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ScoreResponse:
        result = await _in_executor(
            lambda: orchestrator.scorer.score(payload.text, identifier=payload.identifier)
        )
        return ScoreResponse(
            identifier=payload.identifier,
            yaml=result.yaml,
            sections=result.sections,
            workflow=result.workflow,
            documentation=result.documentation,
            overall=result.overall,
            issues=list(result.issues),
            strengths=list(result.strengths),
        )

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(orchestrator: Orchestrator = Depends(get_orchestrator)) -> HTMLResponse:
        built: Tuple[AggregateReport, Tuple[TrendPoint, ...]] = await _in_executor(
            orchestrator.build_report
        )
        report_value, trends = built
        return HTMLResponse(orchestrator.renderer.render_html(report_value, trends=trends))

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(AgentMeterError)
    async def agentmeter_error_handler(_: Any, exc: AgentMeterError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, root: Path | str = "."
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(root), host=host, port=port)


__all__ = ["create_app", "run_service"]
