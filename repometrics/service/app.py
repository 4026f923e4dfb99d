"""FastAPI application entrypoint for repometrics service mode."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import EvaluationError
from ..models import RepositoryDescriptor
from ..orchestrator import Orchestrator


class EvaluateRequest(BaseModel):
    label: str
    path: str
    git_repo_url: Optional[str] = None
    target_branch: Optional[str] = None
    installed_git_hash: Optional[str] = None


class MetricResultModel(BaseModel):
    info: Dict[str, Any]
    result: Any
    hashLastCommit: str
    error: Optional[str] = None


class ReportResponse(BaseModel):
    repository: str
    metrics: List[MetricResultModel]
    installedGitHash: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
    metric_types: Sequence[type] = (),
) -> FastAPI:
    """Create the FastAPI application exposing metric evaluation."""

    app = FastAPI(title="repometrics Service", version="1.0.0")
    # One orchestrator per app so the registry accumulates across requests.
    orchestrator = orchestrator_factory()
    app.state.orchestrator = orchestrator
    app.state.metric_types = list(metric_types)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/groups")
    async def groups() -> Dict[str, List[Dict[str, Any]]]:
        return {
            group: [descriptor.to_dict() for descriptor in descriptors]
            for group, descriptors in orchestrator.registry.grouped_view().items()
        }

    @app.post("/evaluate", response_model=ReportResponse)
    async def evaluate_repo(payload: EvaluateRequest) -> ReportResponse:
        repository = RepositoryDescriptor(
            label=payload.label,
            git_repo_url=payload.git_repo_url,
            target_branch=payload.target_branch,
            installed_git_hash=payload.installed_git_hash,
        )
        report = await orchestrator.evaluate_repository(
            repository, Path(payload.path), app.state.metric_types
        )
        return ReportResponse(**report.to_dict())

    @app.exception_handler(EvaluationError)
    async def evaluation_error_handler(_: Request, exc: EvaluationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"repository": exc.repository, "detail": str(exc.cause)},
        )

    return app


def run_service(
    host: str = "0.0.0.0",
    port: int = 8000,
    metric_types: Sequence[type] = (),
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(orchestrator_factory, metric_types)
    uvicorn.run(app, host=host, port=port)
