"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from repometrics.orchestrator import Orchestrator
from repometrics.service import create_app
from tests._fixtures.metrics import DependencyCount, HasLintConfig


class _StubOracle:
    def __init__(self, revision: str = "rev-1") -> None:
        self.revision = revision
        self.calls: list[Path] = []

    def __call__(self, path: Path) -> str:
        self.calls.append(path)
        return self.revision


@pytest.fixture
def oracle() -> _StubOracle:
    return _StubOracle()


@pytest.fixture
def client(oracle: _StubOracle) -> TestClient:
    app = create_app(
        lambda: Orchestrator(revision_oracle=oracle),
        metric_types=[HasLintConfig, DependencyCount],
    )
    return TestClient(app)


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_evaluate_endpoint(client: TestClient, working_copy: Path, oracle: _StubOracle) -> None:
    response = client.post(
        "/evaluate",
        json={"label": "R1", "path": str(working_copy), "installed_git_hash": "inst-001"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["repository"] == "R1"
    assert data["installedGitHash"] == "inst-001"
    assert [metric["info"]["name"] for metric in data["metrics"]] == [
        "HasLintConfig",
        "DependencyCount",
    ]
    assert data["metrics"][0]["result"] == {"result": "false"}
    assert data["metrics"][1]["result"] == {"count": 1}
    assert {metric["hashLastCommit"] for metric in data["metrics"]} == {"rev-1"}
    assert oracle.calls == [working_copy]


def test_groups_accumulate_across_requests(client: TestClient, working_copy: Path) -> None:
    assert client.get("/groups").json() == {}

    client.post("/evaluate", json={"label": "R1", "path": str(working_copy)})
    client.post("/evaluate", json={"label": "R2", "path": str(working_copy)})

    groups = client.get("/groups").json()
    assert [item["name"] for item in groups["Has"]] == ["HasLintConfig"]
    assert [item["name"] for item in groups["Versions"]] == ["DependencyCount"]


def test_evaluate_without_manifest_is_unprocessable(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/evaluate", json={"label": "Empty", "path": str(tmp_path)})

    assert response.status_code == 422
    body = response.json()
    assert body["repository"] == "Empty"
    assert "Manifest not found" in body["detail"]
