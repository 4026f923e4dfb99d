"""Tests for the git revision oracle."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from repometrics.errors import RevisionUnavailable
from repometrics.git import GitRevisionOracle


def test_current_revision_strips_output(tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append((list(args), Path(cwd)))
        return "3f2a9c1d\n"

    oracle = GitRevisionOracle(runner=runner)

    assert oracle.current_revision(tmp_path) == "3f2a9c1d"
    assert calls == [(["git", "rev-parse", "HEAD"], tmp_path)]


@pytest.mark.asyncio
async def test_oracle_is_awaitable(tmp_path: Path) -> None:
    oracle = GitRevisionOracle(runner=lambda args, cwd, capture_output=False: "abc123\n")

    assert await oracle(tmp_path) == "abc123"


def test_missing_directory_is_unavailable(tmp_path: Path) -> None:
    oracle = GitRevisionOracle(runner=lambda args, cwd, capture_output=False: "never")

    with pytest.raises(RevisionUnavailable, match="does not exist"):
        oracle.current_revision(tmp_path / "absent")


def test_git_failure_is_unavailable(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise subprocess.CalledProcessError(
            128, list(args), stderr="fatal: not a git repository\n"
        )

    oracle = GitRevisionOracle(runner=runner)

    with pytest.raises(RevisionUnavailable) as excinfo:
        oracle.current_revision(tmp_path)

    assert excinfo.value.reason == "fatal: not a git repository"
    assert excinfo.value.path == tmp_path


def test_missing_git_executable_is_unavailable(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise FileNotFoundError("git")

    oracle = GitRevisionOracle(runner=runner)

    with pytest.raises(RevisionUnavailable, match="git executable not found"):
        oracle.current_revision(tmp_path)


def test_empty_revision_is_unavailable(tmp_path: Path) -> None:
    oracle = GitRevisionOracle(runner=lambda args, cwd, capture_output=False: "\n")

    with pytest.raises(RevisionUnavailable, match="empty revision"):
        oracle.current_revision(tmp_path)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/feedzai/kit.git\n", "Kit"),
        ("git@github.com:feedzai/genome-ui.git", "Genome-ui"),
        ("https://example.com/team/tools/", "Tools"),
    ],
)
def test_repository_name_from_origin(tmp_path: Path, url: str, expected: str) -> None:
    oracle = GitRevisionOracle(runner=lambda args, cwd, capture_output=False: url)

    assert oracle.repository_name(tmp_path) == expected
