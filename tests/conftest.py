from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from repometrics.models import RepositoryDescriptor


@pytest.fixture(autouse=True)
def _reset_repometrics_logger():
    """Undo CLI logging configuration so caplog keeps seeing records."""
    yield
    logger = logging.getLogger("repometrics")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def repository() -> RepositoryDescriptor:
    """Descriptor for the repository used across engine tests."""
    return RepositoryDescriptor(
        label="R1",
        git_repo_url="https://example.com/r1.git",
        target_branch="main",
        installed_git_hash="inst-001",
    )


@pytest.fixture
def working_copy(tmp_path: Path) -> Path:
    """A working copy with a package.json manifest."""
    root = tmp_path / "r1"
    root.mkdir()
    (root / "package.json").write_text(
        json.dumps({"name": "r1", "dependencies": {"x": "1.0"}}),
        encoding="utf-8",
    )
    return root
