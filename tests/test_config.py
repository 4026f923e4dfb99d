"""Tests for repometrics.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from repometrics.config import (
    ConfigError,
    EvaluationConfig,
    RepoMetricsConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, RepoMetricsConfig)
    assert config.root == tmp_path.resolve()
    assert config.repositories == []
    assert config.metrics.plugins == []
    assert config.metrics.enabled == []
    assert config.reporter.output_file is None
    assert config.evaluation == EvaluationConfig()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".repometrics.yml"
    config_file.write_text(
        """
repositories:
  - label: Kit
    path: checkouts/kit
    git_repo_url: "https://github.com/feedzai/kit.git"
    target_branch: main
    installed_git_hash: 9b1c2d3
  - label: Self
    is_local: true
metrics:
  plugins:
    - "tests._fixtures.metrics:HasLintConfig"
  enabled: [HasLintConfig]
reporter:
  output_file: "reports/last.json"
evaluation:
  fail_fast: false
  concurrency: 4
  manifest_file: "manifest.json"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    kit, local = config.repositories
    assert kit.label == "Kit"
    assert kit.path == (tmp_path / "checkouts" / "kit").resolve()
    assert kit.git_repo_url == "https://github.com/feedzai/kit.git"
    assert kit.target_branch == "main"
    assert kit.installed_git_hash == "9b1c2d3"
    assert kit.is_local is False
    assert local.is_local is True
    assert local.path == tmp_path.resolve()

    descriptor = kit.descriptor()
    assert descriptor.label == "Kit"
    assert descriptor.installed_git_hash == "9b1c2d3"

    assert config.metrics.plugins == ["tests._fixtures.metrics:HasLintConfig"]
    assert config.metrics.enabled == ["HasLintConfig"]
    assert config.reporter.output_file == tmp_path.resolve() / "reports" / "last.json"
    assert config.evaluation.fail_fast is False
    assert config.evaluation.concurrency == 4
    assert config.evaluation.manifest_file == "manifest.json"


def test_load_config_ignores_non_positive_concurrency(tmp_path: Path) -> None:
    (tmp_path / ".repometrics.yml").write_text(
        "evaluation:\n  concurrency: 0\n", encoding="utf-8"
    )

    config = load_config(tmp_path)

    assert config.evaluation.concurrency is None
    assert config.evaluation.fail_fast is True


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".repometrics.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).repositories == []


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- just\n- a list\n", "mapping at the root"),
        ("repositories:\n  - plain-string\n", r"repositories\[0\] must be a mapping"),
        ("repositories:\n  - path: somewhere\n", r"repositories\[0\] requires a label"),
        ("repositories: [unclosed\n", "Failed to parse"),
    ],
)
def test_load_config_rejects_malformed_files(tmp_path: Path, content: str, message: str) -> None:
    (tmp_path / ".repometrics.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)
