"""Configuration loading for repometrics (.repometrics.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .manifest import DEFAULT_MANIFEST
from .models import RepositoryDescriptor

CONFIG_FILENAME = ".repometrics.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class RepositoryConfig:
    """A repository entry and the working copy it is evaluated from."""

    label: str
    path: Path
    git_repo_url: Optional[str] = None
    target_branch: Optional[str] = None
    installed_git_hash: Optional[str] = None
    is_local: bool = False

    def descriptor(self) -> RepositoryDescriptor:
        return RepositoryDescriptor(
            label=self.label,
            git_repo_url=self.git_repo_url,
            target_branch=self.target_branch,
            installed_git_hash=self.installed_git_hash,
            is_local=self.is_local,
        )


@dataclass
class MetricsConfig:
    """Metric plugin import paths and an optional name filter."""

    plugins: List[str] = field(default_factory=list)
    enabled: List[str] = field(default_factory=list)


@dataclass
class ReporterConfig:
    """Where the JSON report set is read from and written to."""

    output_file: Optional[Path] = None


@dataclass
class EvaluationConfig:
    """Evaluation behaviour switches."""

    fail_fast: bool = True
    concurrency: Optional[int] = None
    manifest_file: str = DEFAULT_MANIFEST


@dataclass
class RepoMetricsConfig:
    """Represents the settings defined in .repometrics.yml."""

    root: Path
    repositories: List[RepositoryConfig] = field(default_factory=list)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    reporter: ReporterConfig = field(default_factory=ReporterConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)


def load_config(config_path: Path) -> RepoMetricsConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RepoMetricsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    repositories = [
        _parse_repository(entry, root, index)
        for index, entry in enumerate(_as_list(data.get("repositories")))
    ]

    metrics_data = _as_dict(data.get("metrics"))
    metrics = MetricsConfig(
        plugins=_as_str_list(metrics_data.get("plugins")),
        enabled=_as_str_list(metrics_data.get("enabled")),
    )

    reporter_data = _as_dict(data.get("reporter"))
    output_file = _as_str(reporter_data.get("output_file"))
    reporter = ReporterConfig(output_file=root / output_file if output_file else None)

    evaluation_data = _as_dict(data.get("evaluation"))
    evaluation = EvaluationConfig()
    if evaluation_data:
        fail_fast = _as_bool(evaluation_data.get("fail_fast"))
        if fail_fast is not None:
            evaluation.fail_fast = fail_fast
        concurrency = _as_int(evaluation_data.get("concurrency"))
        if concurrency is not None and concurrency > 0:
            evaluation.concurrency = concurrency
        evaluation.manifest_file = (
            _as_str(evaluation_data.get("manifest_file")) or DEFAULT_MANIFEST
        )

    return RepoMetricsConfig(
        root=root,
        repositories=repositories,
        metrics=metrics,
        reporter=reporter,
        evaluation=evaluation,
    )


def _parse_repository(entry: Any, root: Path, index: int) -> RepositoryConfig:
    if not isinstance(entry, dict):
        raise ConfigError(f"repositories[{index}] must be a mapping")
    label = _as_str(entry.get("label"))
    if not label:
        raise ConfigError(f"repositories[{index}] requires a label")
    is_local = _as_bool(entry.get("is_local")) or False
    path_str = _as_str(entry.get("path"))
    if is_local or not path_str:
        path = root
    else:
        path = (root / path_str).resolve()
    return RepositoryConfig(
        label=label,
        path=path,
        git_repo_url=_as_str(entry.get("git_repo_url")),
        target_branch=_as_str(entry.get("target_branch")),
        installed_git_hash=_as_str(entry.get("installed_git_hash")),
        is_local=is_local,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
