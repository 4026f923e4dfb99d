"""Core data models shared across repometrics components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

UNAVAILABLE = "-"


class MetricGroup:
    """Group labels used by the bundled metric conventions."""

    RANDOM = "Random"
    VERSIONS = "Versions"
    COMMANDS = "Commands"
    HAS = "Has"


@dataclass(frozen=True)
class RepositoryDescriptor:
    """A source repository under evaluation."""

    label: str
    git_repo_url: Optional[str] = None
    target_branch: Optional[str] = None
    installed_git_hash: Optional[str] = None
    is_local: bool = False


@dataclass(frozen=True)
class EvaluationContext:
    """Inputs every metric receives for one repository."""

    repository: RepositoryDescriptor
    working_dir: Path
    manifest: Mapping[str, Any]
    dependencies: Mapping[str, Any]

    @classmethod
    def build(
        cls,
        repository: RepositoryDescriptor,
        working_dir: Path | str,
        manifest: Mapping[str, Any],
    ) -> "EvaluationContext":
        frozen = freeze(manifest)
        return cls(
            repository=repository,
            working_dir=Path(working_dir),
            manifest=frozen,
            dependencies=MappingProxyType(merge_dependencies(frozen)),
        )


def freeze(value: Any) -> Any:
    """Return a read-only copy of a JSON-like value: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def merge_dependencies(manifest: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge development then runtime dependencies; runtime entries win.

    Version specifiers are kept exactly as the manifest states them.
    """
    merged: Dict[str, Any] = {}
    for key in ("devDependencies", "dependencies"):
        section = manifest.get(key)
        if isinstance(section, Mapping):
            merged.update(section)
    return merged


@dataclass(frozen=True)
class MetricDescriptor:
    """Static identity of a metric type."""

    name: str
    group: str
    description: str = ""
    schema: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "group": self.group,
            "description": self.description,
        }
        if self.schema is not None:
            data["schema"] = dict(self.schema)
        return data

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MetricDescriptor":
        schema = payload.get("schema")
        return cls(
            name=str(payload.get("name", "")),
            group=str(payload.get("group", "")),
            description=str(payload.get("description", "") or ""),
            schema=schema if isinstance(schema, Mapping) else None,
        )


@dataclass
class MetricResult:
    """Outcome of evaluating one metric against one repository."""

    info: MetricDescriptor
    result: Any
    hash_last_commit: str
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.result != UNAVAILABLE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "info": self.info.to_dict(),
            "result": self.result,
            "hashLastCommit": self.hash_last_commit,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MetricResult":
        info = payload.get("info")
        error = payload.get("error")
        return cls(
            info=MetricDescriptor.from_dict(info if isinstance(info, Mapping) else {}),
            result=payload.get("result", UNAVAILABLE),
            hash_last_commit=str(payload.get("hashLastCommit", "")),
            error=str(error) if error is not None else None,
        )


@dataclass
class Report:
    """Full evaluation output for one repository."""

    repository: str
    metrics: List[MetricResult] = field(default_factory=list)
    installed_git_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repository": self.repository,
            "metrics": [metric.to_dict() for metric in self.metrics],
            "installedGitHash": self.installed_git_hash,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Report":
        metrics = payload.get("metrics")
        installed = payload.get("installedGitHash")
        return cls(
            repository=str(payload.get("repository", "")),
            metrics=[
                MetricResult.from_dict(item)
                for item in (metrics if isinstance(metrics, list) else [])
                if isinstance(item, Mapping)
            ],
            installed_git_hash=str(installed) if installed is not None else None,
        )


__all__ = [
    "EvaluationContext",
    "MetricDescriptor",
    "MetricGroup",
    "MetricResult",
    "Report",
    "RepositoryDescriptor",
    "UNAVAILABLE",
    "freeze",
    "merge_dependencies",
]
