"""Exception taxonomy for metric evaluation."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class RepoMetricsError(RuntimeError):
    """Base class for repometrics failures."""


class ContractViolation(RepoMetricsError):
    """Raised when a metric type does not satisfy the metric contract."""

    def __init__(self, metric_type: object, missing: Sequence[str]) -> None:
        self.metric_type = metric_type
        self.missing = list(missing)
        name = getattr(metric_type, "__qualname__", None) or repr(metric_type)
        super().__init__(f"{name} violates the metric contract: {', '.join(self.missing)}")


class RevisionUnavailable(RepoMetricsError):
    """Raised when the current revision of a working copy cannot be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot determine revision for {path}: {reason}")


class ManifestMissing(RepoMetricsError):
    """Raised when a working copy has no manifest file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Manifest not found at {path}")


class ManifestInvalid(RepoMetricsError):
    """Raised when a manifest file exists but cannot be used."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Manifest at {path} is invalid: {reason}")


class MetricEvaluationFailure(RepoMetricsError):
    """Raised when constructing, verifying or executing a metric fails."""

    def __init__(self, metric_name: str, stage: str, cause: BaseException) -> None:
        self.metric_name = metric_name
        self.stage = stage
        self.cause = cause
        super().__init__(f"Metric '{metric_name}' failed during {stage}: {cause}")


class EvaluationError(RepoMetricsError):
    """Raised when a repository could not be evaluated."""

    def __init__(self, repository: str, cause: BaseException) -> None:
        self.repository = repository
        self.cause = cause
        super().__init__(f"Evaluation of '{repository}' failed: {cause}")


__all__ = [
    "ContractViolation",
    "EvaluationError",
    "ManifestInvalid",
    "ManifestMissing",
    "MetricEvaluationFailure",
    "RepoMetricsError",
    "RevisionUnavailable",
]
