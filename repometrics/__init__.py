"""Metric evaluation engine for collections of source repositories."""

from .aggregator import build_report, find_repository_report, registry_grouped_view, report_lookup
from .errors import (
    ContractViolation,
    EvaluationError,
    ManifestInvalid,
    ManifestMissing,
    MetricEvaluationFailure,
    RepoMetricsError,
    RevisionUnavailable,
)
from .metrics import Metric, discover_metrics, ensure_metric_contract
from .models import (
    UNAVAILABLE,
    EvaluationContext,
    MetricDescriptor,
    MetricGroup,
    MetricResult,
    Report,
    RepositoryDescriptor,
)
from .orchestrator import EvaluationTarget, Orchestrator, RunSummary, evaluate
from .registry import MetricRegistry

__all__ = [
    "ContractViolation",
    "EvaluationContext",
    "EvaluationError",
    "EvaluationTarget",
    "ManifestInvalid",
    "ManifestMissing",
    "Metric",
    "MetricDescriptor",
    "MetricEvaluationFailure",
    "MetricGroup",
    "MetricRegistry",
    "MetricResult",
    "Orchestrator",
    "Report",
    "RepoMetricsError",
    "RepositoryDescriptor",
    "RevisionUnavailable",
    "RunSummary",
    "UNAVAILABLE",
    "build_report",
    "discover_metrics",
    "ensure_metric_contract",
    "evaluate",
    "find_repository_report",
    "registry_grouped_view",
    "report_lookup",
]
