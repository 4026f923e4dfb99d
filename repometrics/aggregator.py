"""Report assembly and query helpers."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from .models import MetricDescriptor, MetricResult, Report, RepositoryDescriptor
from .registry import MetricRegistry


def build_report(repository: RepositoryDescriptor, results: Sequence[MetricResult]) -> Report:
    """Wrap per-metric results, already in metric-type order, into a report."""
    return Report(
        repository=repository.label,
        metrics=list(results),
        installed_git_hash=repository.installed_git_hash,
    )


def report_lookup(
    reports: Iterable[Report], repository: str, metric_name: str
) -> Optional[MetricResult]:
    """Return the last result recorded for ``metric_name`` on ``repository``."""
    found: Optional[MetricResult] = None
    for report in reports:
        if report.repository != repository:
            continue
        for metric in report.metrics:
            if metric.info.name == metric_name:
                found = metric
    return found


def find_repository_report(reports: Iterable[Report], repository: str) -> Optional[Report]:
    found: Optional[Report] = None
    for report in reports:
        if report.repository == repository:
            found = report
    return found


def registry_grouped_view(registry: MetricRegistry) -> Dict[str, List[MetricDescriptor]]:
    return registry.grouped_view()


__all__ = [
    "build_report",
    "find_repository_report",
    "registry_grouped_view",
    "report_lookup",
]
