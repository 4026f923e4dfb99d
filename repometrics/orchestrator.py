"""Metric evaluation pipeline: fan-out per repository, reuse, aggregation."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .aggregator import build_report
from .errors import (
    EvaluationError,
    ManifestInvalid,
    ManifestMissing,
    MetricEvaluationFailure,
    RevisionUnavailable,
)
from .git.revision import GitRevisionOracle
from .logging import get_logger
from .manifest import load_manifest
from .metrics.base import ensure_metric_contract
from .models import (
    UNAVAILABLE,
    EvaluationContext,
    MetricDescriptor,
    MetricResult,
    Report,
    RepositoryDescriptor,
)
from .normalization import normalize_result
from .registry import MetricRegistry
from .stores import PriorReportCache

RevisionOracle = Callable[[Path], Union[str, Awaitable[str]]]
PriorLookup = Callable[[str, str], Optional[MetricResult]]
ManifestLoader = Callable[[Path], Mapping[str, Any]]

shared_registry = MetricRegistry()


@dataclass(frozen=True)
class EvaluationTarget:
    """A repository paired with the working copy to evaluate."""

    repository: RepositoryDescriptor
    working_dir: Path


@dataclass
class RunSummary:
    """Outcome of evaluating several repositories."""

    reports: List[Report] = field(default_factory=list)
    failures: Dict[str, EvaluationError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class Orchestrator:
    """Evaluates registered metric types against repositories.

    The orchestrator owns the shared state of a process: the metric registry and
    the prior report set used to skip metrics whose repository has not moved.
    """

    def __init__(
        self,
        registry: MetricRegistry | None = None,
        revision_oracle: RevisionOracle | None = None,
        prior_reports: PriorReportCache | None = None,
        *,
        prior_lookup: PriorLookup | None = None,
        manifest_loader: ManifestLoader = load_manifest,
        fail_fast: bool = True,
    ) -> None:
        self.registry = registry if registry is not None else MetricRegistry()
        self.revision_oracle = revision_oracle or GitRevisionOracle()
        self.prior_reports = prior_reports if prior_reports is not None else PriorReportCache()
        self._prior_lookup = prior_lookup or self.prior_reports.prior_result
        self.manifest_loader = manifest_loader
        self.fail_fast = fail_fast
        self.logger = get_logger("orchestrator")

    def load_prior_reports(self, reports: Sequence[Report]) -> None:
        """Swap in a new prior report set. Call between runs, never during one."""
        self.prior_reports.replace(reports)

    async def evaluate(
        self,
        repository: RepositoryDescriptor,
        working_dir: Path | str,
        manifest: Mapping[str, Any],
        metric_types: Sequence[type],
    ) -> Report:
        """Evaluate every metric type against one repository and build its report."""
        checked = [ensure_metric_contract(metric_type) for metric_type in metric_types]
        context = EvaluationContext.build(repository, working_dir, manifest)
        self.logger.debug(
            "Evaluating %d metric(s) for '%s' in %s",
            len(checked),
            repository.label,
            context.working_dir,
        )

        try:
            revision = await self._current_revision(context.working_dir)
            results = await self._evaluate_all(context, revision, checked)
        except (RevisionUnavailable, MetricEvaluationFailure) as exc:
            self.logger.error("Evaluation of '%s' aborted: %s", repository.label, exc)
            raise EvaluationError(repository.label, exc) from exc

        return build_report(repository, results)

    async def evaluate_repository(
        self,
        repository: RepositoryDescriptor,
        working_dir: Path | str,
        metric_types: Sequence[type],
    ) -> Report:
        """Load the repository manifest, then evaluate it."""
        path = Path(working_dir)
        try:
            manifest = self.manifest_loader(path)
        except (ManifestMissing, ManifestInvalid) as exc:
            self.logger.error("Cannot read manifest for '%s': %s", repository.label, exc)
            raise EvaluationError(repository.label, exc) from exc
        return await self.evaluate(repository, path, manifest, metric_types)

    async def run(
        self,
        targets: Sequence[EvaluationTarget],
        metric_types: Sequence[type],
        *,
        concurrency: int | None = None,
    ) -> RunSummary:
        """Evaluate several repositories; one failing repository does not stop the rest."""
        checked = [ensure_metric_contract(metric_type) for metric_type in metric_types]
        semaphore = asyncio.Semaphore(concurrency) if concurrency else None

        async def _one(target: EvaluationTarget) -> Report:
            if semaphore is None:
                return await self.evaluate_repository(
                    target.repository, target.working_dir, checked
                )
            async with semaphore:
                return await self.evaluate_repository(
                    target.repository, target.working_dir, checked
                )

        outcomes = await asyncio.gather(
            *(_one(target) for target in targets), return_exceptions=True
        )

        summary = RunSummary()
        for target, outcome in zip(targets, outcomes):
            if isinstance(outcome, EvaluationError):
                self.logger.warning(
                    "Repository '%s' was not evaluated: %s", target.repository.label, outcome.cause
                )
                summary.failures[target.repository.label] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                summary.reports.append(outcome)
        self.logger.info(
            "Evaluated %d repositories (%d failed)",
            len(summary.reports),
            len(summary.failures),
        )
        return summary

    # ------------------------------------------------------------------
    # Internals

    async def _current_revision(self, working_dir: Path) -> str:
        try:
            value = self.revision_oracle(working_dir)
            if inspect.isawaitable(value):
                value = await value
        except RevisionUnavailable:
            raise
        except Exception as exc:
            raise RevisionUnavailable(working_dir, str(exc)) from exc
        revision = str(value).strip()
        if not revision:
            raise RevisionUnavailable(working_dir, "revision oracle returned nothing")
        return revision

    async def _evaluate_all(
        self,
        context: EvaluationContext,
        revision: str,
        metric_types: Sequence[type],
    ) -> List[MetricResult]:
        tasks = [
            asyncio.create_task(
                self._evaluate_metric(context, revision, metric_type),
                name=f"repometrics:{context.repository.label}:{metric_type.__name__}",
            )
            for metric_type in metric_types
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _evaluate_metric(
        self,
        context: EvaluationContext,
        revision: str,
        metric_type: type,
    ) -> MetricResult:
        label = context.repository.label
        try:
            metric = metric_type(context)
            info = metric.describe()
        except Exception as exc:
            fallback = MetricDescriptor(name=metric_type.__name__, group="")
            failure = MetricEvaluationFailure(fallback.name, "construct", exc)
            return self._failed(fallback, revision, failure, label)

        self.registry.register_if_absent(info)

        prior = self._prior_lookup(label, info.name)
        if prior is not None and prior.hash_last_commit == revision:
            if prior.error is None:
                self.logger.info("'%s' for '%s' reused from the last report.", info.name, label)
                return prior
            self.logger.info(
                "'%s' for '%s' failed last time (%s); retrying.", info.name, label, prior.error
            )

        try:
            applicable = await metric.verify()
        except Exception as exc:
            failure = MetricEvaluationFailure(info.name, "verify", exc)
            return self._failed(info, revision, failure, label)

        if not applicable:
            self.logger.info("'%s' metric not available for '%s' repository.", info.name, label)
            return MetricResult(info=info, result=UNAVAILABLE, hash_last_commit=revision)

        self.logger.debug("Running metric %s for '%s'", info.name, label)
        try:
            value = await metric.execute()
        except Exception as exc:
            failure = MetricEvaluationFailure(info.name, "execute", exc)
            return self._failed(info, revision, failure, label)

        return MetricResult(info=info, result=normalize_result(value), hash_last_commit=revision)

    def _failed(
        self,
        info: MetricDescriptor,
        revision: str,
        failure: MetricEvaluationFailure,
        label: str,
    ) -> MetricResult:
        if self.fail_fast:
            raise failure from failure.cause
        self.logger.error("'%s' failed for '%s': %s", info.name, label, failure.cause)
        return MetricResult(
            info=info,
            result=UNAVAILABLE,
            hash_last_commit=revision,
            error=str(failure.cause),
        )


async def evaluate(
    repository: RepositoryDescriptor,
    working_dir: Path | str,
    manifest: Mapping[str, Any],
    metric_types: Sequence[type],
    commit_oracle: RevisionOracle,
    prior_lookup: PriorLookup | None,
    *,
    registry: MetricRegistry | None = None,
    fail_fast: bool = True,
) -> Report:
    """Evaluate one repository with explicitly supplied collaborators.

    Without ``registry`` the descriptors land in the process-wide ``shared_registry``.
    """
    orchestrator = Orchestrator(
        registry if registry is not None else shared_registry,
        commit_oracle,
        prior_lookup=prior_lookup or (lambda _repository, _metric: None),
        fail_fast=fail_fast,
    )
    return await orchestrator.evaluate(repository, working_dir, manifest, metric_types)


__all__ = [
    "EvaluationTarget",
    "Orchestrator",
    "RunSummary",
    "evaluate",
    "shared_registry",
]
