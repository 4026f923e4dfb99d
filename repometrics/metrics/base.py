"""Base classes for metric plugins."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Mapping, Optional

from ..errors import ContractViolation
from ..models import EvaluationContext, MetricDescriptor, RepositoryDescriptor

_REQUIRED_CAPABILITIES = ("describe", "verify", "execute", "schema")
_ASYNC_CAPABILITIES = ("verify", "execute")


class Metric(ABC):
    """Contract for metrics evaluated against a single repository."""

    def __init__(self, context: EvaluationContext) -> None:
        if not isinstance(context, EvaluationContext):
            raise TypeError(
                f"{self.__class__.__name__} must be constructed from an EvaluationContext"
            )
        self._context = context

    @property
    def context(self) -> EvaluationContext:
        return self._context

    @property
    def repository(self) -> RepositoryDescriptor:
        return self._context.repository

    @property
    def working_dir(self) -> Path:
        return self._context.working_dir

    @property
    def manifest(self) -> Mapping[str, Any]:
        return self._context.manifest

    @property
    def dependencies(self) -> Mapping[str, Any]:
        return self._context.dependencies

    @abstractmethod
    def describe(self) -> MetricDescriptor:
        """Return the static identity of this metric. Must not have side effects."""

    @abstractmethod
    async def verify(self) -> bool:
        """Return True when the metric applies to the repository."""

    @abstractmethod
    async def execute(self) -> Any:
        """Compute the metric value. Only called after ``verify`` succeeded."""

    @abstractmethod
    def schema(self) -> Optional[Mapping[str, Any]]:
        """Describe the shape of the value returned by ``execute``."""


def ensure_metric_contract(metric_type: object) -> type:
    """Reject metric types that cannot be evaluated, before any instantiation."""
    if not isinstance(metric_type, type):
        raise ContractViolation(metric_type, ["not a class"])

    problems: List[str] = []
    for name in _REQUIRED_CAPABILITIES:
        if not callable(getattr(metric_type, name, None)):
            problems.append(f"missing {name}()")
    for name in _ASYNC_CAPABILITIES:
        member = getattr(metric_type, name, None)
        if callable(member) and not inspect.iscoroutinefunction(member):
            problems.append(f"{name}() must be a coroutine function")
    if inspect.isabstract(metric_type):
        abstract = sorted(getattr(metric_type, "__abstractmethods__", ()))
        problems.append(f"unimplemented {', '.join(abstract)}")

    if problems:
        raise ContractViolation(metric_type, problems)
    return metric_type
