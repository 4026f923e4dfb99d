"""Stub metric plugins for exercising the evaluation engine."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from repometrics.metrics import Metric
from repometrics.models import MetricDescriptor, MetricGroup


@dataclass
class CallLog:
    """Counts how often a stub metric was constructed, verified and executed."""

    constructed: int = 0
    verify: int = 0
    execute: int = 0


def make_metric(
    name: str,
    *,
    group: str = MetricGroup.HAS,
    applicable: bool = True,
    value: Any = None,
    delay: float = 0.0,
    verify_error: Optional[BaseException] = None,
    execute_error: Optional[BaseException] = None,
) -> type:
    """Build a metric type whose behaviour is fixed by the arguments."""
    calls = CallLog()

    class _StubMetric(Metric):
        def __init__(self, context) -> None:  # type: ignore[no-untyped-def]
            super().__init__(context)
            calls.constructed += 1

        def describe(self) -> MetricDescriptor:
            return MetricDescriptor(name=name, group=group, description=f"{name} stub")

        async def verify(self) -> bool:
            calls.verify += 1
            if verify_error is not None:
                raise verify_error
            return applicable

        async def execute(self) -> Any:
            calls.execute += 1
            if delay:
                await asyncio.sleep(delay)
            if execute_error is not None:
                raise execute_error
            return value

        def schema(self) -> Mapping[str, Any]:
            return {"type": "object"}

    _StubMetric.__name__ = name
    _StubMetric.__qualname__ = name
    _StubMetric.calls = calls  # type: ignore[attr-defined]
    return _StubMetric


class HasLintConfig(Metric):
    """Reports whether the working copy carries an ESLint configuration."""

    _CANDIDATES = (".eslintrc.json", ".eslintrc", ".eslintrc.js")

    def describe(self) -> MetricDescriptor:
        return MetricDescriptor(
            name="HasLintConfig",
            group=MetricGroup.HAS,
            description="Repository declares a lint configuration",
        )

    async def verify(self) -> bool:
        return self.working_dir.is_dir()

    async def execute(self) -> Any:
        found = any((self.working_dir / name).exists() for name in self._CANDIDATES)
        return {"result": found}

    def schema(self) -> Mapping[str, Any]:
        return {"result": "boolean"}


class DependencyCount(Metric):
    """Counts merged runtime and development dependencies."""

    def describe(self) -> MetricDescriptor:
        return MetricDescriptor(name="DependencyCount", group=MetricGroup.VERSIONS)

    async def verify(self) -> bool:
        return bool(self.dependencies)

    async def execute(self) -> Any:
        return {"count": len(self.dependencies)}

    def schema(self) -> Mapping[str, Any]:
        return {"count": "integer"}


class SyncVerifyMetric:
    """Looks like a metric but verifies synchronously."""

    def __init__(self, context) -> None:  # type: ignore[no-untyped-def]
        self.context = context

    def describe(self) -> MetricDescriptor:
        return MetricDescriptor(name="SyncVerify", group=MetricGroup.RANDOM)

    def verify(self) -> bool:
        return True

    async def execute(self) -> Any:
        return 1

    def schema(self) -> None:
        return None


__all__ = [
    "CallLog",
    "DependencyCount",
    "HasLintConfig",
    "SyncVerifyMetric",
    "make_metric",
]
