"""Metric plugin contract and discovery utilities."""

from __future__ import annotations

from importlib import import_module, metadata
from typing import Iterable, List, Sequence, Set

from .base import Metric, ensure_metric_contract

_ENTRY_POINT_GROUP = "repometrics.metrics"


def load_metric_type(path: str) -> type:
    """Import a metric class from a ``module:Attribute`` path."""
    return ensure_metric_contract(_resolve(path))


def _resolve(path: str) -> object:
    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Metric path '{path}' must look like 'package.module:ClassName'")
    module = import_module(module_name)
    target: object = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ValueError(f"Metric path '{path}' does not resolve: {exc}") from exc
    return target


def discover_metrics(
    plugins: Sequence[str] = (),
    enabled: Sequence[str] | None = None,
) -> List[type]:
    """Return validated metric types from import paths and installed entry points.

    Order follows ``plugins`` first, then entry points; the first type seen for a
    class name wins. ``enabled`` restricts the result to the given class names.
    """

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    metric_types: List[type] = []
    seen: Set[str] = set()

    def _add(metric_type: object) -> None:
        name = getattr(metric_type, "__name__", None)
        key = name.lower() if isinstance(name, str) else None
        # Filter before validating: a broken plugin that is not enabled is ignored.
        if enabled_set is not None and key not in enabled_set:
            return
        checked = ensure_metric_contract(metric_type)
        if key in seen:
            return
        metric_types.append(checked)
        seen.add(key)

    for path in plugins:
        _add(_resolve(path))

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load metric entry point '{entry.name}': {exc}") from exc
        _add(loaded)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set - seen))
        if missing:
            raise ValueError(f"Unknown metrics requested: {missing}")

    return metric_types


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Metric",
    "discover_metrics",
    "ensure_metric_contract",
    "load_metric_type",
]
