"""Process-wide catalog of metric descriptors."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Set

from .models import MetricDescriptor


class MetricRegistry:
    """Append-only, name-deduplicated catalog of metric descriptors.

    Registration happens from concurrently running metric evaluations, possibly
    on several event loops, so every mutation goes through a single lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._descriptors: Dict[str, MetricDescriptor] = {}

    def register_if_absent(self, descriptor: MetricDescriptor) -> bool:
        """Store ``descriptor`` unless its name is known. Returns True on insert."""
        with self._lock:
            if descriptor.name in self._descriptors:
                return False
            self._descriptors[descriptor.name] = descriptor
            return True

    def grouped_view(self) -> Dict[str, List[MetricDescriptor]]:
        with self._lock:
            descriptors = list(self._descriptors.values())
        groups: Dict[str, List[MetricDescriptor]] = {}
        for descriptor in descriptors:
            groups.setdefault(descriptor.group, []).append(descriptor)
        return groups

    def all_names(self) -> Set[str]:
        with self._lock:
            return set(self._descriptors)

    def get(self, name: str) -> Optional[MetricDescriptor]:
        with self._lock:
            return self._descriptors.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._descriptors

    def __len__(self) -> int:
        with self._lock:
            return len(self._descriptors)


__all__ = ["MetricRegistry"]
