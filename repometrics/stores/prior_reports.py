"""Previously computed report sets used to skip recomputation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from ..aggregator import find_repository_report, report_lookup
from ..logging import get_logger
from ..models import MetricResult, Report

logger = get_logger("stores.prior_reports")


class PriorReportCache:
    """Read-only view over the most recently loaded report set.

    The set is swapped wholesale by ``replace``; lookups during a run always see a
    consistent snapshot.
    """

    def __init__(self, reports: Iterable[Report] = ()) -> None:
        self._reports: Tuple[Report, ...] = tuple(reports)

    @classmethod
    def from_file(cls, path: Path | None) -> "PriorReportCache":
        if path is None:
            return cls()
        return cls(load_reports(path))

    @property
    def reports(self) -> Tuple[Report, ...]:
        return self._reports

    def replace(self, reports: Iterable[Report]) -> None:
        self._reports = tuple(reports)

    def prior_result(self, repository: str, metric_name: str) -> Optional[MetricResult]:
        """Return the last recorded result of ``metric_name`` for ``repository``."""
        return report_lookup(self._reports, repository, metric_name)

    def repository_report(self, repository: str) -> Optional[Report]:
        return find_repository_report(self._reports, repository)

    def __len__(self) -> int:
        return len(self._reports)


def load_reports(path: Path) -> List[Report]:
    """Load a JSON report set, treating a missing or unreadable file as empty."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable report file %s: %s", path, exc)
        return []
    if not isinstance(data, list):
        logger.warning("Ignoring report file %s: expected a list of reports", path)
        return []
    return [Report.from_dict(item) for item in data if isinstance(item, dict)]


def write_reports(path: Path, reports: Sequence[Report]) -> None:
    payload = [report.to_dict() for report in reports]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


__all__ = ["PriorReportCache", "load_reports", "write_reports"]
