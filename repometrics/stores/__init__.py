"""Report storage backends."""

from .prior_reports import PriorReportCache, load_reports, write_reports

__all__ = ["PriorReportCache", "load_reports", "write_reports"]
