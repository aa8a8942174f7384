"""Report rendering."""

from commitwatch.reports.renderer import SECTION_RULE, Report, ReportRenderer

__all__ = ["Report", "ReportRenderer", "SECTION_RULE"]
