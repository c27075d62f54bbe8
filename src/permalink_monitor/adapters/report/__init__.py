"""Report adapters."""

from permalink_monitor.adapters.report.text_report import TextReportGenerator

__all__ = ["TextReportGenerator"]
