"""Reporting utilities."""

from .decision_trace import DecisionTraceCollector
from .reports import build_error_report, build_error_report_with_validation, build_success_report

__all__ = [
    "DecisionTraceCollector",
    "build_error_report",
    "build_error_report_with_validation",
    "build_success_report",
]
