"""Build CLI reports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from studyplan.validation import ValidationError, ValidationReport


def build_error_report(errors: list[ValidationError], code: str = "validation_error") -> dict[str, Any]:
    """Return a JSON-serializable error report."""
    return {
        "status": "error",
        "error": {
            "code": code,
            "count": len(errors),
            "details": [err.as_dict() for err in errors],
        },
    }


def build_error_report_with_validation(
    errors: list[ValidationError],
    validation_report: ValidationReport,
    code: str = "validation_error",
) -> dict[str, Any]:
    payload = build_error_report(errors, code=code)
    payload["validation_report"] = validation_report.as_dict()
    return payload


def build_success_report(
    result: dict[str, Any],
    metrics: dict[str, Any],
    validation_report: ValidationReport,
    *,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Return a JSON-serializable success report."""
    stamp = (generated_at or datetime.now(timezone.utc)).isoformat().replace("+00:00", "Z")
    plan_output = {
        "schema_version": "1.0.0",
        "plan_id": f"plan-{result.get('date', '')}-{result.get('daily_log', {}).get('id', '')[:8]}",
        "generated_at": stamp,
        "date": result.get("date"),
        "is_off_day": result.get("is_off_day", False),
        "plan_summary": result.get("plan_summary", {}),
        "daily_log": result.get("daily_log", {}),
        "ranking": result.get("ranking", []),
        "subject_stats": result.get("subject_stats", {}),
        "metrics": metrics,
        "decision_trace": result.get("decision_trace", []),
        "effective_settings": result.get("effective_settings", {}),
        "validation_report": validation_report.as_dict(),
    }
    return {
        "status": "ok",
        "plan_output": plan_output,
    }
