"""Shape validation for planner input files.

Each input file is an object wrapping one list of records. Field rules are
declared in code; a field may be spelled in snake_case or in camelCase.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from .errors import ValidationReport


@dataclass(frozen=True, slots=True)
class FieldRule:
    names: tuple[str, ...]
    expected_type: str
    required: bool = True
    data_format: str | None = None
    non_empty: bool = False


_RECORD_RULES: dict[str, tuple[FieldRule, ...]] = {
    "chapters": (
        FieldRule(("id", "chapter_id", "chapterId"), "string", non_empty=True),
        FieldRule(("subject",), "string", non_empty=True),
        FieldRule(("name",), "string"),
        FieldRule(("estimated_hours", "estimatedHours"), "number"),
        FieldRule(("completed_hours", "completedHours"), "number", required=False),
        FieldRule(("status",), "string", required=False),
    ),
    "exams": (
        FieldRule(("date",), "string", data_format="date"),
        FieldRule(("type", "exam_type", "examType"), "string", required=False),
        FieldRule(("subjects",), "array"),
        FieldRule(("name",), "string", required=False),
    ),
    "off_days": (
        FieldRule(("date",), "string", data_format="date"),
        FieldRule(("reason",), "string", required=False),
    ),
}

_SETTINGS_RULES: tuple[FieldRule, ...] = (
    FieldRule(("daily_study_hours", "dailyStudyHours"), "number", required=False),
    FieldRule(("study_session_minutes", "studySessionMinutes"), "number", required=False),
    FieldRule(("break_minutes", "breakMinutes"), "number", required=False),
)


def validate_inputs_with_schema(payloads: dict[str, Any]) -> ValidationReport:
    report = ValidationReport()

    for payload_name, rules in _RECORD_RULES.items():
        if payload_name not in payloads:
            continue
        root = payloads[payload_name]
        path = f"$.{payload_name}"
        if not isinstance(root, dict):
            report.add_error(code="INVALID_TYPE", message="Expected type object", field_path=path)
            continue
        records = root.get(payload_name)
        if not isinstance(records, list):
            report.add_error(
                code="MISSING_REQUIRED_FIELD",
                message=f"Missing required list: {payload_name}",
                field_path=f"{path}.{payload_name}",
            )
            continue
        for idx, record in enumerate(records):
            record_path = f"{path}.{payload_name}[{idx}]"
            if payload_name == "off_days" and isinstance(record, str):
                if not _is_date(record):
                    report.add_error(code="INVALID_DATE_FORMAT", message="Invalid date format", field_path=record_path)
                continue
            if not isinstance(record, dict):
                report.add_error(code="INVALID_TYPE", message="Expected type object", field_path=record_path)
                continue
            _validate_record(record, rules, record_path, report)
            if payload_name == "exams":
                _validate_subject_list(record.get("subjects"), f"{record_path}.subjects", report)

    settings = payloads.get("settings")
    if settings is not None:
        if isinstance(settings, dict):
            _validate_record(settings, _SETTINGS_RULES, "$.settings", report)
        else:
            report.add_error(code="INVALID_TYPE", message="Expected type object", field_path="$.settings")

    return report


def _validate_record(
    record: dict[str, Any],
    rules: tuple[FieldRule, ...],
    path: str,
    report: ValidationReport,
) -> None:
    for rule in rules:
        key = next((name for name in rule.names if name in record), None)
        if key is None:
            if rule.required:
                report.add_error(
                    code="MISSING_REQUIRED_FIELD",
                    message=f"Missing required field: {rule.names[0]}",
                    field_path=f"{path}.{rule.names[0]}",
                )
            continue

        value = record[key]
        field_path = f"{path}.{key}"
        if not _matches_type(value, rule.expected_type):
            report.add_error(
                code="INVALID_TYPE",
                message=f"Expected type {rule.expected_type}, got {type(value).__name__}",
                field_path=field_path,
            )
            continue
        if rule.expected_type == "number" and not math.isfinite(value):
            report.add_error(
                code="NON_FINITE_NUMBER",
                message=f"Expected a finite number, got {value!r}",
                field_path=field_path,
            )
            continue
        if rule.non_empty and isinstance(value, str) and not value.strip():
            report.add_error(code="MISSING_REQUIRED_FIELD", message="String cannot be empty", field_path=field_path)
        if rule.data_format == "date" and not _is_date(value):
            report.add_error(code="INVALID_DATE_FORMAT", message="Invalid date format", field_path=field_path)


def _validate_subject_list(value: Any, path: str, report: ValidationReport) -> None:
    if not isinstance(value, list):
        return
    for idx, item in enumerate(value):
        if not isinstance(item, str) or not item:
            report.add_error(
                code="INVALID_TYPE",
                message="Exam subjects must be non-empty strings",
                field_path=f"{path}[{idx}]",
            )


def _matches_type(value: Any, expected_type: str) -> bool:
    return {
        "object": isinstance(value, dict),
        "array": isinstance(value, list),
        "string": isinstance(value, str),
        "number": isinstance(value, (int, float)) and not isinstance(value, bool),
    }.get(expected_type, True)


def _is_date(value: str) -> bool:
    """Accept plain dates and ISO datetimes (reduced to their date later)."""
    try:
        date.fromisoformat(value)
    except ValueError:
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return False
    return True
