"""Domain-level rules across chapters, exams and settings."""

from __future__ import annotations

import math
from typing import Any

from studyplan.models import ChapterStatus, ExamType, InvalidInputError

from .errors import ValidationReport


def _records(payload: Any, key: str) -> list[Any]:
    if isinstance(payload, dict):
        items = payload.get(key, [])
        if isinstance(items, list):
            return items
    return []


def _number(record: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = record.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
            return float(value)
    return None


def validate_domain_inputs(loaded_payload: dict[str, Any]) -> ValidationReport:
    """Validate cross-file coherence and rules a shape check cannot express."""
    report = ValidationReport()

    exams = _records(loaded_payload.get("exams"), "exams")
    covered_subjects: set[str] = set()
    for idx, exam in enumerate(exams):
        if not isinstance(exam, dict):
            continue
        subjects = exam.get("subjects")
        if isinstance(subjects, list):
            covered_subjects.update(str(subject) for subject in subjects)
        raw_type = exam.get("type", exam.get("exam_type", exam.get("examType")))
        if ExamType.parse(raw_type) is None:
            report.add_info(
                code="INFO_UNKNOWN_EXAM_TYPE",
                message=f"Exam type {raw_type!r} is not recognized; weight 1.0 applies",
                field_path=f"$.exams.exams[{idx}].type",
            )

    chapters = _records(loaded_payload.get("chapters"), "chapters")
    chapter_ids: set[str] = set()
    reported_subjects: set[str] = set()
    for idx, chapter in enumerate(chapters):
        if not isinstance(chapter, dict):
            continue
        path = f"$.chapters.chapters[{idx}]"

        chapter_id = chapter.get("id", chapter.get("chapter_id", chapter.get("chapterId")))
        if isinstance(chapter_id, str):
            if chapter_id in chapter_ids:
                report.add_error(
                    code="DUPLICATE_CHAPTER_ID",
                    message=f"Duplicate chapter id: {chapter_id}",
                    field_path=f"{path}.id",
                )
            chapter_ids.add(chapter_id)

        if "status" in chapter:
            try:
                ChapterStatus.parse(chapter["status"])
            except InvalidInputError as exc:
                report.add_error(
                    code="INVALID_STATUS",
                    message=str(exc),
                    field_path=f"{path}.status",
                    suggested_fix="Use one of: " + ", ".join(status.value for status in ChapterStatus),
                )

        estimated = _number(chapter, "estimated_hours", "estimatedHours")
        completed = _number(chapter, "completed_hours", "completedHours")
        for label, value in (("estimated_hours", estimated), ("completed_hours", completed)):
            if value is not None and value < 0:
                report.add_error(
                    code="NEGATIVE_HOURS",
                    message=f"{label} must be >= 0",
                    field_path=f"{path}.{label}",
                )
        if estimated is not None and completed is not None and completed > estimated >= 0:
            report.add_info(
                code="INFO_COMPLETED_EXCEEDS_ESTIMATE",
                message="completed_hours exceeds estimated_hours; remaining work counts as 0",
                field_path=f"{path}.completed_hours",
            )

        subject = chapter.get("subject")
        if isinstance(subject, str) and subject not in covered_subjects and subject not in reported_subjects:
            reported_subjects.add(subject)
            report.add_info(
                code="INFO_SUBJECT_WITHOUT_EXAM",
                message=f"No exam covers subject {subject!r}; its chapters get priority 0",
                field_path=f"{path}.subject",
            )

    settings = loaded_payload.get("effective_settings")
    if isinstance(settings, dict):
        _validate_budget(settings, report)

    return report


def _validate_budget(settings: dict[str, Any], report: ValidationReport) -> None:
    daily_hours = _number(settings, "daily_study_hours")
    if daily_hours is None or daily_hours <= 0:
        report.add_error(
            code="INVALID_DAILY_HOURS",
            message="daily_study_hours must be a finite number > 0",
            field_path="$.settings.daily_study_hours",
            suggested_fix="Typical values are between 1 and 15.",
        )

    session_minutes = _number(settings, "study_session_minutes")
    if session_minutes is None or session_minutes <= 0:
        report.add_error(
            code="INVALID_SESSION_MINUTES",
            message="study_session_minutes must be a finite number > 0",
            field_path="$.settings.study_session_minutes",
            suggested_fix="Typical values are between 30 and 120.",
        )
