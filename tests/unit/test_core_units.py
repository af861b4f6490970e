from __future__ import annotations

import json
import logging
from datetime import date, datetime

import pytest

from studyplan.engine import aggregate_by_subject, compute_priority, count_available_days, find_relevant_exam, run_planner
from studyplan.engine.scoring import URGENCY_WINDOW_DAYS, rank_chapters, type_weight
from studyplan.models import (
    Chapter,
    ChapterStatus,
    Exam,
    ExamType,
    InvalidInputError,
    OffDay,
    to_date,
)
from studyplan.logging_setup import JsonFormatter
from studyplan.normalization import resolve_effective_settings
from studyplan.validation import PlanInputError, ValidationReport, validate_domain_inputs, validate_inputs_with_schema

TODAY = date(2026, 3, 1)


def _chapter(cid: str = "c1", subject: str = "Math", estimated: float = 10, completed: float = 2, **kw) -> Chapter:
    return Chapter(id=cid, subject=subject, name=f"Chapter {cid}", estimated_hours=estimated, completed_hours=completed, **kw)


def _exam(day: date, *subjects: str, exam_type: ExamType | None = ExamType.FINAL) -> Exam:
    return Exam(date=day, exam_type=exam_type, subjects=subjects or ("Math",))


def test_priority_matches_reference_scenario() -> None:
    result = compute_priority(_chapter(), [_exam(date(2026, 3, 11))], [], TODAY)

    assert result.days_until_exam == 10
    assert result.available_days == 11
    assert result.urgency == pytest.approx(1 - 10 / 30)
    assert result.scarcity == pytest.approx(1 - 11 / 30)
    assert result.type_weight == 1.5
    assert result.priority == pytest.approx(8 * 1.5 * (2 * (20 / 30) + 19 / 30))
    assert round(result.priority, 1) == 23.6


def test_chapter_without_exam_scores_zero() -> None:
    result = compute_priority(_chapter(subject="History"), [_exam(date(2026, 3, 11))], [], TODAY)

    assert (result.priority, result.urgency, result.scarcity) == (0.0, 0.0, 0.0)
    assert result.exam_date is None
    assert "exam_date" not in result.as_dict()


def test_finished_chapter_scores_zero_even_on_exam_day() -> None:
    result = compute_priority(_chapter(estimated=5, completed=7), [_exam(TODAY)], [], TODAY)

    assert result.urgency == 1.0
    assert result.priority == 0.0


def test_past_exam_counts_as_due() -> None:
    result = compute_priority(_chapter(estimated=3, completed=1), [_exam(date(2026, 2, 25))], [], TODAY)

    assert result.days_until_exam == -4
    assert result.available_days == 0
    assert result.urgency == 1.0
    assert result.scarcity == 1.0
    assert result.priority == pytest.approx(2 * 1.5 * 3)


def test_exam_beyond_window_has_no_pressure() -> None:
    result = compute_priority(_chapter(), [_exam(date(2026, 4, 20))], [], TODAY)

    assert result.days_until_exam > URGENCY_WINDOW_DAYS
    assert result.urgency == 0.0
    assert result.scarcity == 0.0
    assert result.priority == 0.0


def test_off_days_raise_scarcity_only() -> None:
    exam = _exam(date(2026, 3, 11))
    off_days = [OffDay(date=date(2026, 3, d)) for d in (3, 4, 5)]

    plain = compute_priority(_chapter(), [exam], [], TODAY)
    blocked = compute_priority(_chapter(), [exam], off_days, TODAY)

    assert blocked.available_days == 8
    assert blocked.urgency == plain.urgency
    assert blocked.scarcity > plain.scarcity
    assert blocked.priority > plain.priority


def test_earliest_covering_exam_is_used() -> None:
    weekly = _exam(date(2026, 3, 6), "Math", exam_type=ExamType.WEEKLY)
    final = _exam(date(2026, 3, 21), "Math", "Physics", exam_type=ExamType.FINAL)
    other = _exam(date(2026, 3, 2), "Chemistry")

    assert find_relevant_exam("Math", [final, other, weekly]) is weekly
    assert find_relevant_exam("Physics", [final, other, weekly]) is final
    assert find_relevant_exam("Biology", [final, other, weekly]) is None
    assert compute_priority(_chapter(), [final, weekly], [], TODAY).type_weight == 1.0


def test_type_weights_and_unknown_type() -> None:
    assert type_weight(ExamType.FINAL) == 1.5
    assert type_weight(ExamType.MID_TERM) == 1.3
    assert type_weight(ExamType.QUARTERLY) == 1.2
    assert type_weight(ExamType.MONTHLY) == 1.1
    assert type_weight(ExamType.WEEKLY) == 1.0
    assert type_weight(None) == 1.0
    assert ExamType.parse("Mid_Term") is ExamType.MID_TERM
    assert ExamType.parse("pop-quiz") is None


def test_rank_chapters_is_stable_for_ties() -> None:
    chapters = [_chapter("a", subject="Art"), _chapter("b", subject="Music"), _chapter("c", subject="Math")]
    ranked = rank_chapters(chapters, [_exam(date(2026, 3, 11))], [], TODAY)

    assert [item.chapter.id for item in ranked] == ["c", "a", "b"]


def test_count_available_days_inclusive_bounds() -> None:
    off = [OffDay(date=date(2026, 3, 1)), OffDay(date=date(2026, 3, 31))]

    assert count_available_days(TODAY, TODAY, []) == 1
    assert count_available_days(TODAY, TODAY, off) == 0
    assert count_available_days(TODAY, date(2026, 3, 10), off) == 9
    assert count_available_days(date(2026, 3, 10), TODAY, []) == 0


def test_to_date_strips_time_of_day() -> None:
    assert to_date("2026-03-01") == TODAY
    assert to_date("2026-03-01T23:30:00Z") == TODAY
    assert to_date(datetime(2026, 3, 1, 8, 15)) == TODAY
    with pytest.raises(InvalidInputError):
        to_date("01/03/2026")
    with pytest.raises(InvalidInputError):
        to_date(None)  # type: ignore[arg-type]


def test_chapter_parsing_accepts_legacy_labels() -> None:
    chapter = Chapter.from_dict(
        {"id": "x", "subject": "Math", "name": "Sets", "estimatedHours": 4, "completedHours": 1.5, "status": "complete"}
    )

    assert chapter.estimated_hours == 4.0
    assert chapter.completed_hours == 1.5
    assert chapter.status is ChapterStatus.COMPLETED
    assert ChapterStatus.parse("study-in-progress") is ChapterStatus.IN_PROGRESS
    assert ChapterStatus.parse("not_started") is ChapterStatus.NOT_STARTED
    with pytest.raises(InvalidInputError):
        ChapterStatus.parse("someday")
    with pytest.raises(InvalidInputError):
        Chapter.from_dict({"id": "y", "subject": "Math", "name": "n", "estimated_hours": "lots"})


def test_off_day_parsing_from_string_or_record() -> None:
    assert OffDay.from_dict("2026-03-04").date == date(2026, 3, 4)
    off = OffDay.from_dict({"date": "2026-03-05T00:00:00.000Z", "reason": "Holi"})
    assert off.date == date(2026, 3, 5)
    assert off.reason == "Holi"


def test_aggregate_by_subject_counts_and_hours() -> None:
    chapters = [
        _chapter("m1", "Math", 10, 2, status=ChapterStatus.IN_PROGRESS),
        _chapter("m2", "Math", 4, 4, status=ChapterStatus.COMPLETED),
        _chapter("p1", "Physics", 6, 0),
        _chapter("m3", "math", 1, 0),
    ]

    stats = aggregate_by_subject(chapters)

    assert set(stats) == {"Math", "Physics", "math"}
    math = stats["Math"]
    assert (math.total, math.completed, math.in_progress) == (2, 1, 1)
    assert math.total_hours == 14
    assert math.completed_hours == 6
    assert math.remaining_hours == 8
    assert math.progress_percentage == 50
    assert stats["Physics"].as_dict()["progress_percentage"] == 0
    assert aggregate_by_subject([]) == {}


def test_settings_resolution_defaults_camel_case_and_clamp() -> None:
    report = ValidationReport()
    settings = resolve_effective_settings({"settings": {"dailyStudyHours": 30, "studySessionMinutes": 50}}, report)

    assert settings["daily_study_hours"] == 24
    assert settings["study_session_minutes"] == 50
    assert settings["break_minutes"] == 15
    assert report.info_codes() == {"INFO_CLAMP_DAILY_HOURS_APPLIED"}

    defaults = resolve_effective_settings({}, ValidationReport())
    assert defaults == {"daily_study_hours": 4, "study_session_minutes": 45, "break_minutes": 15}


def test_schema_validation_reports_every_problem() -> None:
    payloads = {
        "chapters": {
            "chapters": [
                {"id": "c1", "subject": "", "name": "Sets", "estimated_hours": "4"},
                {"subject": "Math", "name": "Logic"},
                "not-a-record",
            ]
        },
        "exams": {"exams": [{"date": "2026-13-01", "type": "final", "subjects": ["Math", 3]}]},
        "off_days": {"off_days": ["2026-03-04", "tomorrow"]},
        "settings": {"daily_study_hours": "four"},
    }

    report = validate_inputs_with_schema(payloads)
    paths = {issue.field_path for issue in report.errors}

    assert "$.chapters.chapters[0].subject" in paths
    assert "$.chapters.chapters[0].estimated_hours" in paths
    assert "$.chapters.chapters[1].id" in paths
    assert "$.chapters.chapters[1].estimated_hours" in paths
    assert "$.chapters.chapters[2]" in paths
    assert "$.exams.exams[0].date" in paths
    assert "$.exams.exams[0].subjects[1]" in paths
    assert "$.off_days.off_days[1]" in paths
    assert "$.settings.daily_study_hours" in paths


def test_domain_validation_errors_and_infos() -> None:
    loaded = {
        "chapters": {
            "chapters": [
                {"id": "c1", "subject": "Math", "name": "a", "estimated_hours": 2, "completed_hours": 3},
                {"id": "c1", "subject": "Art", "name": "b", "estimated_hours": -1, "status": "later"},
            ]
        },
        "exams": {"exams": [{"date": "2026-03-11", "type": "surprise", "subjects": ["Math"]}]},
        "effective_settings": {"daily_study_hours": 0, "study_session_minutes": 45},
    }

    report = validate_domain_inputs(loaded)

    assert report.error_codes() == {"DUPLICATE_CHAPTER_ID", "INVALID_STATUS", "NEGATIVE_HOURS", "INVALID_DAILY_HOURS"}
    assert report.info_codes() == {
        "INFO_UNKNOWN_EXAM_TYPE",
        "INFO_COMPLETED_EXCEEDS_ESTIMATE",
        "INFO_SUBJECT_WITHOUT_EXAM",
    }
    with pytest.raises(ValueError):
        report.raise_for_errors()


@pytest.mark.parametrize("hours", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_hours_are_rejected_everywhere(hours: float) -> None:
    record = {"id": "c1", "subject": "Math", "name": "Sets", "estimated_hours": hours}

    with pytest.raises(InvalidInputError):
        Chapter.from_dict(record)

    report = validate_inputs_with_schema(
        {"chapters": {"chapters": [record]}, "settings": {"daily_study_hours": hours}}
    )
    assert report.error_codes() == {"NON_FINITE_NUMBER"}
    assert {issue.field_path for issue in report.errors} == {
        "$.chapters.chapters[0].estimated_hours",
        "$.settings.daily_study_hours",
    }

    settings_report = ValidationReport()
    settings = resolve_effective_settings({"settings": {"daily_study_hours": hours}}, settings_report)
    assert settings_report.info_codes() == set()
    domain = validate_domain_inputs({"effective_settings": settings | {"study_session_minutes": 45}})
    assert domain.error_codes() == {"INVALID_DAILY_HOURS"}


def test_run_planner_rejects_invalid_payload_with_every_issue() -> None:
    payload = {
        "chapters": {"chapters": [{"id": "c1", "subject": "Math", "name": "a", "estimated_hours": -1}]},
        "effective_settings": {"daily_study_hours": 0, "study_session_minutes": float("nan")},
        "plan_request": {"current_date": "2026-03-01"},
    }

    with pytest.raises(PlanInputError) as excinfo:
        run_planner(payload)

    codes = {issue.code for issue in excinfo.value.issues}
    assert codes == {"NEGATIVE_HOURS", "INVALID_DAILY_HOURS", "INVALID_SESSION_MINUTES"}


def test_json_formatter_emits_one_object_with_extras() -> None:
    record = logging.makeLogRecord(
        {
            "name": "studyplan.engine.allocator",
            "levelname": "INFO",
            "levelno": logging.INFO,
            "msg": "planned %d tasks",
            "args": (2,),
            "_json_day": "2026-03-01",
        }
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["msg"] == "planned 2 tasks"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "studyplan.engine.allocator"
    assert payload["day"] == "2026-03-01"
    assert payload["ts"].endswith("Z")
