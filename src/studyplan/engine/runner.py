"""Planning engine runner."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any

from studyplan.models import Chapter, ChapterStatus, Exam, OffDay, to_date
from studyplan.normalization.config_resolver import DEFAULT_SETTINGS
from studyplan.reporting.decision_trace import DecisionTraceCollector
from studyplan.validation import validate_domain_inputs, validate_inputs_with_schema

from .aggregate import aggregate_by_subject
from .allocator import allocate_ranked
from .calendar import off_day_dates
from .daily_log import build_daily_log
from .scoring import rank_chapters

logger = logging.getLogger(__name__)


def _extract_records(payload: dict[str, Any], key: str) -> list[Any]:
    root = payload.get(key, {})
    if isinstance(root, dict):
        items = root.get(key, [])
        if isinstance(items, list):
            return items
    return []


def extract_chapters(payload: dict[str, Any]) -> list[Chapter]:
    return [Chapter.from_dict(item) for item in _extract_records(payload, "chapters") if isinstance(item, dict)]


def extract_exams(payload: dict[str, Any]) -> list[Exam]:
    return [Exam.from_dict(item) for item in _extract_records(payload, "exams") if isinstance(item, dict)]


def extract_off_days(payload: dict[str, Any]) -> list[OffDay]:
    return [
        OffDay.from_dict(item)
        for item in _extract_records(payload, "off_days")
        if isinstance(item, (dict, str))
    ]


def _resolve_current_date(payload: dict[str, Any]) -> date:
    request = payload.get("plan_request", {})
    raw = request.get("current_date") if isinstance(request, dict) else None
    if raw:
        return to_date(raw)
    return date.today()


def run_planner(
    payload: dict[str, Any],
    *,
    id_factory: Callable[[], str] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Run ranking, allocation and aggregation for one day.

    ``payload`` is the loaded request: chapter, exam and off-day files plus
    ``effective_settings`` and ``plan_request``. It is validated first and
    any error raises ``PlanInputError`` listing every issue found.

    ``ranking`` covers all chapters, completed ones included, and the
    allocator reuses it instead of scoring the open chapters again.
    """

    report = validate_inputs_with_schema(payload)
    report.extend(validate_domain_inputs(payload))
    report.raise_for_errors()

    settings = payload.get("effective_settings")
    if not isinstance(settings, dict):
        settings = dict(DEFAULT_SETTINGS)
    daily_hours = float(settings.get("daily_study_hours", DEFAULT_SETTINGS["daily_study_hours"]))
    session_minutes = float(settings.get("study_session_minutes", DEFAULT_SETTINGS["study_session_minutes"]))

    chapters = extract_chapters(payload)
    exams = extract_exams(payload)
    off_days = extract_off_days(payload)
    current_date = _resolve_current_date(payload)
    started_at = now or datetime.now(timezone.utc)

    blocked = off_day_dates(off_days)
    decision_trace = DecisionTraceCollector(start_timestamp=started_at)
    ranking = rank_chapters(chapters, exams, blocked, current_date)
    tasks = allocate_ranked(
        ranking,
        blocked,
        current_date,
        daily_hours,
        session_minutes,
        id_factory=id_factory,
        decision_trace=decision_trace,
    )
    subject_stats = aggregate_by_subject(chapters)
    daily_log = build_daily_log(tasks, current_date, created_at=started_at)

    budget_minutes = daily_hours * 60
    logger.info(
        "run for %s: %d chapters, %d exams, %d off-days -> %d tasks",
        current_date.isoformat(),
        len(chapters),
        len(exams),
        len(blocked),
        len(tasks),
    )

    return {
        "status": "ok",
        "date": current_date.isoformat(),
        "is_off_day": current_date in blocked,
        "tasks": [task.as_dict() for task in tasks],
        "daily_log": daily_log.as_dict(),
        "ranking": [item.as_dict() for item in ranking],
        "subject_stats": {subject: stats.as_dict() for subject, stats in sorted(subject_stats.items())},
        "plan_summary": {
            "chapters_count": len(chapters),
            "open_chapters_count": sum(1 for item in ranking if item.chapter.status is not ChapterStatus.COMPLETED),
            "tasks_count": len(tasks),
            "budget_minutes": budget_minutes,
            "allocated_minutes": daily_log.total_allocated_minutes,
            "unallocated_minutes": max(0.0, budget_minutes - daily_log.total_allocated_minutes),
            "session_minutes": session_minutes,
        },
        "effective_settings": settings,
        "decision_trace": decision_trace.as_list(),
    }
