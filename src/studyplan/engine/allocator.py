"""Single-pass greedy daily allocation.

Chapters are visited in priority order and each one receives at most two
sessions of time. Fragments shorter than half a session are dropped and the
walk stops as soon as the daily budget is spent; no lookahead or
backtracking is attempted.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Callable, Iterable, Sequence
from datetime import date

from studyplan.models import Chapter, ChapterStatus, ChapterWithPriority, DailyTask, Exam, OffDay, TaskStatus
from studyplan.reporting.decision_trace import (
    RULE_BUDGET_EXHAUSTED,
    RULE_COMMIT_TASK,
    RULE_OFF_DAY,
    RULE_SESSION_CAP,
    RULE_SKIP_FRAGMENT,
    RULE_SKIP_NO_REMAINING_WORK,
    DecisionTraceCollector,
)

from .calendar import off_day_dates
from .scoring import rank_chapters

logger = logging.getLogger(__name__)

MAX_SESSIONS_PER_CHAPTER = 2
MIN_SESSION_FRACTION = 0.5


def _default_task_id() -> str:
    return uuid.uuid4().hex


def _require_positive(value: float, name: str) -> None:
    if isinstance(value, bool) or not (math.isfinite(value) and value > 0):
        raise ValueError(f"{name} must be a finite number > 0, got {value!r}")


def generate_daily_plan(
    chapters: Iterable[Chapter],
    exams: Sequence[Exam],
    off_days: Iterable[OffDay | date],
    current_date: date,
    daily_hours: float,
    session_minutes: float,
    *,
    id_factory: Callable[[], str] | None = None,
    decision_trace: DecisionTraceCollector | None = None,
) -> list[DailyTask]:
    """Build the task list for ``current_date``.

    Returns an empty list on an off-day. Tasks come back in priority order,
    all with status pending.
    """

    _require_positive(daily_hours, "daily_hours")
    _require_positive(session_minutes, "session_minutes")

    blocked = off_day_dates(off_days)
    ranked: list[ChapterWithPriority] = []
    if current_date not in blocked:
        open_chapters = [chapter for chapter in chapters if chapter.status is not ChapterStatus.COMPLETED]
        ranked = rank_chapters(open_chapters, exams, blocked, current_date)

    return allocate_ranked(
        ranked,
        blocked,
        current_date,
        daily_hours,
        session_minutes,
        id_factory=id_factory,
        decision_trace=decision_trace,
    )


def allocate_ranked(
    ranked: Sequence[ChapterWithPriority],
    off_days: Iterable[OffDay | date],
    current_date: date,
    daily_hours: float,
    session_minutes: float,
    *,
    id_factory: Callable[[], str] | None = None,
    decision_trace: DecisionTraceCollector | None = None,
) -> list[DailyTask]:
    """Pack the day's budget over an existing ranking.

    ``ranked`` must already be sorted by priority, highest first, as
    ``rank_chapters`` returns it. Completed chapters in it are passed over.
    """

    _require_positive(daily_hours, "daily_hours")
    _require_positive(session_minutes, "session_minutes")
    new_id = id_factory or _default_task_id
    day = current_date.isoformat()

    if current_date in off_day_dates(off_days):
        logger.info("%s is an off-day, no tasks generated", day)
        if decision_trace is not None:
            decision_trace.record(
                day=day,
                chapter_id=None,
                priority=0.0,
                allocated_minutes=0.0,
                remaining_minutes=0.0,
                applied_rules=[RULE_OFF_DAY],
                note="Day is blocked",
            )
        return []

    session_cap = session_minutes * MAX_SESSIONS_PER_CHAPTER
    min_task = session_minutes * MIN_SESSION_FRACTION
    remaining_minutes = daily_hours * 60
    tasks: list[DailyTask] = []

    for scored in ranked:
        chapter = scored.chapter
        if chapter.status is ChapterStatus.COMPLETED:
            continue
        if remaining_minutes <= 0:
            if decision_trace is not None:
                decision_trace.record(
                    day=day,
                    chapter_id=chapter.id,
                    priority=scored.priority,
                    allocated_minutes=0.0,
                    remaining_minutes=remaining_minutes,
                    applied_rules=[RULE_BUDGET_EXHAUSTED],
                    note="Daily budget spent before this chapter",
                )
            break

        remaining_chapter_minutes = (chapter.estimated_hours - chapter.completed_hours) * 60
        if remaining_chapter_minutes <= 0:
            if decision_trace is not None:
                decision_trace.record(
                    day=day,
                    chapter_id=chapter.id,
                    priority=scored.priority,
                    allocated_minutes=0.0,
                    remaining_minutes=remaining_minutes,
                    applied_rules=[RULE_SKIP_NO_REMAINING_WORK],
                )
            continue

        allocated = min(remaining_minutes, remaining_chapter_minutes, session_cap)
        if allocated < min_task:
            logger.debug(
                "skipping %s: %.1f min is below half a session (%.1f)", chapter.id, allocated, min_task
            )
            if decision_trace is not None:
                decision_trace.record(
                    day=day,
                    chapter_id=chapter.id,
                    priority=scored.priority,
                    allocated_minutes=0.0,
                    remaining_minutes=remaining_minutes,
                    applied_rules=[RULE_SKIP_FRAGMENT],
                    note=f"{allocated:g} min < {min_task:g} min",
                )
            continue

        tasks.append(
            DailyTask(
                id=new_id(),
                chapter_id=chapter.id,
                subject=chapter.subject,
                chapter_name=chapter.name,
                allocated_minutes=allocated,
                priority=scored.priority,
                date=current_date,
                status=TaskStatus.PENDING,
            )
        )
        remaining_minutes -= allocated

        if decision_trace is not None:
            rules = [RULE_COMMIT_TASK]
            if allocated == session_cap:
                rules.append(RULE_SESSION_CAP)
            decision_trace.record(
                day=day,
                chapter_id=chapter.id,
                priority=scored.priority,
                allocated_minutes=allocated,
                remaining_minutes=remaining_minutes,
                applied_rules=rules,
            )

    logger.info(
        "planned %d tasks for %s (%.0f of %.0f min)",
        len(tasks),
        day,
        daily_hours * 60 - max(0.0, remaining_minutes),
        daily_hours * 60,
    )
    return tasks
