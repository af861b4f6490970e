"""Daily log assembly and task status transitions.

The allocator only ever emits pending tasks. Everything after that (timer
start, completion, skipping) is driven by the caller through this module,
which always returns new records instead of mutating the ones it is given.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime, timezone

from studyplan.models import Chapter, ChapterStatus, DailyLog, DailyTask, TaskStatus

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, TaskStatus.SKIPPED}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.PENDING, TaskStatus.COMPLETED, TaskStatus.SKIPPED}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.SKIPPED: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Raised when a task is moved to a status its current one cannot reach."""

    def __init__(self, task_id: str, current: TaskStatus, requested: TaskStatus) -> None:
        super().__init__(f"Task {task_id}: cannot move from {current.value} to {requested.value}")
        self.task_id = task_id
        self.current = current
        self.requested = requested


def _totals(tasks: Sequence[DailyTask]) -> tuple[float, float]:
    allocated = sum(task.allocated_minutes for task in tasks)
    actual = sum(task.actual_minutes or 0 for task in tasks)
    return allocated, actual


def build_daily_log(
    tasks: Iterable[DailyTask],
    day: date,
    *,
    log_id: str | None = None,
    created_at: datetime | None = None,
) -> DailyLog:
    items = tuple(tasks)
    allocated, actual = _totals(items)
    return DailyLog(
        id=log_id or uuid.uuid4().hex,
        date=day,
        tasks=items,
        total_allocated_minutes=allocated,
        total_actual_minutes=actual,
        created_at=created_at or datetime.now(timezone.utc),
    )


def can_transition(current: TaskStatus, requested: TaskStatus) -> bool:
    return current is requested or requested in _ALLOWED_TRANSITIONS[current]


def update_daily_task(
    log: DailyLog,
    task_id: str,
    *,
    status: TaskStatus | str | None = None,
    actual_minutes: float | None = None,
) -> DailyLog:
    """Return a copy of ``log`` with one task updated and totals recomputed.

    Raises ``KeyError`` for an unknown task id, ``InvalidTransitionError``
    for a status move out of a terminal state, ``ValueError`` for negative
    minutes.
    """

    if actual_minutes is not None and actual_minutes < 0:
        raise ValueError(f"actual_minutes must be >= 0, got {actual_minutes!r}")

    index = next((i for i, task in enumerate(log.tasks) if task.id == task_id), None)
    if index is None:
        raise KeyError(task_id)

    task = log.tasks[index]
    changes: dict[str, object] = {}
    if status is not None:
        requested = TaskStatus(status)
        if not can_transition(task.status, requested):
            raise InvalidTransitionError(task.id, task.status, requested)
        changes["status"] = requested
    if actual_minutes is not None:
        changes["actual_minutes"] = float(actual_minutes)

    updated = task.with_updates(**changes)
    tasks = log.tasks[:index] + (updated,) + log.tasks[index + 1 :]
    _, actual = _totals(tasks)
    logger.debug("task %s -> %s (%s min)", task_id, updated.status.value, updated.actual_minutes)
    return replace(log, tasks=tasks, total_actual_minutes=actual)


def apply_completed_tasks(chapters: Iterable[Chapter], log: DailyLog) -> list[Chapter]:
    """Credit completed tasks back onto their chapters.

    Each completed task adds its actual minutes, or its allocated minutes
    when no actual time was recorded. A chapter whose completed hours reach
    its estimate becomes completed, otherwise in-progress.
    """

    credited_minutes: dict[str, float] = defaultdict(float)
    for task in log.tasks:
        if task.status is not TaskStatus.COMPLETED:
            continue
        minutes = task.actual_minutes if task.actual_minutes is not None else task.allocated_minutes
        credited_minutes[task.chapter_id] += minutes

    updated: list[Chapter] = []
    for chapter in chapters:
        minutes = credited_minutes.get(chapter.id)
        if not minutes:
            updated.append(chapter)
            continue
        completed_hours = chapter.completed_hours + minutes / 60
        status = (
            ChapterStatus.COMPLETED
            if completed_hours >= chapter.estimated_hours
            else ChapterStatus.IN_PROGRESS
        )
        updated.append(replace(chapter, completed_hours=completed_hours, status=status))
    return updated
