"""Chapter priority scoring against the exam calendar."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from studyplan.models import Chapter, ChapterWithPriority, Exam, ExamType, OffDay

from .calendar import count_available_days, days_between, off_day_dates

logger = logging.getLogger(__name__)

URGENCY_WINDOW_DAYS = 30

TYPE_WEIGHTS: dict[ExamType, float] = {
    ExamType.FINAL: 1.5,
    ExamType.MID_TERM: 1.3,
    ExamType.QUARTERLY: 1.2,
    ExamType.MONTHLY: 1.1,
    ExamType.WEEKLY: 1.0,
}
DEFAULT_TYPE_WEIGHT = 1.0

URGENCY_WEIGHT = 2.0
SCARCITY_WEIGHT = 1.0


def type_weight(exam_type: ExamType | None) -> float:
    if exam_type is None:
        return DEFAULT_TYPE_WEIGHT
    return TYPE_WEIGHTS.get(exam_type, DEFAULT_TYPE_WEIGHT)


def find_relevant_exam(subject: str, exams: Iterable[Exam]) -> Exam | None:
    """Return the earliest exam covering ``subject``.

    Exams sharing a date keep their input order.
    """

    covering = [exam for exam in exams if subject in exam.subjects]
    if not covering:
        return None
    return min(covering, key=lambda exam: exam.date)


def _window_ramp(days: int) -> float:
    """Ramp from 0 (a full window or more away) to 1 (no days left)."""
    if days <= 0:
        return 1.0
    return max(0.0, 1.0 - days / URGENCY_WINDOW_DAYS)


def compute_priority(
    chapter: Chapter,
    exams: Sequence[Exam],
    off_days: Iterable[OffDay | date],
    current_date: date,
) -> ChapterWithPriority:
    """Score one chapter.

    Formula:
    - urgency = ramp(days_until_exam)
    - scarcity = ramp(available_days), available days excluding off-days
    - priority = left_hours * type_weight * (2 * urgency + scarcity)

    A chapter whose subject has no exam scores 0 on every component.
    """

    exam = find_relevant_exam(chapter.subject, exams)
    if exam is None:
        return ChapterWithPriority(chapter=chapter, priority=0.0, urgency=0.0, scarcity=0.0)

    days_until_exam = days_between(current_date, exam.date)
    available_days = count_available_days(current_date, exam.date, off_days)
    urgency = _window_ramp(days_until_exam)
    scarcity = _window_ramp(available_days)
    weight = type_weight(exam.exam_type)
    priority = chapter.left_hours * weight * (URGENCY_WEIGHT * urgency + SCARCITY_WEIGHT * scarcity)

    return ChapterWithPriority(
        chapter=chapter,
        priority=priority,
        urgency=urgency,
        scarcity=scarcity,
        exam_date=exam.date,
        days_until_exam=days_until_exam,
        available_days=available_days,
        type_weight=weight,
    )


def rank_chapters(
    chapters: Iterable[Chapter],
    exams: Sequence[Exam],
    off_days: Iterable[OffDay | date],
    current_date: date,
) -> list[ChapterWithPriority]:
    """Score chapters and sort by priority, highest first.

    ``sorted`` is stable, so equal priorities keep the input order.
    """

    blocked = off_day_dates(off_days)
    scored = [compute_priority(chapter, exams, blocked, current_date) for chapter in chapters]
    ranked = sorted(scored, key=lambda item: item.priority, reverse=True)
    logger.debug(
        "ranked %d chapters for %s: %s",
        len(ranked),
        current_date.isoformat(),
        ", ".join(f"{item.chapter.id}={item.priority:.2f}" for item in ranked),
    )
    return ranked
