"""Exam-driven daily study planner."""

from .engine import aggregate_by_subject, compute_priority, generate_daily_plan
from .models import (
    Chapter,
    ChapterStatus,
    ChapterWithPriority,
    DailyLog,
    DailyTask,
    Exam,
    ExamType,
    InvalidInputError,
    OffDay,
    SubjectStats,
    TaskStatus,
)

__version__ = "0.1.0"

__all__ = [
    "Chapter",
    "ChapterStatus",
    "ChapterWithPriority",
    "DailyLog",
    "DailyTask",
    "Exam",
    "ExamType",
    "InvalidInputError",
    "OffDay",
    "SubjectStats",
    "TaskStatus",
    "aggregate_by_subject",
    "compute_priority",
    "generate_daily_plan",
]
