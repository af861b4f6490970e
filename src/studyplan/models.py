"""Domain records shared by the engine, the runner and the CLI."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any


class InvalidInputError(ValueError):
    """Raised when a record cannot be turned into a typed model."""


class ChapterStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: Any) -> "ChapterStatus":
        if isinstance(raw, ChapterStatus):
            return raw
        label = str(raw or "").strip().lower()
        try:
            return _CHAPTER_STATUS_ALIASES[label]
        except KeyError:
            raise InvalidInputError(f"Unknown chapter status: {raw!r}") from None


_CHAPTER_STATUS_ALIASES: dict[str, ChapterStatus] = {
    "not-started": ChapterStatus.NOT_STARTED,
    "not_started": ChapterStatus.NOT_STARTED,
    "not-done": ChapterStatus.NOT_STARTED,
    "": ChapterStatus.NOT_STARTED,
    "in-progress": ChapterStatus.IN_PROGRESS,
    "in_progress": ChapterStatus.IN_PROGRESS,
    "study-in-progress": ChapterStatus.IN_PROGRESS,
    "study-completed": ChapterStatus.IN_PROGRESS,
    "revision-in-progress": ChapterStatus.IN_PROGRESS,
    "completed": ChapterStatus.COMPLETED,
    "complete": ChapterStatus.COMPLETED,
    "done": ChapterStatus.COMPLETED,
    "revision-completed": ChapterStatus.COMPLETED,
    "mastered": ChapterStatus.COMPLETED,
}


class ExamType(str, Enum):
    FINAL = "final"
    MID_TERM = "mid-term"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    WEEKLY = "weekly"

    @classmethod
    def parse(cls, raw: Any) -> "ExamType | None":
        """Return the matching type, or None for a label outside the table."""
        if isinstance(raw, ExamType):
            return raw
        label = str(raw or "").strip().lower().replace("_", "-")
        if label == "midterm":
            label = "mid-term"
        try:
            return cls(label)
        except ValueError:
            return None


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


def to_date(value: str | date | datetime) -> date:
    """Normalize a date-like value to a date-only value.

    Datetimes (and ISO datetime strings) keep their own calendar date; no
    timezone conversion is applied.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(f"Expected an ISO date, got {type(value).__name__}")
    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidInputError(f"Invalid date: {value!r}") from None


def _pick(record: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return default


def _as_hours(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(hours):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return hours


@dataclass(frozen=True, slots=True)
class Chapter:
    id: str
    subject: str
    name: str
    estimated_hours: float
    completed_hours: float = 0.0
    status: ChapterStatus = ChapterStatus.NOT_STARTED

    @property
    def left_hours(self) -> float:
        return max(0.0, self.estimated_hours - self.completed_hours)

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> "Chapter":
        return cls(
            id=str(_pick(record, "id", "chapter_id", "chapterId", default="")),
            subject=str(record.get("subject", "")),
            name=str(record.get("name", "")),
            estimated_hours=_as_hours(
                _pick(record, "estimated_hours", "estimatedHours", default=0), "estimated_hours"
            ),
            completed_hours=_as_hours(
                _pick(record, "completed_hours", "completedHours", default=0), "completed_hours"
            ),
            status=ChapterStatus.parse(record.get("status", ChapterStatus.NOT_STARTED)),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "name": self.name,
            "estimated_hours": self.estimated_hours,
            "completed_hours": self.completed_hours,
            "status": self.status.value,
        }


@dataclass(frozen=True, slots=True)
class Exam:
    date: date
    exam_type: ExamType | None
    subjects: tuple[str, ...]
    id: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> "Exam":
        subjects = record.get("subjects", [])
        if isinstance(subjects, str):
            subjects = [subjects]
        return cls(
            date=to_date(record.get("date")),
            exam_type=ExamType.parse(_pick(record, "type", "exam_type", "examType")),
            subjects=tuple(str(subject) for subject in subjects),
            id=str(record.get("id", "")),
            name=str(record.get("name", "")),
        )


@dataclass(frozen=True, slots=True)
class OffDay:
    date: date
    reason: str = ""
    id: str = ""

    @classmethod
    def from_dict(cls, record: dict[str, Any] | str) -> "OffDay":
        if isinstance(record, str):
            return cls(date=to_date(record))
        return cls(
            date=to_date(record.get("date")),
            reason=str(record.get("reason", "")),
            id=str(record.get("id", "")),
        )


@dataclass(frozen=True, slots=True)
class ChapterWithPriority:
    chapter: Chapter
    priority: float
    urgency: float
    scarcity: float
    exam_date: date | None = None
    days_until_exam: int | None = None
    available_days: int | None = None
    type_weight: float | None = None

    def as_dict(self) -> dict[str, Any]:
        payload = self.chapter.as_dict()
        payload.update(
            {
                "priority": self.priority,
                "urgency": self.urgency,
                "scarcity": self.scarcity,
            }
        )
        if self.exam_date is not None:
            payload.update(
                {
                    "exam_date": self.exam_date.isoformat(),
                    "days_until_exam": self.days_until_exam,
                    "available_days": self.available_days,
                    "type_weight": self.type_weight,
                }
            )
        return payload


@dataclass(frozen=True, slots=True)
class DailyTask:
    id: str
    chapter_id: str
    subject: str
    chapter_name: str
    allocated_minutes: float
    priority: float
    date: date
    status: TaskStatus = TaskStatus.PENDING
    actual_minutes: float | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "chapter_id": self.chapter_id,
            "subject": self.subject,
            "chapter_name": self.chapter_name,
            "allocated_minutes": self.allocated_minutes,
            "status": self.status.value,
            "priority": self.priority,
            "date": self.date.isoformat(),
        }
        if self.actual_minutes is not None:
            payload["actual_minutes"] = self.actual_minutes
        return payload

    def with_updates(self, **changes: Any) -> "DailyTask":
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class DailyLog:
    id: str
    date: date
    tasks: tuple[DailyTask, ...]
    total_allocated_minutes: float
    total_actual_minutes: float
    created_at: datetime

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "tasks": [task.as_dict() for task in self.tasks],
            "total_allocated_minutes": self.total_allocated_minutes,
            "total_actual_minutes": self.total_actual_minutes,
            "created_at": self.created_at.isoformat().replace("+00:00", "Z"),
        }


@dataclass(slots=True)
class SubjectStats:
    """Running totals for one subject; filled in by the aggregator."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    total_hours: float = 0.0
    completed_hours: float = 0.0

    @property
    def remaining_hours(self) -> float:
        return max(0.0, self.total_hours - self.completed_hours)

    @property
    def progress_percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.completed / self.total * 100)

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "in_progress": self.in_progress,
            "total_hours": self.total_hours,
            "completed_hours": self.completed_hours,
            "remaining_hours": self.remaining_hours,
            "progress_percentage": self.progress_percentage,
        }


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
    "to_date",
]
