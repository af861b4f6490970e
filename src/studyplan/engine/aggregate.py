"""Per-subject completion statistics."""

from __future__ import annotations

from collections.abc import Iterable

from studyplan.models import Chapter, ChapterStatus, SubjectStats


def aggregate_by_subject(chapters: Iterable[Chapter]) -> dict[str, SubjectStats]:
    """Fold chapters into stats keyed by the exact subject string.

    Keys appear in first-seen order; sort them if a stable display order
    matters.
    """

    stats: dict[str, SubjectStats] = {}
    for chapter in chapters:
        current = stats.setdefault(chapter.subject, SubjectStats())
        current.total += 1
        current.total_hours += chapter.estimated_hours
        current.completed_hours += chapter.completed_hours
        if chapter.status is ChapterStatus.COMPLETED:
            current.completed += 1
        elif chapter.status is ChapterStatus.IN_PROGRESS:
            current.in_progress += 1
    return stats
