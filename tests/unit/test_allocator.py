from __future__ import annotations

import itertools
from datetime import date, datetime, timezone

import pytest

from studyplan.engine import allocate_ranked, generate_daily_plan, rank_chapters
from studyplan.models import Chapter, ChapterStatus, Exam, ExamType, OffDay, TaskStatus
from studyplan.reporting.decision_trace import DecisionTraceCollector

TODAY = date(2026, 3, 1)
MATH_FINAL = Exam(date=date(2026, 3, 11), exam_type=ExamType.FINAL, subjects=("Math",))


def _chapter(cid: str, subject: str = "Math", estimated: float = 10, completed: float = 0, **kw) -> Chapter:
    return Chapter(id=cid, subject=subject, name=f"Chapter {cid}", estimated_hours=estimated, completed_hours=completed, **kw)


def _ids():
    counter = itertools.count(1)
    return lambda: f"t{next(counter)}"


def test_reference_scenario_gets_two_sessions() -> None:
    tasks = generate_daily_plan([_chapter("m1", completed=2)], [MATH_FINAL], [], TODAY, 4, 60)

    assert len(tasks) == 1
    task = tasks[0]
    assert task.allocated_minutes == 120
    assert task.status is TaskStatus.PENDING
    assert task.chapter_id == "m1"
    assert task.subject == "Math"
    assert task.chapter_name == "Chapter m1"
    assert task.date == TODAY
    assert round(task.priority, 1) == 23.6


def test_off_day_blocks_everything() -> None:
    trace = DecisionTraceCollector(start_timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc))
    tasks = generate_daily_plan(
        [_chapter("m1")], [MATH_FINAL], [OffDay(date=TODAY, reason="Holiday")], TODAY, 4, 60, decision_trace=trace
    )

    assert tasks == []
    assert trace.as_list()[0]["applied_rules"] == ["RULE_OFF_DAY"]


def test_completed_chapters_are_never_planned() -> None:
    chapters = [
        _chapter("done", estimated=10, completed=3, status=ChapterStatus.COMPLETED),
        _chapter("open", estimated=1),
    ]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 4, 60)

    assert [task.chapter_id for task in tasks] == ["open"]
    assert tasks[0].allocated_minutes == 60


def test_unmatched_chapter_ranks_below_matched_one() -> None:
    chapters = [_chapter("h1", subject="History", estimated=5), _chapter("m1", completed=2)]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 4, 60)

    assert [task.chapter_id for task in tasks] == ["m1", "h1"]
    assert tasks[0].priority > 0
    assert tasks[1].priority == 0
    assert [task.allocated_minutes for task in tasks] == [120, 120]


def test_unmatched_chapter_gets_nothing_when_budget_runs_out() -> None:
    chapters = [_chapter("h1", subject="History", estimated=5), _chapter("m1", completed=2)]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 2, 60)

    assert [task.chapter_id for task in tasks] == ["m1"]


def test_one_hour_budget_yields_single_task_and_stops() -> None:
    trace = DecisionTraceCollector(start_timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc))
    chapters = [_chapter("m1"), _chapter("m2", estimated=8)]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 1, 60, decision_trace=trace)

    assert len(tasks) == 1
    assert tasks[0].chapter_id == "m1"
    assert tasks[0].allocated_minutes == 60
    assert trace.as_list()[-1]["applied_rules"] == ["RULE_BUDGET_EXHAUSTED"]


def test_leftover_below_half_session_is_not_scheduled() -> None:
    chapters = [_chapter("m1"), _chapter("m2", estimated=8), _chapter("m3", estimated=6)]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 2.25, 60)

    assert [task.chapter_id for task in tasks] == ["m1"]
    assert tasks[0].allocated_minutes == 120


def test_small_fragment_is_skipped_but_walk_continues() -> None:
    trace = DecisionTraceCollector(start_timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc))
    chapters = [_chapter("m1", estimated=2, completed=1.75), _chapter("h1", subject="History", estimated=3)]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 1, 60, decision_trace=trace)

    assert [task.chapter_id for task in tasks] == ["h1"]
    assert tasks[0].allocated_minutes == 60
    rules = [item["applied_rules"] for item in trace.as_list()]
    assert rules[0] == ["RULE_SKIP_FRAGMENT"]
    assert rules[1] == ["RULE_COMMIT_TASK"]


def test_partial_remaining_budget_is_used_when_above_half_session() -> None:
    chapters = [_chapter("m1"), _chapter("m2", estimated=8)]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 2, 45)

    assert [task.allocated_minutes for task in tasks] == [90, 30]
    assert sum(task.allocated_minutes for task in tasks) == 120


def test_chapter_with_no_remaining_work_is_skipped() -> None:
    chapters = [_chapter("m1", estimated=3, completed=3, status=ChapterStatus.IN_PROGRESS), _chapter("m2", estimated=1)]

    tasks = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 4, 60)

    assert [task.chapter_id for task in tasks] == ["m2"]


def test_task_ids_are_unique_and_injectable() -> None:
    chapters = [_chapter(f"c{i}", subject=s, estimated=2) for i, s in enumerate(["Math", "Physics", "Art"])]

    default_ids = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 6, 30)
    assert len({task.id for task in default_ids}) == len(default_ids) == 3

    injected = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 6, 30, id_factory=_ids())
    assert [task.id for task in injected] == ["t1", "t2", "t3"]

    again = generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 6, 30)
    assert {task.id for task in again}.isdisjoint({task.id for task in default_ids})


def test_inputs_are_not_mutated() -> None:
    chapters = [_chapter("m1", completed=2)]
    snapshot = list(chapters)

    generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 4, 60)

    assert chapters == snapshot
    assert chapters[0].completed_hours == 2


@pytest.mark.parametrize(
    ("daily_hours", "session_minutes"),
    [(0, 60), (-1, 60), (4, 0), (4, float("nan")), (float("inf"), 60), (4, float("inf"))],
)
def test_invalid_budget_fails_fast(daily_hours: float, session_minutes: float) -> None:
    with pytest.raises(ValueError):
        generate_daily_plan([_chapter("m1")], [MATH_FINAL], [], TODAY, daily_hours, session_minutes)


def test_allocate_ranked_passes_over_completed_chapters() -> None:
    chapters = [
        _chapter("done", estimated=20, completed=3, status=ChapterStatus.COMPLETED),
        _chapter("m1", completed=2),
        _chapter("h1", subject="History", estimated=5),
    ]
    ranked = rank_chapters(chapters, [MATH_FINAL], [], TODAY)

    tasks = allocate_ranked(ranked, [], TODAY, 4, 60, id_factory=_ids())

    assert [item.chapter.id for item in ranked] == ["done", "m1", "h1"]
    assert [task.chapter_id for task in tasks] == ["m1", "h1"]
    assert [task.id for task in tasks] == ["t1", "t2"]
    assert [task.as_dict() | {"id": None} for task in tasks] == [
        task.as_dict() | {"id": None} for task in generate_daily_plan(chapters, [MATH_FINAL], [], TODAY, 4, 60)
    ]


def test_allocate_ranked_respects_off_day() -> None:
    ranked = rank_chapters([_chapter("m1")], [MATH_FINAL], [], TODAY)

    assert allocate_ranked(ranked, [TODAY], TODAY, 4, 60) == []
