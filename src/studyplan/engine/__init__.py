"""Planning engine."""

from .aggregate import aggregate_by_subject
from .allocator import allocate_ranked, generate_daily_plan
from .calendar import count_available_days, is_off_day
from .daily_log import InvalidTransitionError, apply_completed_tasks, build_daily_log, update_daily_task
from .runner import run_planner
from .scoring import TYPE_WEIGHTS, URGENCY_WINDOW_DAYS, compute_priority, find_relevant_exam, rank_chapters

__all__ = [
    "InvalidTransitionError",
    "TYPE_WEIGHTS",
    "URGENCY_WINDOW_DAYS",
    "aggregate_by_subject",
    "allocate_ranked",
    "apply_completed_tasks",
    "build_daily_log",
    "compute_priority",
    "count_available_days",
    "find_relevant_exam",
    "generate_daily_plan",
    "is_off_day",
    "rank_chapters",
    "run_planner",
    "update_daily_task",
]
