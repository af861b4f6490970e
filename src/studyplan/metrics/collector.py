"""Daily plan metrics."""

from __future__ import annotations

from typing import Any


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def collect_metrics(result: dict[str, Any]) -> dict[str, Any]:
    """Compute normalized metrics for one planner result, clamped to [0,1]."""
    tasks = [item for item in result.get("tasks", []) if isinstance(item, dict)]
    ranking = [item for item in result.get("ranking", []) if isinstance(item, dict)]
    summary = result.get("plan_summary", {}) if isinstance(result.get("plan_summary"), dict) else {}

    budget = float(summary.get("budget_minutes", 0.0) or 0.0)
    allocated = sum(float(item.get("allocated_minutes", 0.0) or 0.0) for item in tasks)

    open_items = [item for item in ranking if item.get("status") != "completed"]
    open_subjects = {str(item.get("subject", "")) for item in open_items}
    planned_subjects = {str(item.get("subject", "")) for item in tasks}
    planned_chapters = {str(item.get("chapter_id", "")) for item in tasks}

    total_priority = sum(float(item.get("priority", 0.0) or 0.0) for item in open_items)
    planned_priority = sum(
        float(item.get("priority", 0.0) or 0.0)
        for item in open_items
        if str(item.get("id", "")) in planned_chapters
    )

    largest_task = max((float(item.get("allocated_minutes", 0.0) or 0.0) for item in tasks), default=0.0)

    return {
        "budget_utilization": _clamp01(allocated / budget) if budget > 0 else 0.0,
        "subject_coverage": _clamp01(len(planned_subjects) / len(open_subjects)) if open_subjects else 0.0,
        "chapter_coverage": _clamp01(len(planned_chapters) / len(open_items)) if open_items else 0.0,
        "priority_coverage": _clamp01(planned_priority / total_priority) if total_priority > 0 else 0.0,
        "largest_task_share": _clamp01(largest_task / allocated) if allocated > 0 else 0.0,
        "tasks_count": len(tasks),
        "unscheduled_chapters": max(0, len(open_items) - len(planned_chapters)),
    }
