"""Terminal rendering for plans and subject statistics."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table


def _minutes_label(minutes: float) -> str:
    hours, rest = divmod(int(round(minutes)), 60)
    if hours and rest:
        return f"{hours}h {rest:02d}m"
    if hours:
        return f"{hours}h"
    return f"{rest}m"


def _priority_color(priority: float) -> str:
    if priority >= 20:
        return "red"
    if priority >= 10:
        return "yellow"
    if priority > 0:
        return "green"
    return "dim"


def render_daily_plan(console: Console, result: dict[str, Any]) -> None:
    day = result.get("date", "")
    if result.get("is_off_day"):
        console.print(Panel(f"[bold]{day}[/bold] is an off-day. Nothing scheduled.", border_style="yellow"))
        return

    tasks = result.get("tasks", [])
    if not tasks:
        console.print(Panel(f"No study tasks for [bold]{day}[/bold].", border_style="blue"))
        return

    table = Table(title=f"Study plan for {day}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Subject", style="cyan")
    table.add_column("Chapter")
    table.add_column("Time", justify="right")
    table.add_column("Priority", justify="right")
    for idx, task in enumerate(tasks, 1):
        priority = float(task.get("priority", 0.0))
        table.add_row(
            str(idx),
            str(task.get("subject", "")),
            str(task.get("chapter_name", "")),
            _minutes_label(float(task.get("allocated_minutes", 0.0))),
            f"[{_priority_color(priority)}]{priority:.1f}[/{_priority_color(priority)}]",
        )
    console.print(table)

    summary = result.get("plan_summary", {})
    console.print(
        f"[bold]{_minutes_label(float(summary.get('allocated_minutes', 0.0)))}[/bold] planned of "
        f"{_minutes_label(float(summary.get('budget_minutes', 0.0)))}"
        f" ([dim]{_minutes_label(float(summary.get('unallocated_minutes', 0.0)))} left[/dim])"
    )


def render_subject_stats(console: Console, stats: dict[str, dict[str, Any]]) -> None:
    if not stats:
        console.print("[yellow]No chapters found.[/yellow]")
        return

    table = Table(title="Subjects")
    table.add_column("Subject", style="cyan")
    table.add_column("Chapters", justify="right")
    table.add_column("Done", justify="right", style="green")
    table.add_column("In progress", justify="right", style="yellow")
    table.add_column("Hours", justify="right")
    table.add_column("Progress")
    for subject in sorted(stats):
        entry = stats[subject]
        table.add_row(
            subject,
            str(entry.get("total", 0)),
            str(entry.get("completed", 0)),
            str(entry.get("in_progress", 0)),
            f"{float(entry.get('completed_hours', 0.0)):.1f}/{float(entry.get('total_hours', 0.0)):.1f}",
            ProgressBar(total=100, completed=int(entry.get("progress_percentage", 0)), width=20),
        )
    console.print(table)
