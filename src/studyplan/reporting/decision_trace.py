"""Decision trace for allocator runtime events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

RULE_OFF_DAY = "RULE_OFF_DAY"
RULE_COMMIT_TASK = "RULE_COMMIT_TASK"
RULE_SESSION_CAP = "RULE_SESSION_CAP"
RULE_SKIP_NO_REMAINING_WORK = "RULE_SKIP_NO_REMAINING_WORK"
RULE_SKIP_FRAGMENT = "RULE_SKIP_FRAGMENT"
RULE_BUDGET_EXHAUSTED = "RULE_BUDGET_EXHAUSTED"


@dataclass(slots=True)
class DecisionTraceCollector:
    """Collect one record per chapter the allocator looks at."""

    start_timestamp: datetime
    _sequence: int = 0
    _items: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.start_timestamp.tzinfo is None:
            self.start_timestamp = self.start_timestamp.replace(tzinfo=timezone.utc)

    def record(
        self,
        *,
        day: str,
        chapter_id: str | None,
        priority: float,
        allocated_minutes: float,
        remaining_minutes: float,
        applied_rules: list[str],
        note: str = "",
    ) -> None:
        self._sequence += 1
        timestamp = self.start_timestamp + timedelta(milliseconds=self._sequence)
        self._items.append(
            {
                "decision_id": f"d-{self._sequence:06d}",
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
                "date": day,
                "chapter_id": chapter_id,
                "priority": float(priority),
                "allocated_minutes": float(allocated_minutes),
                "remaining_minutes": float(remaining_minutes),
                "applied_rules": list(applied_rules),
                "note": note,
            }
        )

    def __len__(self) -> int:
        return len(self._items)

    def as_list(self) -> list[dict[str, Any]]:
        """Return trace in recording order."""
        return sorted(self._items, key=lambda item: str(item["decision_id"]))
