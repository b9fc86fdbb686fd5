# src/taskflow/tasks/task_stats.py

"""Pure derivations over task lists (no I/O)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time

from .task_models import Task, TaskPriority, TaskStatus


def _due_moment(due: date) -> datetime:
    # A bare due date means midnight UTC at the start of that day.
    return datetime.combine(due, time.min, tzinfo=UTC)


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    """Not done, has a due date, and that date is strictly before now."""
    if task.status == TaskStatus.DONE or task.due_date is None:
        return False
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return _due_moment(task.due_date) < now


def filter_by_status(tasks: Iterable[Task], status: TaskStatus | str | None) -> list[Task]:
    """status None (or "all") keeps everything."""
    if status is None or status == "all":
        return list(tasks)
    wanted = TaskStatus.parse(status)
    return [t for t in tasks if t.status == wanted]


def sort_newest_first(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


@dataclass(slots=True)
class TaskStats:
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    done: int = 0
    overdue: int = 0
    by_priority: dict[TaskPriority, int] = field(
        default_factory=lambda: {p: 0 for p in TaskPriority}
    )

    @property
    def completion_rate(self) -> float:
        """Share of done tasks in [0, 1]; 0.0 for an empty list."""
        return self.done / self.total if self.total else 0.0


def compute_stats(tasks: Iterable[Task], now: datetime | None = None) -> TaskStats:
    """Dashboard counters over the given tasks (normally list_active())."""
    now = now or datetime.now(UTC)
    stats = TaskStats()
    for t in tasks:
        stats.total += 1
        if t.status == TaskStatus.TODO:
            stats.todo += 1
        elif t.status == TaskStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif t.status == TaskStatus.DONE:
            stats.done += 1
        stats.by_priority[t.priority] += 1
        if is_overdue(t, now):
            stats.overdue += 1
    return stats
