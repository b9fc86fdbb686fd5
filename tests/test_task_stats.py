# tests/test_task_stats.py

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from taskflow.errors import ValidationError
from taskflow.tasks.task_models import Task, TaskPriority, TaskStatus
from taskflow.tasks.task_stats import compute_stats, filter_by_status, is_overdue, sort_newest_first

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def make_task(
    task_id: str,
    *,
    status: TaskStatus = TaskStatus.TODO,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due: date | None = None,
    created_at: datetime = NOW,
) -> Task:
    return Task(
        id=task_id,
        title=f"task {task_id}",
        description=None,
        status=status,
        priority=priority,
        due_date=due,
        created_at=created_at,
    )


def test_open_task_due_yesterday_is_overdue() -> None:
    assert is_overdue(make_task("1", due=date(2026, 3, 9)), NOW)


def test_open_task_due_today_counts_from_start_of_day() -> None:
    # Due date means 00:00 UTC of that day, which is before noon.
    assert is_overdue(make_task("1", due=date(2026, 3, 10)), NOW)
    assert not is_overdue(make_task("1", due=date(2026, 3, 10)), datetime(2026, 3, 10, tzinfo=UTC))


def test_future_or_missing_due_date_is_not_overdue() -> None:
    assert not is_overdue(make_task("1", due=date(2026, 3, 11)), NOW)
    assert not is_overdue(make_task("1"), NOW)


@pytest.mark.parametrize("due", [date(2000, 1, 1), date(2026, 3, 9), None])
def test_done_task_is_never_overdue(due) -> None:
    assert not is_overdue(make_task("1", status=TaskStatus.DONE, due=due), NOW)


def test_naive_now_is_treated_as_utc() -> None:
    assert is_overdue(make_task("1", due=date(2026, 3, 9)), NOW.replace(tzinfo=None))


def test_filter_by_status() -> None:
    tasks = [
        make_task("a", status=TaskStatus.TODO),
        make_task("b", status=TaskStatus.IN_PROGRESS),
        make_task("c", status=TaskStatus.DONE),
    ]
    assert [t.id for t in filter_by_status(tasks, "done")] == ["c"]
    assert [t.id for t in filter_by_status(tasks, TaskStatus.IN_PROGRESS)] == ["b"]
    assert len(filter_by_status(tasks, None)) == 3
    assert len(filter_by_status(tasks, "all")) == 3
    with pytest.raises(ValidationError):
        filter_by_status(tasks, "blocked")


def test_sort_newest_first() -> None:
    tasks = [
        make_task("old", created_at=NOW - timedelta(days=2)),
        make_task("new", created_at=NOW),
        make_task("mid", created_at=NOW - timedelta(days=1)),
    ]
    assert [t.id for t in sort_newest_first(tasks)] == ["new", "mid", "old"]


def test_compute_stats() -> None:
    tasks = [
        make_task("a", status=TaskStatus.TODO, priority=TaskPriority.HIGH, due=date(2026, 1, 1)),
        make_task("b", status=TaskStatus.IN_PROGRESS, due=date(2027, 1, 1)),
        make_task("c", status=TaskStatus.DONE, priority=TaskPriority.LOW, due=date(2026, 1, 1)),
        make_task("d", status=TaskStatus.DONE),
    ]
    stats = compute_stats(tasks, NOW)

    assert stats.total == 4
    assert (stats.todo, stats.in_progress, stats.done) == (1, 1, 2)
    assert stats.overdue == 1
    assert stats.by_priority == {
        TaskPriority.LOW: 1,
        TaskPriority.MEDIUM: 2,
        TaskPriority.HIGH: 1,
    }
    assert stats.completion_rate == pytest.approx(0.5)


def test_compute_stats_empty() -> None:
    stats = compute_stats([], NOW)
    assert stats.total == 0
    assert stats.completion_rate == 0.0
