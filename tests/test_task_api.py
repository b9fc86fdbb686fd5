# tests/test_task_api.py

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest

from taskflow.errors import SynthesisUnavailable, ValidationError
from taskflow.tasks.task_api import create_task_with_ai, list_for_display, resolve_task_id
from taskflow.tasks.task_models import TaskPriority, TaskStatus


def test_list_for_display_is_newest_first_and_filtered(state) -> None:
    store = state.task_store
    a = store.create(title="a", status="todo")
    b = store.create(title="b", status="done")
    c = store.create(title="c", status="todo")
    # Force a distinct ordering independent of clock resolution.
    base = datetime(2026, 1, 1, tzinfo=UTC)
    for i, t in enumerate((a, b, c)):
        store._tasks[store._index_of(t.id)].created_at = base + timedelta(minutes=i)
    store.soft_delete(c.id)

    assert [t.title for t in list_for_display(state)] == ["b", "a"]
    assert [t.title for t in list_for_display(state, status="todo")] == ["a"]
    assert [t.title for t in list_for_display(state, include_deleted=True)] == ["c", "b", "a"]


def test_resolve_task_id_by_prefix(state) -> None:
    task = state.task_store.create(title="x")
    assert resolve_task_id(state, task.id) == task.id
    assert resolve_task_id(state, task.id[:8]) == task.id
    assert resolve_task_id(state, "zzzz-not-an-id") is None
    assert resolve_task_id(state, "") is None


def test_resolve_task_id_ambiguous_prefix(state) -> None:
    store = state.task_store
    store.create(title="x")
    store.create(title="y")
    for i, t in enumerate(store._tasks):
        t.id = f"abc{i}-{t.id}"

    with pytest.raises(ValidationError):
        resolve_task_id(state, "abc")
    assert resolve_task_id(state, "abc1") == store._tasks[1].id


def test_create_task_with_ai(state, llm) -> None:
    llm.next_text = json.dumps(
        {"title": "Book dentist", "description": "Call the clinic for a checkup.", "priority": "low"}
    )
    task = create_task_with_ai(state, "dentist appointment", due_date="2030-05-01")

    assert task.title == "Book dentist"
    assert task.description == "Call the clinic for a checkup."
    assert task.priority is TaskPriority.LOW
    assert task.status is TaskStatus.TODO
    assert task.due_date.isoformat() == "2030-05-01"
    assert state.task_store.list_active() == [task]


def test_create_task_with_ai_failure_writes_nothing(state, llm) -> None:
    llm.error = SynthesisUnavailable("down")
    with pytest.raises(SynthesisUnavailable):
        create_task_with_ai(state, "anything")
    assert state.task_store.list_all() == []
