# src/taskflow/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import date

from ..core.state import AppState
from ..errors import ValidationError
from .task_models import Task, TaskDraft, TaskStatus
from .task_stats import filter_by_status, sort_newest_first

logger = logging.getLogger(__name__)


def list_for_display(
    state: AppState,
    *,
    status: TaskStatus | str | None = None,
    include_deleted: bool = False,
) -> list[Task]:
    """Tasks as the task list shows them: optional status filter, newest first."""
    store = state.task_store
    tasks = store.list_all() if include_deleted else store.list_active()
    return sort_newest_first(filter_by_status(tasks, status))


def resolve_task_id(state: AppState, ref: str) -> str | None:
    """
    Resolve a full id or a unique id prefix to a task id.

    Returns None when nothing matches; raises ValidationError when the
    prefix is ambiguous.
    """
    ref = (ref or "").strip()
    if not ref:
        return None
    ids = [t.id for t in state.task_store.list_all()]
    if ref in ids:
        return ref
    matches = [i for i in ids if i.startswith(ref)]
    if len(matches) > 1:
        raise ValidationError(f"ambiguous task id prefix {ref!r} ({len(matches)} matches)")
    return matches[0] if matches else None


def create_task_with_ai(
    state: AppState,
    prompt: str,
    *,
    status: TaskStatus | str = TaskStatus.TODO,
    due_date: date | str | None = None,
) -> Task:
    """
    Synthesize a draft from `prompt`, then create it.

    Synthesis errors propagate before anything is written, so a failed call
    leaves the store untouched.
    """
    suggestion = state.synthesizer.synthesize(prompt)
    draft = TaskDraft.from_suggestion(suggestion, status=status, due_date=due_date)
    task = state.task_store.create(draft)
    logger.info("Created task from AI suggestion id=%s", task.id)
    return task
