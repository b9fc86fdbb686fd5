# src/taskflow/tasks/task_store.py

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..config import DEFAULT_STORAGE_KEY
from ..core.ports import SlotStorage
from ..errors import CorruptStorage, ValidationError
from .task_models import (
    Task,
    TaskDraft,
    TaskPriority,
    TaskStatus,
    clean_description,
    clean_title,
    parse_due_date,
    parse_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

_PATCHABLE = frozenset({"title", "description", "status", "priority", "due_date", "deleted_at"})
_IMMUTABLE = frozenset({"id", "created_at"})


def _parse_timestamp(raw: Any) -> datetime:
    try:
        return parse_timestamp(raw)
    except ValueError:
        raise ValidationError(f"invalid timestamp {raw!r}") from None


def encode_tasks(tasks: list[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)


def decode_tasks(raw: str | None) -> list[Task]:
    """
    Decode a persisted slot value.

    None / empty means "no data yet". Anything else that is not a JSON array
    of valid task records raises CorruptStorage.
    """
    if raw is None or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise CorruptStorage(f"task slot is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise CorruptStorage("task slot is not a JSON array")
    return [Task.from_dict(item) for item in data]


class TaskStore:
    """
    Local task store.

    - The whole collection lives in one storage slot as a JSON array.
    - An in-memory cache is loaded once at construction and written through
      on every mutation (create / update / soft_delete).
    - Records are never physically removed; soft_delete sets deleted_at.

    Thread-safety: none. One writer per storage slot.
    """

    def __init__(self, storage: SlotStorage, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._tasks: list[Task] = []
        self.reload()
        logger.info("TaskStore ready key=%s total=%s", self._key, len(self._tasks))

    def close(self) -> None:
        """Compatibility hook for shutdown (writes are already flushed)."""
        return

    # ---- low-level helpers ----

    def _load(self) -> list[Task]:
        try:
            return decode_tasks(self._storage.get_item(self._key))
        except CorruptStorage as e:
            logger.warning("Task storage unreadable, starting empty key=%s: %s", self._key, e)
            return []
        except OSError:
            logger.exception("Task storage read failed key=%s", self._key)
            return []

    def _commit(self, tasks: list[Task]) -> None:
        """Write `tasks` to the slot, then adopt them as the cache.

        A failed write raises and leaves the cache as it was.
        """
        self._storage.set_item(self._key, encode_tasks(tasks))
        self._tasks = tasks

    def _index_of(self, task_id: str) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return -1

    def _new_id(self) -> str:
        while True:
            task_id = str(uuid.uuid4())
            if self._index_of(task_id) == -1:
                return task_id

    # ---- public API ----

    def reload(self) -> None:
        """Re-read the storage slot; a corrupt slot reads as empty."""
        self._tasks = self._load()

    def count(self) -> int:
        return len(self._tasks)

    def list_all(self) -> list[Task]:
        """Every record, soft-deleted included, in storage order."""
        return [replace(t) for t in self._tasks]

    def list_active(self) -> list[Task]:
        return [t for t in self.list_all() if t.deleted_at is None]

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return replace(self._tasks[idx]) if idx != -1 else None

    def create(self, draft: TaskDraft | None = None, **fields: Any) -> Task:
        """
        Create a task from a TaskDraft or keyword fields
        (title, description, status, priority, due_date).
        """
        if draft is not None:
            if fields:
                raise TypeError("pass either a TaskDraft or keyword fields, not both")
            fields = {
                "title": draft.title,
                "description": draft.description,
                "status": draft.status,
                "priority": draft.priority,
                "due_date": draft.due_date,
            }

        unknown = set(fields) - {"title", "description", "status", "priority", "due_date"}
        if unknown:
            raise ValidationError(f"unknown task fields: {', '.join(sorted(unknown))}")

        task = Task(
            id=self._new_id(),
            title=clean_title(fields.get("title")),
            description=clean_description(fields.get("description")),
            status=TaskStatus.parse(fields.get("status") or TaskStatus.TODO),
            priority=TaskPriority.parse(fields.get("priority") or TaskPriority.MEDIUM),
            due_date=parse_due_date(fields.get("due_date")),
            created_at=utc_now(),
            deleted_at=None,
        )

        self._commit([*self._tasks, task])
        logger.debug(
            "Task created id=%s status=%s priority=%s due=%s",
            task.id,
            task.status.value,
            task.priority.value,
            task.due_date,
        )
        return replace(task)

    def update(self, task_id: str, patch: dict[str, Any] | None = None, **fields: Any) -> Task | None:
        """
        Shallow-merge `patch` over the stored record.

        Returns None when no record has this id. id / created_at in the patch
        are ignored; deleted_at can be set but never cleared.
        """
        merged: dict[str, Any] = {**(patch or {}), **fields}

        idx = self._index_of(task_id)
        if idx == -1:
            logger.debug("Task update: id=%s not found", task_id)
            return None

        for name in _IMMUTABLE & merged.keys():
            merged.pop(name)

        unknown = set(merged) - _PATCHABLE
        if unknown:
            raise ValidationError(f"unknown task fields: {', '.join(sorted(unknown))}")

        current = self._tasks[idx]
        changes: dict[str, Any] = {}

        if "title" in merged:
            changes["title"] = clean_title(merged["title"])
        if "description" in merged:
            changes["description"] = clean_description(merged["description"])
        if "status" in merged:
            changes["status"] = TaskStatus.parse(merged["status"])
        if "priority" in merged:
            changes["priority"] = TaskPriority.parse(merged["priority"])
        if "due_date" in merged:
            changes["due_date"] = parse_due_date(merged["due_date"])
        if "deleted_at" in merged:
            if merged["deleted_at"] is None:
                if current.deleted_at is not None:
                    raise ValidationError("deleted_at cannot be cleared")
            elif current.deleted_at is None:
                changes["deleted_at"] = _parse_timestamp(merged["deleted_at"])

        updated = replace(current, **changes)
        tasks = list(self._tasks)
        tasks[idx] = updated
        self._commit(tasks)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        return replace(updated)

    def soft_delete(self, task_id: str) -> bool:
        """
        Mark the task deleted. Idempotent: an already-deleted task keeps its
        first deleted_at. Returns False when no record has this id.
        """
        idx = self._index_of(task_id)
        if idx == -1:
            logger.debug("Task soft_delete: id=%s not found", task_id)
            return False

        current = self._tasks[idx]
        if current.deleted_at is not None:
            return True

        tasks = list(self._tasks)
        tasks[idx] = replace(current, deleted_at=utc_now())
        self._commit(tasks)
        logger.debug("Task soft-deleted id=%s", task_id)
        return True
