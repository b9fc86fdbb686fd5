# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from ..errors import CorruptStorage, ValidationError


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def parse(cls, raw: Any) -> TaskStatus:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValidationError(f"invalid status {raw!r} (expected one of: {allowed})") from None


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: Any) -> TaskPriority:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValidationError(f"invalid priority {raw!r} (expected one of: {allowed})") from None


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(raw: Any) -> datetime:
    """ISO-8601 string or datetime; naive values are taken as UTC."""
    value = raw if isinstance(raw, datetime) else datetime.fromisoformat(str(raw))
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def parse_due_date(raw: Any) -> date | None:
    """Accept a date, a datetime, an ISO 'YYYY-MM-DD' string, or None/''."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        raise ValidationError(f"invalid due_date {raw!r} (expected YYYY-MM-DD)") from None


def clean_title(raw: Any) -> str:
    title = str(raw or "").strip()
    if not title:
        raise ValidationError("title is required")
    return title


def clean_description(raw: Any) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None
    created_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_at": self.created_at.isoformat(),
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Task:
        """Decode one persisted record; any shape problem is CorruptStorage."""
        if not isinstance(data, dict):
            raise CorruptStorage(f"task record is not an object: {data!r}")
        try:
            task_id = str(data["id"])
            created_at = parse_timestamp(data["created_at"])
            raw_deleted = data.get("deleted_at")
            deleted_at = parse_timestamp(raw_deleted) if raw_deleted else None
            return cls(
                id=task_id,
                title=clean_title(data.get("title")),
                description=data.get("description"),
                status=TaskStatus.parse(data.get("status", TaskStatus.TODO)),
                priority=TaskPriority.parse(data.get("priority", TaskPriority.MEDIUM)),
                due_date=parse_due_date(data.get("due_date")),
                created_at=created_at,
                deleted_at=deleted_at,
            )
        except (KeyError, TypeError, ValueError) as e:
            # ValidationError is a ValueError too.
            raise CorruptStorage(f"invalid task record: {e}") from e


@dataclass(slots=True)
class AISuggestion:
    """Transient draft produced by the synthesizer; never persisted."""

    title: str
    description: str
    priority: TaskPriority


@dataclass(slots=True)
class TaskDraft:
    title: str
    description: str | None = None
    status: TaskStatus | str = TaskStatus.TODO
    priority: TaskPriority | str = TaskPriority.MEDIUM
    due_date: date | str | None = None

    @classmethod
    def from_suggestion(
        cls,
        suggestion: AISuggestion,
        *,
        status: TaskStatus | str = TaskStatus.TODO,
        due_date: date | str | None = None,
    ) -> TaskDraft:
        return cls(
            title=suggestion.title,
            description=suggestion.description,
            status=status,
            priority=suggestion.priority,
            due_date=due_date,
        )
