# src/taskflow/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import cast

from ..core.state import AppState
from ..errors import SynthesisUnavailable, ValidationError
from ..llm.client import friendly_error_message
from ..tasks.task_api import create_task_with_ai, list_for_display, resolve_task_id
from ..tasks.task_models import Task, TaskStatus
from ..tasks.task_stats import compute_stats, is_overdue

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        ValidationError and SynthesisUnavailable are turned into replies;
        anything else propagates to the caller.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValidationError as e:
            return f"Invalid input: {e}"
        except SynthesisUnavailable as e:
            logger.info("AI unavailable: %s", e)
            return f"[AI] {friendly_error_message(e)}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_task(task: Task, now: datetime) -> str:
    flags = []
    if task.deleted_at is not None:
        flags.append("deleted")
    elif is_overdue(task, now):
        flags.append("OVERDUE")
    due = f" due {task.due_date.isoformat()}" if task.due_date else ""
    flag_str = f" [{', '.join(flags)}]" if flags else ""
    line = f"{task.id[:8]}  {task.status.value:<11} {task.priority.value:<6} {task.title}{due}{flag_str}"
    if task.description:
        line += f"\n          {task.description}"
    return line


def _lookup_task_id(state: AppState, args: list[str]) -> str | None:
    if not args:
        return None
    return resolve_task_id(state, args[0])


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    ai = "ON" if getattr(s, "groq_api_key", None) else "OFF (no API key)"
    return (
        "Status:\n"
        f"  Storage: {getattr(s, 'storage_path', '?')} (slot {getattr(s, 'storage_key', '?')})\n"
        f"  Tasks: {state.task_store.count()} stored, {len(state.task_store.list_active())} active\n"
        f"  AI: {ai}, model {getattr(s, 'llm_model', '?')}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                 -> active tasks, newest first
    /list todo|in_progress|done
    /list all --deleted   -> include soft-deleted tasks
    """
    include_deleted = "--deleted" in args
    rest = [a for a in args if a != "--deleted"]
    status = rest[0].lower() if rest else None

    tasks = list_for_display(state, status=status, include_deleted=include_deleted)
    if not tasks:
        if status and status != "all":
            return f"No {status.replace('_', ' ')} tasks."
        return "No tasks yet."

    now = datetime.now(UTC)
    return "\n".join(_format_task(t, now) for t in tasks)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title> [| description]"""
    text = " ".join(args)
    title, _, description = text.partition("|")
    task = state.task_store.create(title=title, description=description)
    return f"Created {task.id[:8]}: {task.title}"


def cmd_ai(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/ai <prompt> -> synthesize a draft with the LLM and create it."""
    prompt = " ".join(args).strip()
    if not prompt:
        return "Usage: /ai <describe what you want to do>"

    if emit:
        with contextlib.suppress(Exception):
            emit("[AI] Generating task details...")

    task = create_task_with_ai(state, prompt)
    lines = [f"Created {task.id[:8]}: {task.title} ({task.priority.value})"]
    if task.description:
        lines.append(f"  {task.description}")
    return "\n".join(lines)


def cmd_set(state: AppState, args: list[str]) -> str:
    """/set <id> field=value [field=value ...]"""
    usage = "Usage: /set <id> title=... status=todo|in_progress|done priority=low|medium|high due=YYYY-MM-DD"
    if len(args) < 2:
        return usage
    task_id = _lookup_task_id(state, args)
    if task_id is None:
        return f"Task not found: {args[0]}"

    patch: dict[str, str | None] = {}
    key: str | None = None
    for token in args[1:]:
        if "=" in token:
            key, _, value = token.partition("=")
            key = {"due": "due_date", "desc": "description"}.get(key.lower(), key.lower())
            patch[key] = value
        elif key is not None:
            # Values with spaces: "title=Buy milk" arrives as two tokens.
            patch[key] = f"{patch[key]} {token}"
        else:
            return usage

    updated = state.task_store.update(task_id, patch)
    if updated is None:
        return f"Task not found: {args[0]}"
    return f"Updated {updated.id[:8]}: {updated.title} [{updated.status.value}, {updated.priority.value}]"


def _set_status(state: AppState, args: list[str], status: TaskStatus) -> str:
    task_id = _lookup_task_id(state, args)
    if task_id is None:
        return f"Task not found: {args[0]}" if args else "Usage: give a task id."
    updated = state.task_store.update(task_id, status=status)
    if updated is None:
        return f"Task not found: {args[0]}"
    return f"{updated.id[:8]} is now {status.value.replace('_', ' ')}."


def cmd_start(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.IN_PROGRESS)


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.DONE)


def cmd_rm(state: AppState, args: list[str]) -> str:
    task_id = _lookup_task_id(state, args)
    if task_id is None or not state.task_store.soft_delete(task_id):
        return f"Task not found: {args[0]}" if args else "Usage: /rm <id>"
    return f"Deleted {task_id[:8]}."


def cmd_stats(state: AppState, args: list[str]) -> str:
    st = compute_stats(state.task_store.list_active())
    prio = ", ".join(f"{p.value} {n}" for p, n in st.by_priority.items())
    return (
        "Stats:\n"
        f"  Total: {st.total}\n"
        f"  To do: {st.todo}  In progress: {st.in_progress}  Done: {st.done}\n"
        f"  Overdue: {st.overdue}\n"
        f"  Priority: {prio}\n"
        f"  Completion: {st.completion_rate:.0%}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage and AI settings.")
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|todo|in_progress|done] [--deleted].", aliases=["ls"]
)
registry.register("add", cmd_add, help_text="Create a task: /add <title> [| description].")
registry.register("ai", cmd_ai, help_text="Create a task from a description with AI: /ai <prompt>.")
registry.register("set", cmd_set, help_text="Edit a task: /set <id> field=value ...")
registry.register("start", cmd_start, help_text="Mark a task in progress: /start <id>.")
registry.register("done", cmd_done, help_text="Mark a task done: /done <id>.")
registry.register("rm", cmd_rm, help_text="Delete a task (soft): /rm <id>.", aliases=["delete"])
registry.register("stats", cmd_stats, help_text="Show task counters (status, overdue, priority).")
