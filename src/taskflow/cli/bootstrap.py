# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires concrete implementations into AppState (storage/store/LLM client).
"""

from __future__ import annotations

import logging

from ..ai.synthesizer import TaskSynthesizer
from ..config import get_settings
from ..core.ports import SlotStorage
from ..core.state import AppState
from ..llm.client import OpenAICompatibleClient
from ..storage.local_storage import LocalStorage
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, storage: SlotStorage | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and storage) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back
    to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = LocalStorage(settings.storage_path)

    state = AppState(
        settings=settings,
        task_store=TaskStore(storage, key=settings.storage_key),
        synthesizer=TaskSynthesizer(OpenAICompatibleClient(settings), settings),
    )
    if not getattr(settings, "groq_api_key", None):
        logger.info("AI synthesizer not configured (no API key); /ai will be unavailable.")
    return state
