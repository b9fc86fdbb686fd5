# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.ai.synthesizer import TaskSynthesizer
from taskflow.core.state import AppState
from taskflow.storage.local_storage import MemoryStorage
from taskflow.tasks.task_store import TaskStore

from fakes import FakeCompletionClient


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    return SimpleNamespace(
        app_name="taskflow-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_path=tmp_path / "local_storage.json",
        storage_key="taskflow_tasks",
        groq_api_key="test-key",
        llm_base_url="https://llm.invalid/v1",
        llm_model="test-model",
        llm_temperature=0.4,
        llm_max_tokens=256,
        llm_connect_timeout=1.0,
        llm_read_timeout=2.0,
        ai_fallback_title_chars=80,
    )


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def store(storage: MemoryStorage) -> TaskStore:
    return TaskStore(storage, key="taskflow_tasks")


@pytest.fixture()
def llm() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, llm: FakeCompletionClient) -> AppState:
    """AppState wired with an in-memory store and a fake completion client."""
    return AppState(
        settings=settings,
        task_store=store,
        synthesizer=TaskSynthesizer(llm, settings),
    )
