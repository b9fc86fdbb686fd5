# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskflow.config import DEFAULT_LLM_BASE_URL, DEFAULT_LLM_MODEL, Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for name in list(os.environ):
        if name.startswith("TASKFLOW_") or name == "GROQ_API_KEY":
            monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()
    assert s.app_name == "taskflow"
    assert s.storage_key == "taskflow_tasks"
    assert s.storage_path == Path(".local/taskflow") / "local_storage.json"
    assert s.groq_api_key is None
    assert s.llm_base_url == DEFAULT_LLM_BASE_URL
    assert s.llm_model == DEFAULT_LLM_MODEL
    assert s.llm_temperature == pytest.approx(0.4)
    assert s.llm_max_tokens == 256
    assert s.ai_fallback_title_chars == 80


def test_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("GROQ_API_KEY", "plain-key")
    monkeypatch.setenv("TASKFLOW_LLM_MAX_TOKENS", "512")
    monkeypatch.setenv("TASKFLOW_LLM_TEMPERATURE", "not-a-number")
    monkeypatch.setenv("TASKFLOW_AI_FALLBACK_TITLE_CHARS", "0")

    s = Settings.from_env()
    assert s.storage_path == tmp_path / "local_storage.json"
    assert s.groq_api_key == "plain-key"
    assert s.llm_max_tokens == 512
    assert s.llm_temperature == pytest.approx(0.4)
    assert s.ai_fallback_title_chars == 1


def test_prefixed_key_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GROQ_API_KEY", "plain-key")
    monkeypatch.setenv("TASKFLOW_GROQ_API_KEY", "prefixed-key")
    assert Settings.from_env().groq_api_key == "prefixed-key"
