# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..ai.synthesizer import TaskSynthesizer
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (real Settings or a test SimpleNamespace).
    settings: object

    task_store: TaskStore
    synthesizer: TaskSynthesizer
