# src/taskflow/errors.py

"""
Error taxonomy shared by the task store and the AI synthesizer.

NotFound is not an exception: TaskStore.update returns None and
TaskStore.soft_delete returns False for unknown ids.
"""

from __future__ import annotations


class TaskflowError(Exception):
    """Base class for all taskflow errors."""


class ValidationError(TaskflowError, ValueError):
    """Caller-supplied data violates a task invariant (e.g. empty title)."""


class CorruptStorage(TaskflowError):
    """Persisted task payload cannot be decoded."""


class SynthesisUnavailable(TaskflowError, RuntimeError):
    """The external completion call could not be completed."""


class NotConfigured(SynthesisUnavailable):
    """Required AI configuration (e.g. the API key) is missing."""
