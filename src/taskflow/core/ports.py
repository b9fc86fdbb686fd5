# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The store and the synthesizer depend on Protocols instead of concrete
implementations, so storage backends and LLM providers stay swappable and
tests can pass in fakes.
"""

from typing import Protocol

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class SlotStorage(Protocol):
    """localStorage-like key/value slots holding serialized strings."""

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class CompletionClient(Protocol):
    """
    Single-shot chat completion (OpenAI-compatible).

    Implementations raise NotConfigured before any request when settings are
    missing, and SynthesisUnavailable when the request cannot be completed.
    """

    def complete(self, messages: list[ChatMessage], system_prompt: str) -> str: ...

