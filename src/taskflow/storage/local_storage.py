# src/taskflow/storage/local_storage.py

"""
Key/value slot storage, modelled on a browser profile's localStorage.

A LocalStorage file is one JSON object mapping slot names to serialized
strings. Every write replaces the whole file atomically (tmp + os.replace).
There is no locking: one writer per file, last writer wins.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class MemoryStorage:
    """In-process slot storage (tests, ephemeral sessions)."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._slots.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._slots[key] = value

    def remove_item(self, key: str) -> None:
        self._slots.pop(key, None)


class LocalStorage:
    """JSON-file backed slot storage."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def _read_slots(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Local storage file unreadable, treating as empty: %s", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Local storage file is not a JSON object, treating as empty: %s", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_slots(self, slots: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(slots, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # Best-effort: task notes may be personal, keep the file private on disk.
            os.chmod(self._path, 0o600)

    def get_item(self, key: str) -> str | None:
        return self._read_slots().get(key)

    def set_item(self, key: str, value: str) -> None:
        slots = self._read_slots()
        slots[key] = value
        self._write_slots(slots)
        logger.debug("Local storage slot written key=%s bytes=%d", key, len(value))

    def remove_item(self, key: str) -> None:
        slots = self._read_slots()
        if slots.pop(key, None) is not None:
            self._write_slots(slots)
