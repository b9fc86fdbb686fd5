# tests/test_local_storage.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskflow.core.ports import SlotStorage
from taskflow.storage.local_storage import LocalStorage, MemoryStorage


def test_local_storage_set_get_remove(tmp_path: Path) -> None:
    path = tmp_path / "local_storage.json"
    s = LocalStorage(path)

    assert s.get_item("a") is None
    s.set_item("a", "[1]")
    s.set_item("b", "x")
    assert s.get_item("a") == "[1]"

    # A second handle sees the same slots.
    assert LocalStorage(path).get_item("b") == "x"

    s.remove_item("a")
    assert s.get_item("a") is None
    assert json.loads(path.read_text("utf-8")) == {"b": "x"}
    assert not path.with_suffix(".tmp").exists()


def test_unreadable_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "local_storage.json"
    path.write_text("not json at all", "utf-8")
    s = LocalStorage(path)

    assert s.get_item("a") is None
    s.set_item("a", "v")
    assert json.loads(path.read_text("utf-8")) == {"a": "v"}


def test_non_object_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "local_storage.json"
    path.write_text("[1, 2]", "utf-8")
    assert LocalStorage(path).get_item("0") is None


def test_memory_storage() -> None:
    s = MemoryStorage({"k": "v"})
    assert s.get_item("k") == "v"
    s.set_item("k", "w")
    assert s.get_item("k") == "w"
    s.remove_item("k")
    s.remove_item("k")
    assert s.get_item("k") is None


@pytest.mark.parametrize("factory", [MemoryStorage, lambda: LocalStorage(Path("unused.json"))])
def test_backends_implement_slot_storage_port(factory) -> None:
    backend = factory()
    for name in ("get_item", "set_item", "remove_item"):
        assert name in SlotStorage.__dict__
        assert callable(getattr(backend, name))
