from __future__ import annotations

import json
from pathlib import Path

import pytest

from contracts.errors import ScaffoldLocked
from scaffold import journal
from scaffold.lock import LOCK_FILENAME, scaffold_lock


def test_lock_is_exclusive_and_released(tmp_path: Path) -> None:
    with scaffold_lock(tmp_path) as path:
        assert path == tmp_path / LOCK_FILENAME
        with pytest.raises(ScaffoldLocked):
            with scaffold_lock(tmp_path):
                pass

    with scaffold_lock(tmp_path):
        pass


def test_lock_is_released_when_the_body_raises(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        with scaffold_lock(tmp_path):
            raise RuntimeError("step failed")

    with scaffold_lock(tmp_path):
        pass


def test_lock_creates_the_units_root(tmp_path: Path) -> None:
    root = tmp_path / "a" / "b"
    with scaffold_lock(root):
        assert root.is_dir()


def test_journal_disabled_by_default() -> None:
    assert journal.is_enabled() is False
    assert journal.append_event({"event": "scaffold.prepare"}) is None


def test_journal_appends_jsonl_with_timestamp(tmp_path: Path) -> None:
    journal.configure(tmp_path)
    path = journal.append_event({"event": "scaffold.prepare", "step": "init-unit", "status": "applied"})
    journal.append_event({"event": "scaffold.prepare", "step": "install-entry", "status": "applied"})

    assert path is not None and path.name == "scaffold_00.jsonl"
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [line["step"] for line in lines] == ["init-unit", "install-entry"]
    assert all("ts" in line for line in lines)


def test_journal_rotates_when_full(tmp_path: Path) -> None:
    journal.configure(tmp_path, max_bytes=10)
    first = journal.append_event({"event": "scaffold.prepare", "step": "a"})
    second = journal.append_event({"event": "scaffold.prepare", "step": "b"})
    assert first is not None and second is not None
    assert first != second
    assert second.name == "scaffold_01.jsonl"
