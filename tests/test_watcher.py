# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the watchdog-backed change watcher."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from clangbatch.core.models import ChangeEvent
from clangbatch.host import ChangeWatcher
from clangbatch.host.watcher import DELETED, MODIFIED


def _wait_for(watcher: ChangeWatcher, kind: str, name: str, timeout: float = 5.0) -> ChangeEvent | None:
    while True:
        event = watcher.next_event(timeout=timeout)
        if event is None:
            return None
        if event.kind == kind and event.path.name == name:
            return event


@pytest.mark.parametrize("root", [None, "", "   "])
def test_blank_root_is_a_no_op(root: str | None) -> None:
    created: list[object] = []

    def _factory():
        created.append(object())
        raise AssertionError("observer must not be created")

    watcher = ChangeWatcher(observer_factory=_factory)

    assert watcher.run(root) is False
    assert not watcher.running
    assert created == []
    watcher.stop()


def test_reports_modified_and_deleted_sources(tmp_path: Path) -> None:
    nested = tmp_path / "src" / "core"
    nested.mkdir(parents=True)
    target = nested / "main.cpp"
    target.write_text("int main() {}\n", encoding="utf-8")

    with ChangeWatcher() as watcher:
        assert watcher.run(tmp_path)
        assert watcher.running
        target.write_text("int main() { return 1; }\n", encoding="utf-8")
        modified = _wait_for(watcher, MODIFIED, "main.cpp")
        target.unlink()
        deleted = _wait_for(watcher, DELETED, "main.cpp")

    assert modified is not None
    assert modified.path == target
    assert deleted is not None
    assert not watcher.running


def test_non_matching_files_are_ignored(tmp_path: Path) -> None:
    header = tmp_path / "api.h"
    header.write_text("#pragma once\n", encoding="utf-8")
    source = tmp_path / "impl.cpp"
    source.write_text("\n", encoding="utf-8")

    with ChangeWatcher() as watcher:
        watcher.run(str(tmp_path))
        header.write_text("#pragma once\nint x;\n", encoding="utf-8")
        source.write_text("int y;\n", encoding="utf-8")
        assert _wait_for(watcher, MODIFIED, "impl.cpp") is not None
        remaining = watcher.drain()

    assert all(event.path.suffix == ".cpp" for event in remaining)


def test_handler_receives_events(tmp_path: Path) -> None:
    source = tmp_path / "a.cpp"
    source.write_text("\n", encoding="utf-8")
    seen = threading.Event()
    events: list[ChangeEvent] = []

    def _handler(event: ChangeEvent) -> None:
        events.append(event)
        seen.set()

    with ChangeWatcher(handler=_handler) as watcher:
        watcher.run(tmp_path)
        source.unlink()
        assert seen.wait(5.0)

    assert any(event.kind == DELETED for event in events)


def test_stop_is_idempotent_and_drain_empties_queue(tmp_path: Path) -> None:
    watcher = ChangeWatcher()
    watcher.run(tmp_path)
    watcher._publish(MODIFIED, str(tmp_path / "x.cpp"))

    watcher.stop()
    watcher.stop()

    assert watcher.drain() == [ChangeEvent(kind=MODIFIED, path=tmp_path / "x.cpp")]
    assert watcher.drain() == []
