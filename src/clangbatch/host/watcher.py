# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Report external edits to source files while a fix batch runs."""

from __future__ import annotations

import os
import queue
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from types import TracebackType
from typing import Final

from watchdog.events import FileSystemEvent, PatternMatchingEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from ..core.models import ChangeEvent

DEFAULT_WATCH_PATTERNS: Final[tuple[str, ...]] = ("*.cpp",)
MODIFIED: Final[str] = "modified"
DELETED: Final[str] = "deleted"

ChangeHandler = Callable[[ChangeEvent], None]


class _QueueingHandler(PatternMatchingEventHandler):
    """Forward matching modify/delete events to the owning watcher."""

    def __init__(self, watcher: ChangeWatcher, patterns: Sequence[str]) -> None:
        super().__init__(patterns=list(patterns), ignore_directories=True, case_sensitive=False)
        self._watcher = watcher

    def on_modified(self, event: FileSystemEvent) -> None:
        self._watcher._publish(MODIFIED, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._watcher._publish(DELETED, event.src_path)


class ChangeWatcher:
    """Recursively observe a directory for modified or deleted source files.

    Events are produced on the watchdog observer thread and pushed onto a
    thread-safe queue that the main flow drains with :meth:`drain`. An
    optional ``handler`` is also invoked on the observer thread, so it must
    synchronise any state it shares with the main flow. The watcher only
    reports; it never aborts or merges anything.
    """

    def __init__(
        self,
        *,
        patterns: Sequence[str] = DEFAULT_WATCH_PATTERNS,
        handler: ChangeHandler | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._patterns = tuple(patterns)
        self._handler = handler
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._events: queue.Queue[ChangeEvent] = queue.Queue()
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        """Return ``True`` while an observer is active."""

        with self._lock:
            return self._observer is not None

    def run(self, root: Path | str | None) -> bool:
        """Start watching ``root`` recursively.

        Args:
            root: Directory to observe. ``None`` or a blank string is a no-op.

        Returns:
            bool: ``True`` when an observer was started.
        """

        if root is None or not str(root).strip():
            return False
        with self._lock:
            if self._observer is not None:
                return True
            observer = self._observer_factory()
            observer.schedule(_QueueingHandler(self, self._patterns), str(root), recursive=True)
            observer.daemon = True
            observer.start()
            self._observer = observer
        return True

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the observer and wait for its thread to finish."""

        with self._lock:
            observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout)

    def drain(self) -> list[ChangeEvent]:
        """Return and remove every queued event in arrival order."""

        drained: list[ChangeEvent] = []
        while True:
            try:
                drained.append(self._events.get_nowait())
            except queue.Empty:
                return drained

    def next_event(self, timeout: float | None = None) -> ChangeEvent | None:
        """Block up to ``timeout`` seconds for the next event."""

        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None

    def _publish(self, kind: str, src_path: str | bytes) -> None:
        path = Path(os.fsdecode(src_path))
        event = ChangeEvent(kind=kind, path=path)
        self._events.put(event)
        if self._handler is not None:
            self._handler(event)

    def __enter__(self) -> ChangeWatcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.stop()


__all__ = ["DEFAULT_WATCH_PATTERNS", "DELETED", "MODIFIED", "ChangeHandler", "ChangeWatcher"]
