# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Scoped suspension of host external-change notifications.

Rewriting a file that is open in the host editor would normally trigger a
"file changed outside the editor" prompt. A :class:`FileMutationGuard`
suspends those notifications for a path and resumes them when released. A
guard may own child guards, one per additional path; releasing the parent
resumes the children in reverse acquisition order and then the parent
itself.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from types import TracebackType
from typing import Protocol, runtime_checkable

from ..core.errors import GuardImbalanceError


@runtime_checkable
class NotificationHost(Protocol):
    """Host-side switch for external file-change notifications."""

    def suspend(self, path: Path) -> None:
        """Stop reporting external changes to ``path``."""
        ...

    def resume(self, path: Path, *, reload: bool) -> None:
        """Resume reporting for ``path``, reloading the open document when ``reload``."""
        ...


class NullNotificationHost:
    """Host used when running outside an editor; every call is a no-op."""

    def suspend(self, path: Path) -> None:
        del path

    def resume(self, path: Path, *, reload: bool) -> None:
        del path, reload


class FileMutationGuard:
    """Suspend notifications for a path until :meth:`release` is called.

    Constructing the guard with a ``path`` suspends it immediately. A guard
    built without a path owns no suspension of its own and only groups
    children. Each guard must be released exactly once.
    """

    def __init__(self, host: NotificationHost, path: Path | None = None, *, reload_document: bool = False) -> None:
        self._host = host
        self._path = Path(path) if path is not None else None
        self._reload = reload_document
        self._children: list[FileMutationGuard] = []
        self._released = False
        if self._path is not None:
            host.suspend(self._path)

    @property
    def path(self) -> Path | None:
        """Return the path suspended by this guard itself."""

        return self._path

    @property
    def released(self) -> bool:
        """Return ``True`` once :meth:`release` has run."""

        return self._released

    @property
    def suspended_paths(self) -> tuple[Path, ...]:
        """Return the paths held by this guard and its children in acquisition order."""

        own = (self._path,) if self._path is not None else ()
        return own + tuple(path for child in self._children for path in child.suspended_paths)

    def add(self, path: Path, *, reload_document: bool | None = None) -> FileMutationGuard:
        """Suspend ``path`` under a new child guard owned by this guard.

        Args:
            path: Additional file about to be rewritten.
            reload_document: Reload flag for the child; inherits the parent's when ``None``.

        Returns:
            FileMutationGuard: The child guard, already acquired.

        Raises:
            GuardImbalanceError: If this guard was already released.
        """

        if self._released:
            raise GuardImbalanceError(f"cannot add '{path}' to a released guard")
        reload = self._reload if reload_document is None else reload_document
        child = FileMutationGuard(self._host, path, reload_document=reload)
        self._children.append(child)
        return child

    def release(self) -> None:
        """Resume every child in reverse order, then this guard's own path.

        All resumes are attempted even when one of them raises; the first
        error is re-raised once the stack is fully unwound.

        Raises:
            GuardImbalanceError: If the guard was already released.
        """

        if self._released:
            target = self._path if self._path is not None else "<group>"
            raise GuardImbalanceError(f"guard for '{target}' released more than once")
        self._released = True
        first_error: BaseException | None = None
        for child in reversed(self._children):
            try:
                child.release()
            except Exception as exc:
                first_error = first_error or exc
        if self._path is not None:
            try:
                self._host.resume(self._path, reload=self._reload)
            except Exception as exc:
                first_error = first_error or exc
        if first_error is not None:
            raise first_error

    def __enter__(self) -> FileMutationGuard:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc is None:
            self.release()
            return
        try:
            self.release()
        except Exception as release_error:
            raise release_error from exc


@contextmanager
def mutation_batch(
    host: NotificationHost,
    paths: Iterable[Path],
    *,
    reload_document: bool = True,
) -> Iterator[FileMutationGuard]:
    """Suspend notifications for every path in ``paths`` for the block's duration.

    One child guard is opened per path under a single grouping parent, in
    the given order; all of them are resumed in reverse order on every exit
    path, including when a suspend fails partway through.

    Args:
        host: Host whose notifications are suspended.
        paths: Files about to be rewritten in place.
        reload_document: Whether the host reloads each document on resume.

    Yields:
        FileMutationGuard: The grouping parent guard.
    """

    with FileMutationGuard(host, reload_document=reload_document) as parent:
        for path in paths:
            parent.add(path)
        yield parent


__all__ = ["FileMutationGuard", "NotificationHost", "NullNotificationHost", "mutation_batch"]
