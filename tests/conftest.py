# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from subprocess import CompletedProcess

import pytest

from clangbatch.core.models import ProjectRef
from clangbatch.core.runtime.process import CommandOptions


class RecordingHost:
    """Notification host recording suspend/resume calls in order."""

    def __init__(self, *, fail_suspend_on: Path | None = None, fail_resume_on: Path | None = None) -> None:
        self.calls: list[tuple[str, Path]] = []
        self.reloads: dict[Path, bool] = {}
        self._fail_suspend_on = fail_suspend_on
        self._fail_resume_on = fail_resume_on
        self._lock = threading.Lock()

    def suspend(self, path: Path) -> None:
        if path == self._fail_suspend_on:
            raise OSError(f"cannot suspend {path}")
        with self._lock:
            self.calls.append(("suspend", path))

    def resume(self, path: Path, *, reload: bool) -> None:
        with self._lock:
            self.calls.append(("resume", path))
            self.reloads[path] = reload
        if path == self._fail_resume_on:
            raise OSError(f"cannot resume {path}")

    @property
    def suspended(self) -> list[Path]:
        return [path for kind, path in self.calls if kind == "suspend"]

    @property
    def resumed(self) -> list[Path]:
        return [path for kind, path in self.calls if kind == "resume"]


FakeRunner = Callable[..., CompletedProcess[str]]


def scripted_runner(outputs: dict[str, tuple[int, str, str]]) -> FakeRunner:
    """Return a runner answering by the file name found in the command."""

    def _runner(cmd: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
        del options
        for token in cmd:
            name = Path(token).name
            if name in outputs:
                code, stdout, stderr = outputs[name]
                return CompletedProcess(list(cmd), returncode=code, stdout=stdout, stderr=stderr)
        return CompletedProcess(list(cmd), returncode=0, stdout="", stderr="")

    return _runner


@pytest.fixture
def recording_host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def sample_universe() -> list[ProjectRef]:
    return [
        ProjectRef.from_paths("foo1", [Path("foo1/a.cpp"), Path("foo1/a.h"), Path("foo1/b.cpp")]),
        ProjectRef.from_paths("bar2", [Path("bar2/main.cpp")]),
        ProjectRef.from_paths("foobar3", [Path("foobar3/x.cpp")]),
    ]


@pytest.fixture
def host_factory() -> type[RecordingHost]:
    return RecordingHost


@pytest.fixture
def make_runner() -> Callable[[dict[str, tuple[int, str, str]]], FakeRunner]:
    return scripted_runner
