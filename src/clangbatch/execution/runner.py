# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run one toolchain process per file with bounded concurrency."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from subprocess import CompletedProcess
from typing import Final, Protocol, runtime_checkable

from ..core.models import FileUnit, ProcessResult, RunMode, RunRequest
from ..core.runtime.process import CommandOptions, run_command
from ..diagnostics.constants import COMPILER_MISSING_SIGNATURE, LINTER_NOT_RECOGNIZED_SIGNATURE
from .command_builder import CommandBuilder

NOT_EXECUTABLE_RETURNCODE: Final[int] = 126
MISSING_EXECUTABLE_RETURNCODE: Final[int] = 127


@runtime_checkable
class RunnerCallable(Protocol):
    """Callable protocol for invoking external tool commands."""

    def __call__(
        self,
        cmd: Sequence[str],
        *,
        options: CommandOptions | None = None,
    ) -> CompletedProcess[str]:
        """Execute ``cmd`` returning a completed subprocess."""
        ...


@dataclass(frozen=True, slots=True)
class FunctionRunner:
    """Adapter that turns plain callables into :class:`RunnerCallable` objects."""

    func: Callable[..., CompletedProcess[str]]

    def __call__(
        self,
        cmd: Sequence[str],
        *,
        options: CommandOptions | None = None,
    ) -> CompletedProcess[str]:
        return self.func(cmd, options=options)

    def __repr__(self) -> str:
        qualname = getattr(self.func, "__qualname__", None)
        module = getattr(self.func, "__module__", None)
        if qualname and module:
            return f"FunctionRunner({module}.{qualname})"
        return f"FunctionRunner({self.func!r})"


def wrap_runner(func: Callable[..., CompletedProcess[str]]) -> RunnerCallable:
    """Return a :class:`RunnerCallable` that delegates to ``func``."""

    if isinstance(func, FunctionRunner):
        return func
    return FunctionRunner(func)


class ResultCollector:
    """Append-only result store shared by pool workers.

    Each append takes the lock; :meth:`ordered` must only be called once every
    worker has joined.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[tuple[int, ProcessResult]] = []

    def append(self, order: int, result: ProcessResult) -> None:
        """Record ``result`` for the file at selection index ``order``."""

        with self._lock:
            self._entries.append((order, result))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def ordered(self) -> tuple[ProcessResult, ...]:
        """Return the recorded results in selection order."""

        with self._lock:
            return tuple(result for _, result in sorted(self._entries, key=lambda entry: entry[0]))

    def started_orders(self) -> set[int]:
        """Return the selection indices that produced a result."""

        with self._lock:
            return {order for order, _ in self._entries}


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Results of a runner invocation."""

    results: tuple[ProcessResult, ...]
    not_started: tuple[FileUnit, ...]
    stopped: bool


@dataclass(slots=True)
class ProcessRunner:
    """Execute one external process per :class:`FileUnit` of a request.

    Sequential runs follow selection order. Parallel runs use a fixed pool of
    ``min(request.jobs, len(files))`` workers draining a shared work queue.
    When ``continue_on_error`` is false the first non-zero exit sets a stop
    signal: no further work is dispatched, running processes finish and their
    results are still recorded. Nothing is retried.
    """

    builder: CommandBuilder
    runner: RunnerCallable = field(default_factory=lambda: wrap_runner(run_command))
    clock: Callable[[], float] = time.perf_counter
    after_result_hook: Callable[[ProcessResult], None] | None = None

    def run(self, request: RunRequest) -> RunOutcome:
        """Execute every file of ``request`` honouring its scheduling policy.

        Args:
            request: Files, flags and policy for the run.

        Returns:
            RunOutcome: Results in selection order plus any files that never
            started because the run was stopped.
        """

        collector = ResultCollector()
        stop = threading.Event()
        if request.parallel and request.jobs > 1 and len(request.files) > 1:
            self._execute_in_parallel(request, collector, stop)
        else:
            self._execute_serial(request, collector, stop)
        started = collector.started_orders()
        not_started = tuple(unit for order, unit in enumerate(request.files) if order not in started)
        return RunOutcome(results=collector.ordered(), not_started=not_started, stopped=stop.is_set())

    def execute_one(self, unit: FileUnit, request: RunRequest) -> ProcessResult:
        """Run the toolchain for ``unit`` and capture its outcome.

        A driver the operating system cannot start is reported with the
        matching configuration signature on stderr so it is classified as a
        configuration error downstream: exit status ``126`` when it exists but
        may not be executed, ``127`` for every other launch failure such as a
        missing executable or working directory.

        Args:
            unit: File to process.
            request: Run request providing flags, mode and process options.

        Returns:
            ProcessResult: Captured output, exit status and duration.
        """

        command = self.builder.build(unit, request.flags, request.mode)
        options = CommandOptions(
            cwd=request.cwd,
            capture_output=True,
            discard_stdin=True,
            timeout=request.timeout_s,
        )
        started = self.clock()
        try:
            completed = self.runner(list(command), options=options)
        except OSError as exc:
            return ProcessResult(
                unit=unit,
                returncode=_launch_failure_returncode(exc),
                stderr=f"{_missing_signature(request.effective_mode)}\n{exc}",
                duration=self.clock() - started,
                command=command,
            )
        return ProcessResult(
            unit=unit,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration=self.clock() - started,
            command=command,
        )

    def _execute_serial(self, request: RunRequest, collector: ResultCollector, stop: threading.Event) -> None:
        for order, unit in enumerate(request.files):
            if stop.is_set():
                return
            self._process(order, unit, request, collector, stop)

    def _execute_in_parallel(self, request: RunRequest, collector: ResultCollector, stop: threading.Event) -> None:
        work: queue.SimpleQueue[tuple[int, FileUnit]] = queue.SimpleQueue()
        for entry in enumerate(request.files):
            work.put(entry)
        worker_count = min(request.jobs, len(request.files))

        def _worker() -> None:
            while not stop.is_set():
                try:
                    order, unit = work.get_nowait()
                except queue.Empty:
                    return
                self._process(order, unit, request, collector, stop)

        with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="clangbatch") as executor:
            futures = [executor.submit(_worker) for _ in range(worker_count)]
        for future in futures:
            future.result()

    def _process(
        self,
        order: int,
        unit: FileUnit,
        request: RunRequest,
        collector: ResultCollector,
        stop: threading.Event,
    ) -> None:
        result = self.execute_one(unit, request)
        collector.append(order, result)
        if not result.ok and not request.continue_on_error:
            stop.set()
        if self.after_result_hook is not None:
            self.after_result_hook(result)


def _launch_failure_returncode(exc: OSError) -> int:
    if isinstance(exc, PermissionError):
        return NOT_EXECUTABLE_RETURNCODE
    return MISSING_EXECUTABLE_RETURNCODE


def _missing_signature(mode: RunMode) -> str:
    if mode is RunMode.COMPILE:
        return COMPILER_MISSING_SIGNATURE
    return LINTER_NOT_RECOGNIZED_SIGNATURE


__all__ = [
    "MISSING_EXECUTABLE_RETURNCODE",
    "NOT_EXECUTABLE_RETURNCODE",
    "FunctionRunner",
    "ProcessRunner",
    "ResultCollector",
    "RunOutcome",
    "RunnerCallable",
    "wrap_runner",
]
