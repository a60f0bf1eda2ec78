# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High level orchestration for one clangbatch run."""

from __future__ import annotations

import shlex
from collections.abc import Callable, Iterable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from textwrap import shorten

from ..config.models import RunConfig
from ..core.logging import fail, info, ok, section, warn
from ..core.models import (
    BatchReport,
    ChangeEvent,
    Diagnostic,
    FileStatus,
    FileUnit,
    ProcessResult,
    ProjectRef,
    RunRequest,
)
from ..core.severity import Severity
from ..diagnostics.classifier import DiagnosticClassifier
from ..diagnostics.constants import MISSING_TOOLCHAIN_MESSAGE
from ..diagnostics.summary import describe, status_for, summarize
from ..execution.command_builder import CommandBuilder
from ..execution.runner import ProcessRunner, RunnerCallable, RunOutcome, wrap_runner
from ..host.guard import NotificationHost, NullNotificationHost, mutation_batch
from ..host.project_source import ProjectSource, StaticProjectSource
from ..host.watcher import ChangeWatcher
from ..selection.selector import Selector


@dataclass(frozen=True)
class EngineDeps:
    """Collaborators used by :class:`Engine`; defaults suit a headless run."""

    host: NotificationHost = field(default_factory=NullNotificationHost)
    runner: RunnerCallable | None = None
    classifier: DiagnosticClassifier = field(default_factory=DiagnosticClassifier)
    watcher_factory: Callable[[], ChangeWatcher] = ChangeWatcher
    report_output: bool = True


class Engine:
    """Coordinate selection, execution, classification and fix-batch safety."""

    def __init__(self, config: RunConfig, deps: EngineDeps | None = None) -> None:
        self.config = config
        self.deps = deps or EngineDeps()
        self.selector = Selector.from_config(config)
        builder = CommandBuilder(config.toolchain)
        if self.deps.runner is None:
            self.process_runner = ProcessRunner(builder)
        else:
            self.process_runner = ProcessRunner(builder, runner=wrap_runner(self.deps.runner))

    def run(self, universe: ProjectSource | Iterable[ProjectRef]) -> BatchReport:
        """Select, execute and classify a batch over ``universe``.

        Args:
            universe: Host project source, or an already-resolved project list.

        Returns:
            BatchReport: Results, diagnostics, per-file statuses and summary.
        """

        source = universe if isinstance(universe, ProjectSource) else StaticProjectSource(universe)
        source.ensure_loaded()
        files = self.selector.select(source.projects())
        request = self.config.build_request(files)
        return self.execute(request)

    def execute(self, request: RunRequest) -> BatchReport:
        """Run ``request`` and assemble the batch report."""

        external_changes: tuple[ChangeEvent, ...] = ()
        if request.effective_mode.rewrites_files and request.files:
            outcome, external_changes = self._execute_fix_batch(request)
        else:
            outcome = self.process_runner.run(request)
        report = self._build_report(request, outcome, external_changes)
        if self.deps.report_output:
            self._log_report(report)
        return report

    def _execute_fix_batch(self, request: RunRequest) -> tuple[RunOutcome, tuple[ChangeEvent, ...]]:
        """Run a lint-fix request with notifications suspended for every target.

        Guards are acquired and released on this thread; watcher events are
        drained after the workers join and before the guards are released.
        """

        paths = [unit.path for unit in request.files]
        with ExitStack() as stack:
            stack.enter_context(mutation_batch(self.deps.host, paths))
            watcher = stack.enter_context(self.deps.watcher_factory())
            watcher.run(self.config.watch_root)
            outcome = self.process_runner.run(request)
            watcher.stop()
            events = tuple(watcher.drain())
        return outcome, events

    def _build_report(
        self,
        request: RunRequest,
        outcome: RunOutcome,
        external_changes: tuple[ChangeEvent, ...],
    ) -> BatchReport:
        diagnostics: list[Diagnostic] = []
        statuses: dict[FileUnit, FileStatus] = {}
        for result in outcome.results:
            classification = self.deps.classifier.classify(result)
            diagnostics.extend(classification.diagnostics)
            statuses[result.unit] = status_for(result, classification)
        for unit in outcome.not_started:
            statuses[unit] = FileStatus.INCOMPLETE
        return BatchReport(
            request=request,
            results=outcome.results,
            diagnostics=tuple(diagnostics),
            statuses=statuses,
            summary=summarize(statuses.values()),
            incomplete=outcome.not_started,
            external_changes=external_changes,
        )

    def _log_report(self, report: BatchReport) -> None:
        out = self.config.output
        section(f"clangbatch {report.request.effective_mode.value}", use_color=out.color)
        for diagnostic in report.diagnostics:
            if diagnostic.severity is Severity.INFO and not out.show_info:
                continue
            info(diagnostic.render(), use_emoji=False, use_color=out.color)
        for result in report.results:
            if report.statuses.get(result.unit) is FileStatus.FAILED:
                _log_process_failure(result, root=self.config.root, use_emoji=out.emoji, use_color=out.color)
        if report.summary.configuration_errors:
            fail(f"Toolchain not available.{MISSING_TOOLCHAIN_MESSAGE}", use_emoji=out.emoji, use_color=out.color)
        for event in report.external_changes:
            warn(
                f"{event.path} was {event.kind} externally during the fix batch",
                use_emoji=out.emoji,
                use_color=out.color,
            )
        if report.incomplete:
            warn(
                f"stopped after a failure; {_summarize_files(report.incomplete, self.config.root)} not processed",
                use_emoji=out.emoji,
                use_color=out.color,
            )
        message = describe(report.summary)
        if report.summary.clean:
            ok(message, use_emoji=out.emoji, use_color=out.color)
        else:
            warn(message, use_emoji=out.emoji, use_color=out.color)


def run_batch(
    config: RunConfig,
    universe: ProjectSource | Iterable[ProjectRef],
    deps: EngineDeps | None = None,
) -> BatchReport:
    """Convenience wrapper running one batch with a fresh :class:`Engine`."""

    return Engine(config, deps).run(universe)


def _log_process_failure(result: ProcessResult, *, root: Path, use_emoji: bool, use_color: bool) -> None:
    """Emit a structured warning describing a failed invocation."""

    details: list[str] = [
        f"command: {shlex.join(result.command)}",
        f"cwd: {root}",
        f"duration: {result.duration:.2f}s",
    ]
    stderr_tail = _last_non_empty_line(result.stderr.splitlines())
    stdout_tail = _last_non_empty_line(result.stdout.splitlines())
    if stderr_tail:
        details.append(f"stderr: {stderr_tail}")
    if stdout_tail:
        details.append(f"stdout: {stdout_tail}")
    message = f"{_display(result.unit.path, root)} failed (exit {result.returncode})" + "\n  " + "\n  ".join(details)
    warn(message, use_emoji=use_emoji, use_color=use_color)


def _summarize_files(files: Sequence[FileUnit], root: Path) -> str:
    """Return a compact string summarising ``files`` relative to ``root``."""

    display = [_display(unit.path, root) for unit in files[:5]]
    remaining = len(files) - len(display)
    if remaining > 0:
        display.append(f"… (+{remaining} more)")
    return ", ".join(display)


def _display(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _last_non_empty_line(lines: Sequence[str]) -> str | None:
    """Return the last non-empty line from ``lines`` truncated for readability."""

    for raw_line in reversed(lines):
        hint = raw_line.strip()
        if hint:
            return shorten(hint, width=160, placeholder="…")
    return None


__all__ = ["Engine", "EngineDeps", "run_batch"]
