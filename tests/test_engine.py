# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""End-to-end tests for :mod:`clangbatch.orchestration.engine`."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from subprocess import CompletedProcess

import pytest

from clangbatch.config import RunConfig
from clangbatch.core.models import ChangeEvent, FileStatus, FileUnit, ProjectRef, RunMode
from clangbatch.core.runtime.process import CommandOptions
from clangbatch.core.severity import Severity
from clangbatch.diagnostics import COMPILER_MISSING_SIGNATURE, MISSING_TOOLCHAIN_MESSAGE
from clangbatch.host import ChangeWatcher
from clangbatch.host.watcher import MODIFIED
from clangbatch.orchestration import Engine, EngineDeps, run_batch
from clangbatch.orchestration import engine as engine_module


def _config(tmp_path: Path, **overrides: object) -> RunConfig:
    data: dict[str, object] = {"root": str(tmp_path), "output": {"color": False, "emoji": False}}
    data.update(overrides)
    return RunConfig.model_validate(data)


def _unit(project: str, path: str) -> FileUnit:
    return FileUnit(path=Path(path), project=project)


class _RecordingSource:
    def __init__(self, projects: Sequence[ProjectRef]) -> None:
        self._projects = tuple(projects)
        self.loaded = False

    def ensure_loaded(self) -> None:
        self.loaded = True

    def projects(self) -> Sequence[ProjectRef]:
        assert self.loaded, "projects requested before ensure_loaded"
        return self._projects


def test_compile_run_classifies_every_file(tmp_path, sample_universe, make_runner, recording_host) -> None:
    runner = make_runner(
        {
            "a.cpp": (1, "", "foo1/a.cpp:3:1: error: missing ';'\n1 error generated.\n"),
            "b.cpp": (0, "foo1/b.cpp:9:2: warning: unused\n", ""),
        }
    )
    config = _config(tmp_path, execution={"continue_on_error": True})
    deps = EngineDeps(host=recording_host, runner=runner, report_output=False)

    report = Engine(config, deps).run(sample_universe)

    assert report.request.mode is RunMode.COMPILE
    assert [result.unit.name for result in report.results] == ["a.cpp", "b.cpp", "main.cpp", "x.cpp"]
    assert report.statuses[_unit("foo1", "foo1/a.cpp")] is FileStatus.FAILED
    assert report.statuses[_unit("foo1", "foo1/b.cpp")] is FileStatus.SUCCEEDED
    assert [d.severity for d in report.diagnostics] == [Severity.ERROR, Severity.INFO, Severity.WARNING]
    assert (report.summary.succeeded, report.summary.failed) == (3, 1)
    assert report.failed
    assert recording_host.calls == []


def test_lint_fix_batch_suspends_and_resumes_every_target(
    tmp_path,
    sample_universe,
    make_runner,
    recording_host,
) -> None:
    config = _config(tmp_path, flags={"tidy_fix": ["-checks=modernize-*"]})
    deps = EngineDeps(host=recording_host, runner=make_runner({}), report_output=False)

    report = Engine(config, deps).run(sample_universe)

    expected = [Path("foo1/a.cpp"), Path("foo1/b.cpp"), Path("bar2/main.cpp"), Path("foobar3/x.cpp")]
    assert report.request.effective_mode is RunMode.LINT_FIX
    assert all(result.command[-1] == "-fix" for result in report.results)
    assert recording_host.suspended == expected
    assert recording_host.resumed == list(reversed(expected))
    assert set(recording_host.reloads.values()) == {True}
    assert report.summary.clean


def test_lint_fix_guards_unwind_when_the_runner_raises(tmp_path, sample_universe, recording_host) -> None:
    def _runner(cmd: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
        raise RuntimeError("host crashed")

    config = _config(tmp_path, flags={"tidy_fix": []})
    deps = EngineDeps(host=recording_host, runner=_runner, report_output=False)

    with pytest.raises(RuntimeError, match="host crashed"):
        Engine(config, deps).run(sample_universe)

    assert len(recording_host.suspended) == 4
    assert sorted(recording_host.resumed) == sorted(recording_host.suspended)


def test_aborted_fix_batch_reports_incomplete_files(tmp_path, sample_universe, make_runner, recording_host) -> None:
    runner = make_runner({"b.cpp": (1, "", "foo1/b.cpp:1:1: error: boom\n")})
    config = _config(tmp_path, flags={"tidy_fix": []}, execution={"continue_on_error": False})
    deps = EngineDeps(host=recording_host, runner=runner, report_output=False)

    report = Engine(config, deps).run(sample_universe)

    assert [unit.name for unit in report.incomplete] == ["main.cpp", "x.cpp"]
    assert report.statuses[_unit("bar2", "bar2/main.cpp")] is FileStatus.INCOMPLETE
    assert report.summary.incomplete == 2
    assert report.summary.failed == 1
    assert report.summary.succeeded == 1
    assert sorted(recording_host.resumed) == sorted(recording_host.suspended)


def test_configuration_errors_are_counted_separately(tmp_path, sample_universe, make_runner) -> None:
    runner = make_runner({"main.cpp": (1, "", COMPILER_MISSING_SIGNATURE + "\n")})
    config = _config(tmp_path, execution={"continue_on_error": True})

    report = Engine(config, EngineDeps(runner=runner, report_output=False)).run(sample_universe)

    config_diags = [d for d in report.diagnostics if d.severity is Severity.CONFIGURATION_ERROR]
    assert len(config_diags) == 1
    assert config_diags[0].message == MISSING_TOOLCHAIN_MESSAGE
    assert report.statuses[_unit("bar2", "bar2/main.cpp")] is FileStatus.CONFIGURATION_ERROR
    assert report.summary.configuration_errors == 1
    assert report.summary.failed == 0


def test_project_source_is_loaded_before_selection(tmp_path, sample_universe, make_runner) -> None:
    source = _RecordingSource(sample_universe)
    config = _config(tmp_path, projects={"include": ["bar"]})

    report = run_batch(config, source, EngineDeps(runner=make_runner({}), report_output=False))

    assert source.loaded
    assert [result.unit.name for result in report.results] == ["main.cpp"]


def test_empty_selection_does_nothing(tmp_path, sample_universe, recording_host) -> None:
    def _runner(cmd: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
        raise AssertionError("no process expected")

    config = _config(tmp_path, projects={"include": ["nothing-matches"]}, flags={"tidy_fix": []})
    deps = EngineDeps(host=recording_host, runner=_runner, report_output=False)

    report = Engine(config, deps).run(sample_universe)

    assert report.results == ()
    assert report.summary.total == 0
    assert recording_host.calls == []


def test_external_changes_during_fix_are_reported(tmp_path, sample_universe, make_runner) -> None:
    class _ScriptedWatcher(ChangeWatcher):
        def run(self, root):  # type: ignore[override]
            self._publish(MODIFIED, str(tmp_path / "other.cpp"))
            return True

    config = _config(tmp_path, flags={"tidy_fix": []}, watch_root=str(tmp_path))
    deps = EngineDeps(runner=make_runner({}), watcher_factory=_ScriptedWatcher, report_output=False)

    report = Engine(config, deps).run(sample_universe)

    assert report.external_changes == (ChangeEvent(kind=MODIFIED, path=tmp_path / "other.cpp"),)


def test_report_output_uses_logging_helpers(tmp_path, sample_universe, make_runner, monkeypatch) -> None:
    warnings: list[str] = []
    failures: list[str] = []
    infos: list[str] = []
    monkeypatch.setattr(engine_module, "warn", lambda msg, **_: warnings.append(msg))
    monkeypatch.setattr(engine_module, "fail", lambda msg, **_: failures.append(msg))
    monkeypatch.setattr(engine_module, "info", lambda msg, **_: infos.append(msg))
    monkeypatch.setattr(engine_module, "ok", lambda msg, **_: None)
    monkeypatch.setattr(engine_module, "section", lambda title, **_: None)
    runner = make_runner(
        {
            "a.cpp": (2, "", "foo1/a.cpp:1:1: error: bad\n"),
            "x.cpp": (1, "", COMPILER_MISSING_SIGNATURE + "\n"),
        }
    )
    config = _config(tmp_path, execution={"continue_on_error": True})

    Engine(config, EngineDeps(runner=runner)).run(sample_universe)

    assert infos[0] == "Clang : foo1/a.cpp:1:1: error: bad"
    assert any(message.startswith("foo1/a.cpp failed (exit 2)") for message in warnings)
    assert any("command: clang-build" in message for message in warnings)
    assert len(failures) == 1
    assert MISSING_TOOLCHAIN_MESSAGE in failures[0]
    assert warnings[-1] == "4 file(s): 2 succeeded, 1 failed, 1 configuration errors"


def test_shared_source_is_counted_once_per_owning_project(tmp_path, make_runner) -> None:
    shared = Path("shared/common.cpp")
    universe = [ProjectRef.from_paths("a", [shared]), ProjectRef.from_paths("b", [shared])]
    config = _config(tmp_path, execution={"continue_on_error": True})

    report = Engine(config, EngineDeps(runner=make_runner({}), report_output=False)).run(universe)

    assert len(report.results) == 2
    assert report.summary.succeeded == 2
    assert report.summary.total == len(report.results)
    assert set(report.statuses) == {_unit("a", "shared/common.cpp"), _unit("b", "shared/common.cpp")}
