# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the clangbatch package."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .severity import Severity

ORIGIN_TAG: Final[str] = "Clang : "


def default_parallel_jobs() -> int:
    """Return the number of logical processors available to the worker pool.

    Returns:
        int: ``os.cpu_count()`` with a minimum of one worker.
    """

    return max(1, os.cpu_count() or 1)


class RunMode(str, Enum):
    """Enumerate the tool invocation modes supported by a run."""

    COMPILE = "compile"
    LINT = "lint"
    LINT_FIX = "lint-fix"

    @property
    def rewrites_files(self) -> bool:
        """Return ``True`` when the tool edits sources in place."""

        return self is RunMode.LINT_FIX


class FileStatus(str, Enum):
    """Per-file classification used when summarising a batch."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CONFIGURATION_ERROR = "configuration-error"
    INCOMPLETE = "incomplete"


class FileUnit(BaseModel):
    """One source file processed by a single tool invocation."""

    model_config = ConfigDict(frozen=True)

    path: Path
    project: str

    @property
    def name(self) -> str:
        """Return the file name used for file-level filtering."""

        return self.path.name


class ProjectRef(BaseModel):
    """Externally supplied project identifier with its ordered files."""

    model_config = ConfigDict(frozen=True)

    name: str
    files: tuple[FileUnit, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_ownership(self) -> ProjectRef:
        """Ensure every file is owned by this project and listed once."""

        foreign = [unit.path.as_posix() for unit in self.files if unit.project != self.name]
        if foreign:
            raise ValueError(f"files not owned by project '{self.name}': {', '.join(foreign)}")
        seen: set[Path] = set()
        duplicates: list[str] = []
        for unit in self.files:
            if unit.path in seen:
                duplicates.append(unit.path.as_posix())
            seen.add(unit.path)
        if duplicates:
            raise ValueError(f"files listed more than once in project '{self.name}': {', '.join(duplicates)}")
        return self

    @classmethod
    def from_paths(cls, name: str, paths: list[Path] | tuple[Path, ...]) -> ProjectRef:
        """Build a project whose files are owned by ``name``.

        Args:
            name: Project identifier.
            paths: Source file paths in project order.

        Returns:
            ProjectRef: Project wrapping one :class:`FileUnit` per path.
        """

        return cls(name=name, files=tuple(FileUnit(path=Path(path), project=name) for path in paths))


class CompileFlagSet(BaseModel):
    """Immutable flag configuration applied to every invocation in a run.

    ``tidy_flags`` and ``tidy_fix_flags`` are ``None`` when the corresponding
    mode is not configured; an empty tuple enables the mode without extra
    tokens.
    """

    model_config = ConfigDict(frozen=True)

    flags: tuple[str, ...] = Field(default_factory=tuple)
    include_dirs: tuple[str, ...] = Field(default_factory=tuple)
    tidy_flags: tuple[str, ...] | None = None
    tidy_fix_flags: tuple[str, ...] | None = None

    def resolve_mode(self) -> RunMode:
        """Return the mode selected by the configured flag sets.

        Returns:
            RunMode: ``LINT_FIX`` whenever fix flags are present, ``LINT`` when
            only lint flags are present, ``COMPILE`` otherwise.
        """

        if self.tidy_fix_flags is not None:
            return RunMode.LINT_FIX
        if self.tidy_flags is not None:
            return RunMode.LINT
        return RunMode.COMPILE

    def effective_mode(self, mode: RunMode) -> RunMode:
        """Return ``mode`` promoted to lint-fix when fix flags are configured."""

        if mode is RunMode.LINT and self.tidy_fix_flags is not None:
            return RunMode.LINT_FIX
        return mode

    def lint_flags_for(self, mode: RunMode) -> tuple[str, ...]:
        """Return the lint flag tokens that apply to ``mode``.

        Args:
            mode: Invocation mode of the run.

        Returns:
            tuple[str, ...]: Fix flags take precedence over lint flags; compile
            mode has none.
        """

        if mode is RunMode.COMPILE:
            return ()
        if self.tidy_fix_flags is not None:
            return self.tidy_fix_flags
        return self.tidy_flags or ()


class RunRequest(BaseModel):
    """Describe one batch of tool invocations."""

    model_config = ConfigDict(frozen=True)

    files: tuple[FileUnit, ...]
    flags: CompileFlagSet = Field(default_factory=CompileFlagSet)
    mode: RunMode = RunMode.COMPILE
    parallel: bool = False
    continue_on_error: bool = False
    literal_match: bool = False
    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    timeout_s: float | None = Field(default=None, ge=0)
    cwd: Path | None = None

    @property
    def effective_mode(self) -> RunMode:
        """Return the requested mode with lint-fix precedence applied."""

        return self.flags.effective_mode(self.mode)


class ProcessResult(BaseModel):
    """Captured outcome of one external process invocation."""

    model_config = ConfigDict(frozen=True)

    unit: FileUnit
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0
    command: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        """Return ``True`` when the process exited successfully."""

        return self.returncode == 0

    @property
    def combined_output(self) -> str:
        """Return stdout followed by stderr as one text block."""

        parts = [part for part in (self.stdout, self.stderr) if part]
        return "\n".join(part.rstrip("\n") for part in parts)


class Diagnostic(BaseModel):
    """Structured diagnostic extracted from tool output."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str
    file: str | None = None
    line: int | None = None
    column: int | None = None
    origin: str = ORIGIN_TAG

    @field_validator("line", "column")
    @classmethod
    def _positive(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("line and column must be non-negative")
        return value

    def render(self) -> str:
        """Return the tagged line shown when output streams are merged."""

        if self.file is None or self.line is None:
            return f"{self.origin}{self.message}"
        location = f"{self.file}:{self.line}"
        if self.column is not None:
            location = f"{location}:{self.column}"
        return f"{self.origin}{location}: {self.severity.value}: {self.message}"


class BatchSummary(BaseModel):
    """Counts of per-file statuses for a completed batch."""

    model_config = ConfigDict(frozen=True)

    succeeded: int = 0
    failed: int = 0
    configuration_errors: int = 0
    incomplete: int = 0

    @property
    def total(self) -> int:
        """Return the number of files accounted for by the summary."""

        return self.succeeded + self.failed + self.configuration_errors + self.incomplete

    @property
    def clean(self) -> bool:
        """Return ``True`` when every requested file succeeded."""

        return self.total == self.succeeded


class ChangeEvent(BaseModel):
    """Filesystem change reported by the change watcher."""

    model_config = ConfigDict(frozen=True)

    kind: str
    path: Path


class BatchReport(BaseModel):
    """Everything a caller receives after requesting a run."""

    model_config = ConfigDict(frozen=True)

    request: RunRequest
    results: tuple[ProcessResult, ...] = Field(default_factory=tuple)
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)
    statuses: dict[FileUnit, FileStatus] = Field(default_factory=dict)
    summary: BatchSummary = Field(default_factory=BatchSummary)
    incomplete: tuple[FileUnit, ...] = Field(default_factory=tuple)
    external_changes: tuple[ChangeEvent, ...] = Field(default_factory=tuple)

    @property
    def failed(self) -> bool:
        """Return ``True`` when any file did not succeed."""

        return not self.summary.clean


__all__ = [
    "ORIGIN_TAG",
    "BatchReport",
    "BatchSummary",
    "ChangeEvent",
    "CompileFlagSet",
    "Diagnostic",
    "FileStatus",
    "FileUnit",
    "ProcessResult",
    "ProjectRef",
    "RunMode",
    "RunRequest",
    "default_parallel_jobs",
]
