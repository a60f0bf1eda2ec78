# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models describing one batch run."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.models import CompileFlagSet, FileUnit, RunRequest, default_parallel_jobs

DEFAULT_SOURCE_EXTENSIONS: Final[tuple[str, ...]] = (".cpp",)


class ProjectFilterConfig(BaseModel):
    """Include/ignore lists applied to project identifiers."""

    model_config = ConfigDict(validate_assignment=True)

    include: list[str] = Field(default_factory=list)
    ignore: list[str] = Field(default_factory=list)


class FileFilterConfig(BaseModel):
    """File-level filtering inside included projects."""

    model_config = ConfigDict(validate_assignment=True)

    include: list[str] = Field(default_factory=list)
    ignore: list[str] = Field(default_factory=list)
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))

    @field_validator("extensions")
    @classmethod
    def _normalise_extensions(cls, value: list[str]) -> list[str]:
        return [entry if entry.startswith(".") else f".{entry}" for entry in value]


class ExecutionConfig(BaseModel):
    """Scheduling and failure-containment behaviour."""

    model_config = ConfigDict(validate_assignment=True)

    parallel: bool = False
    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    continue_on_error: bool = False
    timeout_s: float | None = Field(default=None, ge=0)


class FlagConfig(BaseModel):
    """Flag tokens forwarded to the toolchain."""

    model_config = ConfigDict(validate_assignment=True)

    compile: list[str] = Field(default_factory=list)
    tidy: list[str] | None = None
    tidy_fix: list[str] | None = None
    include_dirs: list[str] = Field(default_factory=list)

    def to_flag_set(self) -> CompileFlagSet:
        """Return the immutable flag set used for a run."""

        return CompileFlagSet(
            flags=tuple(self.compile),
            include_dirs=tuple(self.include_dirs),
            tidy_flags=tuple(self.tidy) if self.tidy is not None else None,
            tidy_fix_flags=tuple(self.tidy_fix) if self.tidy_fix is not None else None,
        )


class ToolchainConfig(BaseModel):
    """Names and tokens of the external toolchain."""

    model_config = ConfigDict(validate_assignment=True)

    driver: list[str] = Field(default_factory=lambda: ["clang-build"])
    include_flag: str = "-I"
    compile_token: str = "-compile"
    tidy_token: str = "-tidy"
    fix_flag: str = "-fix"

    @field_validator("driver")
    @classmethod
    def _require_driver(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("toolchain driver must name at least one token")
        return value


class OutputConfig(BaseModel):
    """Console presentation toggles."""

    model_config = ConfigDict(validate_assignment=True)

    color: bool = True
    emoji: bool = True
    show_info: bool = False


class RunConfig(BaseModel):
    """Top-level configuration for a clangbatch run."""

    model_config = ConfigDict(validate_assignment=True)

    projects: ProjectFilterConfig = Field(default_factory=ProjectFilterConfig)
    files: FileFilterConfig = Field(default_factory=FileFilterConfig)
    literal_match: bool = False
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    flags: FlagConfig = Field(default_factory=FlagConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    watch_root: Path | None = None
    root: Path = Field(default_factory=Path.cwd)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation of the configuration."""

        return self.model_dump(mode="json")

    def build_request(self, files: Sequence[FileUnit]) -> RunRequest:
        """Return the :class:`RunRequest` describing a run over ``files``.

        Args:
            files: Selected file units in selection order.

        Returns:
            RunRequest: Request combining the flag set with execution policy.
        """

        flag_set = self.flags.to_flag_set()
        return RunRequest(
            files=tuple(files),
            flags=flag_set,
            mode=flag_set.resolve_mode(),
            parallel=self.execution.parallel,
            continue_on_error=self.execution.continue_on_error,
            literal_match=self.literal_match,
            jobs=self.execution.jobs,
            timeout_s=self.execution.timeout_s,
            cwd=self.root,
        )


__all__ = [
    "DEFAULT_SOURCE_EXTENSIONS",
    "ExecutionConfig",
    "FileFilterConfig",
    "FlagConfig",
    "OutputConfig",
    "ProjectFilterConfig",
    "RunConfig",
    "ToolchainConfig",
]
