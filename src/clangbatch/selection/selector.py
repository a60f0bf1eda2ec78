# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Select the projects and files a run operates on."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..config.models import DEFAULT_SOURCE_EXTENSIONS, RunConfig
from ..core.models import FileUnit, ProjectRef
from .matching import IncludeIgnoreFilter, MatchStrategy, match_strategy


@dataclass(frozen=True, slots=True)
class Selector:
    """Filter a project universe by include/ignore criteria.

    Selection is pure and order-preserving relative to the supplied universe.
    """

    projects: IncludeIgnoreFilter
    files: IncludeIgnoreFilter
    extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS

    @classmethod
    def build(
        cls,
        *,
        literal: bool,
        project_include: Sequence[str] = (),
        project_ignore: Sequence[str] = (),
        file_include: Sequence[str] = (),
        file_ignore: Sequence[str] = (),
        extensions: Sequence[str] = DEFAULT_SOURCE_EXTENSIONS,
    ) -> Selector:
        """Create a selector whose filters share one matching strategy.

        Args:
            literal: Exact-string matching when ``True``, pattern search otherwise.
            project_include: Entries a project must match to be included.
            project_ignore: Entries that exclude an otherwise included project.
            file_include: Entries a file name must match to be included.
            file_ignore: Entries that exclude an otherwise included file.
            extensions: File name suffixes admitted by the filename filter.

        Returns:
            Selector: Configured selector.

        Raises:
            ConfigError: If a pattern entry is not a valid regular expression.
        """

        strategy: MatchStrategy = match_strategy(literal)
        return cls(
            projects=IncludeIgnoreFilter.build(strategy, project_include, project_ignore),
            files=IncludeIgnoreFilter.build(strategy, file_include, file_ignore),
            extensions=tuple(ext.lower() for ext in extensions),
        )

    @classmethod
    def from_config(cls, config: RunConfig) -> Selector:
        """Create a selector from the filter sections of ``config``."""

        return cls.build(
            literal=config.literal_match,
            project_include=config.projects.include,
            project_ignore=config.projects.ignore,
            file_include=config.files.include,
            file_ignore=config.files.ignore,
            extensions=config.files.extensions,
        )

    def select_projects(self, universe: Iterable[ProjectRef]) -> list[ProjectRef]:
        """Return the projects of ``universe`` accepted by the project filter."""

        return [project for project in universe if self.projects.accepts(project.name)]

    def select_files(self, project: ProjectRef) -> list[FileUnit]:
        """Return the files of ``project`` accepted by the filename and file filters."""

        return [unit for unit in project.files if self._has_source_extension(unit) and self.files.accepts(unit.name)]

    def select(self, universe: Iterable[ProjectRef]) -> list[FileUnit]:
        """Return every selected file across the selected projects, in order."""

        selected: list[FileUnit] = []
        for project in self.select_projects(universe):
            selected.extend(self.select_files(project))
        return selected

    def _has_source_extension(self, unit: FileUnit) -> bool:
        if not self.extensions:
            return True
        return unit.name.lower().endswith(self.extensions)


__all__ = ["Selector"]
