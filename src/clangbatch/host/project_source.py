# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Supply the resolved project universe from the host."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from ..core.models import ProjectRef


@runtime_checkable
class ProjectSource(Protocol):
    """Host-provided access to the projects of the open workspace.

    Hosts may load projects lazily; :meth:`ensure_loaded` is called before
    selection so that deferred projects contribute their files.
    """

    def ensure_loaded(self) -> None:
        """Load any projects the host has deferred."""
        ...

    def projects(self) -> Sequence[ProjectRef]:
        """Return every project in workspace order."""
        ...


class StaticProjectSource:
    """Project source over an already-resolved list of projects."""

    def __init__(self, projects: Iterable[ProjectRef]) -> None:
        self._projects = tuple(projects)

    def ensure_loaded(self) -> None:
        return None

    def projects(self) -> Sequence[ProjectRef]:
        return self._projects


__all__ = ["ProjectSource", "StaticProjectSource"]
