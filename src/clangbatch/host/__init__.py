# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Integration points with the host editing environment."""

from __future__ import annotations

from .guard import FileMutationGuard, NotificationHost, NullNotificationHost, mutation_batch
from .project_source import ProjectSource, StaticProjectSource
from .watcher import ChangeWatcher

__all__ = [
    "ChangeWatcher",
    "FileMutationGuard",
    "NotificationHost",
    "NullNotificationHost",
    "ProjectSource",
    "StaticProjectSource",
    "mutation_batch",
]
