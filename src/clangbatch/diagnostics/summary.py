# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-file status resolution and batch summaries."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping

from ..core.models import BatchSummary, FileStatus, ProcessResult
from .classifier import Classification


def status_for(result: ProcessResult, classification: Classification) -> FileStatus:
    """Return the status of one file; configuration errors outrank failures."""

    if classification.configuration_failed:
        return FileStatus.CONFIGURATION_ERROR
    if not result.ok:
        return FileStatus.FAILED
    return FileStatus.SUCCEEDED


def summarize(statuses: Iterable[FileStatus]) -> BatchSummary:
    """Count ``statuses`` into a :class:`BatchSummary`."""

    counts = Counter(statuses)
    return BatchSummary(
        succeeded=counts[FileStatus.SUCCEEDED],
        failed=counts[FileStatus.FAILED],
        configuration_errors=counts[FileStatus.CONFIGURATION_ERROR],
        incomplete=counts[FileStatus.INCOMPLETE],
    )


def describe(summary: BatchSummary) -> str:
    """Return a one-line human readable rendering of ``summary``."""

    parts: Mapping[str, int] = {
        "succeeded": summary.succeeded,
        "failed": summary.failed,
        "configuration errors": summary.configuration_errors,
        "incomplete": summary.incomplete,
    }
    rendered = ", ".join(f"{count} {label}" for label, count in parts.items() if count)
    return f"{summary.total} file(s): {rendered or 'nothing to do'}"


__all__ = ["describe", "status_for", "summarize"]
