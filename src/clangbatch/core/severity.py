# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels attached to classified diagnostics."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    CONFIGURATION_ERROR = "configuration-error"


_LABEL_TO_SEVERITY: Final[Mapping[str, Severity]] = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
}


def severity_from_label(label: str | None) -> Severity:
    """Map the textual severity token emitted by clang onto :class:`Severity`.

    Args:
        label: Token found between the location prefix and the message, such
            as ``error`` or ``note``.

    Returns:
        Severity: ``ERROR`` or ``WARNING`` for the recognised tokens, ``INFO``
        for anything else.
    """

    if not label:
        return Severity.INFO
    return _LABEL_TO_SEVERITY.get(label.strip().lower(), Severity.INFO)


__all__ = ["Severity", "severity_from_label"]
