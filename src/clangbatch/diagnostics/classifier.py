# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Classify raw toolchain output into structured diagnostics."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Final

from ..core.models import Diagnostic, ProcessResult
from ..core.severity import Severity, severity_from_label
from .constants import CONFIGURATION_SIGNATURES, MISSING_TOOLCHAIN_MESSAGE, ORIGIN_TAG

# ``<path>:<line>:<column>: <severity>: <message>``; the path may carry a
# drive letter such as ``C:\src\main.cpp``. The severity is a bare word token;
# prose such as ``In instantiation of ...`` stays an unlocated line.
_LOCATION_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<file>(?:[A-Za-z]:)?[^:]+):(?P<line>\d+):(?P<column>\d+):\s*(?P<severity>[A-Za-z][A-Za-z ]*):\s?(?P<message>.*)$"
)


@dataclass(frozen=True, slots=True)
class Classification:
    """Diagnostics extracted from one process result."""

    diagnostics: tuple[Diagnostic, ...]
    configuration_failed: bool


@dataclass(frozen=True, slots=True)
class DiagnosticClassifier:
    """Turn output lines into :class:`Diagnostic` objects, one per line.

    Every line carrying a toolchain signature becomes its own
    configuration-error diagnostic and marks the whole result as
    configuration-failed. Located lines become error, warning or info
    diagnostics; every other line is kept verbatim at info severity.
    """

    origin: str = ORIGIN_TAG
    signatures: tuple[str, ...] = CONFIGURATION_SIGNATURES
    remediation: str = MISSING_TOOLCHAIN_MESSAGE

    def classify(self, result: ProcessResult) -> Classification:
        """Classify the combined stdout/stderr of ``result``."""

        return self.classify_lines(result.combined_output.splitlines())

    def classify_text(self, text: str) -> Classification:
        """Classify a raw block of output text."""

        return self.classify_lines(text.splitlines())

    def classify_lines(self, lines: Iterable[str]) -> Classification:
        """Classify ``lines`` preserving their order.

        Args:
            lines: Output lines without trailing newlines.

        Returns:
            Classification: Diagnostics plus whether a toolchain signature was seen.
        """

        diagnostics: list[Diagnostic] = []
        configuration_failed = False
        for raw_line in lines:
            line = raw_line.rstrip("\r")
            if not line.strip():
                continue
            if self._is_configuration_line(line):
                diagnostics.append(self.configuration_diagnostic())
                configuration_failed = True
                continue
            diagnostics.append(self.parse_line(line))
        return Classification(diagnostics=tuple(diagnostics), configuration_failed=configuration_failed)

    def parse_line(self, line: str) -> Diagnostic:
        """Return the diagnostic for a single non-signature line."""

        match = _LOCATION_PATTERN.match(line)
        if match is None:
            return Diagnostic(severity=Severity.INFO, message=line, origin=self.origin)
        return Diagnostic(
            severity=severity_from_label(match.group("severity")),
            message=match.group("message"),
            file=match.group("file"),
            line=int(match.group("line")),
            column=int(match.group("column")),
            origin=self.origin,
        )

    def configuration_diagnostic(self) -> Diagnostic:
        """Return the canned diagnostic emitted for a missing toolchain."""

        return Diagnostic(severity=Severity.CONFIGURATION_ERROR, message=self.remediation, origin=self.origin)

    def _is_configuration_line(self, line: str) -> bool:
        return any(signature in line for signature in self.signatures)


def classify_results(
    results: Sequence[ProcessResult],
    classifier: DiagnosticClassifier | None = None,
) -> list[tuple[ProcessResult, Classification]]:
    """Classify every result in ``results`` keeping their order."""

    active = classifier or DiagnosticClassifier()
    return [(result, active.classify(result)) for result in results]


__all__ = ["Classification", "DiagnosticClassifier", "classify_results"]
