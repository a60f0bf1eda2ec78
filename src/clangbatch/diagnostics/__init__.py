# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Diagnostics package exposing output classification and batch summaries."""

from __future__ import annotations

from .classifier import Classification, DiagnosticClassifier, classify_results
from .constants import (
    COMPILER_MISSING_SIGNATURE,
    LINTER_NOT_RECOGNIZED_SIGNATURE,
    MISSING_TOOLCHAIN_MESSAGE,
    ORIGIN_TAG,
)
from .summary import describe, status_for, summarize

__all__ = (
    "COMPILER_MISSING_SIGNATURE",
    "LINTER_NOT_RECOGNIZED_SIGNATURE",
    "MISSING_TOOLCHAIN_MESSAGE",
    "ORIGIN_TAG",
    "Classification",
    "DiagnosticClassifier",
    "classify_results",
    "describe",
    "status_for",
    "summarize",
)
