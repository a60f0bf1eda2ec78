# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across clangbatch."""

from __future__ import annotations


class ClangBatchError(Exception):
    """Base class for errors raised by clangbatch."""


class ConfigError(ClangBatchError):
    """Raised when configuration input is invalid."""


class GuardImbalanceError(ClangBatchError):
    """Raised when a notification guard is released twice or without acquisition."""


__all__ = ["ClangBatchError", "ConfigError", "GuardImbalanceError"]
