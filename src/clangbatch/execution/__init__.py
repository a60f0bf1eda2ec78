# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command construction and process execution."""

from __future__ import annotations

from .command_builder import CommandBuilder
from .runner import ProcessRunner, ResultCollector, RunOutcome, RunnerCallable, wrap_runner

__all__ = ["CommandBuilder", "ProcessRunner", "ResultCollector", "RunOutcome", "RunnerCallable", "wrap_runner"]
