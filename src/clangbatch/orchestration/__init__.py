# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Orchestration entry points."""

from __future__ import annotations

from .engine import Engine, EngineDeps, run_batch

__all__ = ["Engine", "EngineDeps", "run_batch"]
