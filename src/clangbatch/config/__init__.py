# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for clangbatch runs."""

from __future__ import annotations

from ..core.errors import ConfigError
from .loader import load_config
from .models import (
    ExecutionConfig,
    FileFilterConfig,
    FlagConfig,
    OutputConfig,
    ProjectFilterConfig,
    RunConfig,
    ToolchainConfig,
)

__all__ = [
    "ConfigError",
    "ExecutionConfig",
    "FileFilterConfig",
    "FlagConfig",
    "OutputConfig",
    "ProjectFilterConfig",
    "RunConfig",
    "ToolchainConfig",
    "load_config",
]
