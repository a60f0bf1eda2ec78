# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project and file selection."""

from __future__ import annotations

from .matching import IncludeIgnoreFilter, LiteralStrategy, PatternStrategy, match_strategy
from .selector import Selector

__all__ = ["IncludeIgnoreFilter", "LiteralStrategy", "PatternStrategy", "Selector", "match_strategy"]
