# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Literal and pattern matching strategies used by project and file selection."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..core.errors import ConfigError


@runtime_checkable
class EntryMatcher(Protocol):
    """Predicate over a compiled list of include or ignore entries."""

    def matches(self, value: str) -> bool:
        """Return ``True`` when ``value`` matches at least one entry."""
        ...

    def __bool__(self) -> bool:
        """Return ``True`` when at least one entry is configured."""
        ...


@runtime_checkable
class MatchStrategy(Protocol):
    """Factory turning raw entries into an :class:`EntryMatcher`."""

    @property
    def literal(self) -> bool:
        """Return ``True`` for exact-string strategies."""
        ...

    def compile(self, entries: Sequence[str]) -> EntryMatcher:
        """Return a matcher for ``entries``."""
        ...


@dataclass(frozen=True, slots=True)
class LiteralMatcher:
    """Match values by exact string equality."""

    entries: frozenset[str] = field(default_factory=frozenset)

    def matches(self, value: str) -> bool:
        return value in self.entries

    def __bool__(self) -> bool:
        return bool(self.entries)


@dataclass(frozen=True, slots=True)
class PatternMatcher:
    """Match values by case-insensitive regular expression search."""

    patterns: tuple[re.Pattern[str], ...] = ()

    def matches(self, value: str) -> bool:
        return any(pattern.search(value) for pattern in self.patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)


class LiteralStrategy:
    """Strategy producing :class:`LiteralMatcher` instances."""

    literal = True

    def compile(self, entries: Sequence[str]) -> LiteralMatcher:
        return LiteralMatcher(frozenset(entries))


class PatternStrategy:
    """Strategy producing :class:`PatternMatcher` instances.

    A plain word is a valid pattern, so ``foo`` behaves as a case-insensitive
    substring search.
    """

    literal = False

    def compile(self, entries: Sequence[str]) -> PatternMatcher:
        compiled: list[re.Pattern[str]] = []
        for entry in entries:
            try:
                compiled.append(re.compile(entry, re.IGNORECASE))
            except re.error as exc:
                raise ConfigError(f"invalid pattern '{entry}': {exc}") from exc
        return PatternMatcher(tuple(compiled))


def match_strategy(literal: bool) -> MatchStrategy:
    """Return the matching strategy for a run.

    Args:
        literal: ``True`` selects exact-string matching, ``False`` selects
            case-insensitive pattern search.

    Returns:
        MatchStrategy: Strategy shared by every filter of the run.
    """

    return LiteralStrategy() if literal else PatternStrategy()


@dataclass(frozen=True, slots=True)
class IncludeIgnoreFilter:
    """Two-phase include/ignore predicate.

    An empty include matcher admits every value; an admitted value is then
    rejected when it matches any ignore entry.
    """

    include: EntryMatcher
    ignore: EntryMatcher

    @classmethod
    def build(cls, strategy: MatchStrategy, include: Sequence[str], ignore: Sequence[str]) -> IncludeIgnoreFilter:
        """Compile ``include`` and ``ignore`` entries with ``strategy``."""

        return cls(include=strategy.compile(include), ignore=strategy.compile(ignore))

    def accepts(self, value: str) -> bool:
        """Return ``True`` when ``value`` passes inclusion and is not ignored."""

        if self.include and not self.include.matches(value):
            return False
        return not (self.ignore and self.ignore.matches(value))


__all__ = [
    "EntryMatcher",
    "IncludeIgnoreFilter",
    "LiteralMatcher",
    "LiteralStrategy",
    "MatchStrategy",
    "PatternMatcher",
    "PatternStrategy",
    "match_strategy",
]
