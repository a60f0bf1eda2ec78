# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn a file unit and flag configuration into an argument vector."""

from __future__ import annotations

from dataclasses import dataclass

from ..config.models import ToolchainConfig
from ..core.models import CompileFlagSet, FileUnit, RunMode


@dataclass(frozen=True, slots=True)
class CommandBuilder:
    """Build per-file toolchain invocations.

    Vectors are laid out as driver tokens, compile flags, the active lint flag
    set, one include flag per directory, the tool token, the file path and,
    for lint-fix runs, the apply-changes flag. Tokens are copied verbatim and
    never split or joined.
    """

    toolchain: ToolchainConfig

    def build(self, unit: FileUnit, flags: CompileFlagSet, mode: RunMode) -> tuple[str, ...]:
        """Return the argument vector for ``unit``.

        Args:
            unit: File to process.
            flags: Flag set shared by the run.
            mode: Requested invocation mode; fix flags win over lint flags.

        Returns:
            tuple[str, ...]: Ordered tokens suitable for ``subprocess`` argv.
        """

        effective = flags.effective_mode(mode)
        tokens: list[str] = list(self.toolchain.driver)
        tokens.extend(flags.flags)
        tokens.extend(flags.lint_flags_for(effective))
        tokens.extend(f"{self.toolchain.include_flag}{directory}" for directory in flags.include_dirs)
        tokens.append(self.toolchain.compile_token if effective is RunMode.COMPILE else self.toolchain.tidy_token)
        tokens.append(str(unit.path))
        if effective is RunMode.LINT_FIX:
            tokens.append(self.toolchain.fix_flag)
        return tuple(tokens)


__all__ = ["CommandBuilder"]
