# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fixed strings recognised in, and attached to, toolchain output."""

from __future__ import annotations

from typing import Final

from ..core.models import ORIGIN_TAG

COMPILER_MISSING_SIGNATURE: Final[str] = "error: The system cannot find the file specified."
LINTER_NOT_RECOGNIZED_SIGNATURE: Final[str] = "The term 'clang-tidy' is not recognized"
CONFIGURATION_SIGNATURES: Final[tuple[str, ...]] = (
    COMPILER_MISSING_SIGNATURE,
    LINTER_NOT_RECOGNIZED_SIGNATURE,
)
MISSING_TOOLCHAIN_MESSAGE: Final[str] = (
    "\n\nDid you forget to set-up LLVM?\n\n"
    "Please follow these steps:\n"
    "- Go to http://releases.llvm.org/download.html. \n"
    "- Download the latest LLVM pre-build binaries for your platform. \n"
    "- Run installer. \n"
    "- During install, tick checkbox 'Add LLVM to the system PATH for all users/current user'. \n"
    "- Restart the editor."
)

__all__ = [
    "COMPILER_MISSING_SIGNATURE",
    "CONFIGURATION_SIGNATURES",
    "LINTER_NOT_RECOGNIZED_SIGNATURE",
    "MISSING_TOOLCHAIN_MESSAGE",
    "ORIGIN_TAG",
]
