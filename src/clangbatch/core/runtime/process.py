# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; the wrapper passes argument lists
# straight through and never enables ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

TIMEOUT_RETURNCODE: Final[int] = 124
OUTPUT_ENCODING: Final[str] = "utf-8"


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable command execution options.

    Output is always decoded as text. Undecodable bytes are substituted
    according to ``errors`` so a tool echoing non-UTF-8 source lines still
    yields a result.
    """

    cwd: Path | None = None
    capture_output: bool = False
    timeout: float | None = None
    discard_stdin: bool = False
    encoding: str = OUTPUT_ENCODING
    errors: str = "replace"


def _ensure_text(value: str | bytes | None, options: CommandOptions) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(options.encoding, errors=options.errors)


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Resolve the executable of ``args`` against ``PATH``.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Argument list with an absolute executable path.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        if not head_path.exists():
            raise FileNotFoundError(f"Executable '{head}' does not exist")
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
) -> CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    Every argument is forwarded as its own ``argv`` entry; nothing is joined or
    re-split, so tokens containing shell metacharacters reach the tool intact.
    The exit status is reported, never raised.

    Args:
        args: Command and argument sequence to execute.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess[str]: Subprocess execution metadata. A timeout is
        reported as exit status ``124`` with a note appended to stderr.

    Raises:
        FileNotFoundError: If the executable cannot be resolved.
        OSError: If the operating system refuses to start the process, for
            example a driver without execute permission or a missing ``cwd``.
    """

    normalized = _normalize_args(args)
    resolved_options = options or CommandOptions()

    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603 - argument list, no shell
            normalized,
            cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
            check=False,
            capture_output=resolved_options.capture_output,
            encoding=resolved_options.encoding,
            errors=resolved_options.errors,
            timeout=resolved_options.timeout,
            stdin=subprocess.DEVNULL if resolved_options.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _ensure_text(exc.stdout, resolved_options) or ""
        stderr = _ensure_text(exc.stderr, resolved_options)
        timeout_value = resolved_options.timeout
        timeout_msg = (
            f"Command timed out after {timeout_value:.1f}s" if timeout_value is not None else "Command timed out"
        )
        combined_stderr = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
        completed = subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_RETURNCODE,
            stdout=stdout,
            stderr=combined_stderr,
        )

    return completed


__all__ = [
    "OUTPUT_ENCODING",
    "TIMEOUT_RETURNCODE",
    "CommandOptions",
    "run_command",
]
