# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration sources (defaults, TOML, pyproject) and the layered loader."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from ..core.errors import ConfigError
from .models import RunConfig

DEFAULT_INCLUDE_KEY: Final[str] = "include"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "clangbatch"
CONFIG_FILENAME: Final[str] = ".clangbatch.toml"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class ConfigSource(Protocol):
    """Provide configuration data loaded from disk or other mediums."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return configuration values as a mapping."""
        ...

    def describe(self) -> str:
        """Return a human-readable description of the source."""
        ...


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return RunConfig().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a TOML document with include support."""

    def __init__(
        self,
        path: Path,
        *,
        name: str | None = None,
        include_key: str = DEFAULT_INCLUDE_KEY,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._root_path = path
        self.name = name or str(path)
        self._include_key = include_key
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        return self._load(self._root_path, ())

    def _load(self, path: Path, stack: tuple[Path, ...]) -> Mapping[str, Any]:
        if not path.exists():
            return {}
        resolved = path.resolve()
        if resolved in stack:
            include_chain = " -> ".join(str(entry) for entry in (*stack, resolved))
            raise ConfigError(f"Circular include detected: {include_chain}")
        try:
            with resolved.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigError(f"Configuration at {path} must be a table")
        document: dict[str, Any] = dict(self._select(data))
        includes = document.pop(self._include_key, None)
        merged: dict[str, Any] = {}
        for include_path in self._coerce_includes(includes, resolved.parent):
            fragment = self._load(include_path, stack + (resolved,))
            merged = deep_merge(merged, fragment)
        merged = deep_merge(merged, document)
        return expand_env(merged, self._env)

    def _select(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        return data

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        if raw is None:
            return []
        if isinstance(raw, (str, Path)):
            return [self._resolve_path(Path(raw), base_dir)]
        if isinstance(raw, Iterable):
            return [self._resolve_path(Path(item), base_dir) for item in raw]
        raise ConfigError(f"Unsupported include declaration: {raw!r}")

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        return path if path.is_absolute() else (base_dir / path)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.clangbatch]`` within ``pyproject.toml``."""

    def _select(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return section

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` recursively updated with ``override``."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Expand ``$VAR`` and ``${VAR}`` references in every string value.

    Unknown variables are left untouched.
    """

    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _expand_env_string(value, env)
    if isinstance(value, Mapping):
        return {k: _expand_env_value(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(v, env) for v in value]
    return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key is None:
            return match.group(0)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


def default_sources(root: Path) -> list[ConfigSource]:
    """Return the ordered sources consulted for a project rooted at ``root``."""

    return [
        DefaultConfigSource(),
        PyProjectConfigSource(root / PYPROJECT_FILENAME),
        TomlConfigSource(root / CONFIG_FILENAME),
    ]


def load_config(root: Path, *, sources: Sequence[ConfigSource] | None = None) -> RunConfig:
    """Merge configuration sources for ``root`` into a :class:`RunConfig`.

    Later sources override earlier ones.

    Args:
        root: Project root used to locate configuration files.
        sources: Optional explicit source list replacing :func:`default_sources`.

    Returns:
        RunConfig: Validated configuration with ``root`` populated.

    Raises:
        ConfigError: When a source is malformed or the merged data fails validation.
    """

    merged: dict[str, Any] = {}
    for source in sources if sources is not None else default_sources(root):
        merged = deep_merge(merged, source.load())
    merged["root"] = str(root)
    try:
        return RunConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid clangbatch configuration: {exc}") from exc


__all__ = [
    "CONFIG_FILENAME",
    "ConfigSource",
    "DefaultConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "deep_merge",
    "default_sources",
    "expand_env",
    "load_config",
]
