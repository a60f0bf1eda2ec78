# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for layered configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from clangbatch.config import ConfigError, RunConfig, load_config
from clangbatch.config.loader import DefaultConfigSource, TomlConfigSource, deep_merge, expand_env
from clangbatch.core.models import FileUnit, RunMode


def test_defaults_when_no_files_exist(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.root == tmp_path
    assert config.toolchain.driver == ["clang-build"]
    assert config.files.extensions == [".cpp"]
    assert config.execution.jobs >= 1
    assert config.literal_match is False


def test_pyproject_and_dotfile_merge(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
[tool.clangbatch]
literal_match = true

[tool.clangbatch.execution]
parallel = true
jobs = 4

[tool.clangbatch.flags]
compile = ["-std=c++17"]
""",
        encoding="utf-8",
    )
    (tmp_path / ".clangbatch.toml").write_text(
        """
[execution]
jobs = 2

[flags]
tidy = ["-checks=modernize-*"]
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.literal_match is True
    assert config.execution.parallel is True
    assert config.execution.jobs == 2
    assert config.flags.compile == ["-std=c++17"]
    assert config.flags.tidy == ["-checks=modernize-*"]


def test_includes_are_merged_before_the_document(tmp_path: Path) -> None:
    (tmp_path / "base.toml").write_text('[toolchain]\ndriver = ["pwsh", "clang-build.ps1"]\ninclude_flag = "-isystem"\n')
    (tmp_path / ".clangbatch.toml").write_text('include = "base.toml"\n[toolchain]\ninclude_flag = "-I"\n')

    config = load_config(tmp_path)

    assert config.toolchain.driver == ["pwsh", "clang-build.ps1"]
    assert config.toolchain.include_flag == "-I"


def test_circular_include_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "a.toml").write_text('include = ["b.toml"]\n')
    (tmp_path / "b.toml").write_text('include = ["a.toml"]\n')

    with pytest.raises(ConfigError, match="Circular include"):
        TomlConfigSource(tmp_path / "a.toml").load()


def test_environment_variables_are_expanded(tmp_path: Path) -> None:
    path = tmp_path / "cfg.toml"
    path.write_text('[flags]\ninclude_dirs = ["$LLVM_HOME/include", "${MISSING}/x"]\n')

    data = TomlConfigSource(path, env={"LLVM_HOME": "/opt/llvm"}).load()

    assert data["flags"]["include_dirs"] == ["/opt/llvm/include", "${MISSING}/x"]


def test_invalid_toml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".clangbatch.toml").write_text("[execution\n")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_invalid_values_raise_config_error(tmp_path: Path) -> None:
    (tmp_path / ".clangbatch.toml").write_text("[execution]\njobs = 0\n")

    with pytest.raises(ConfigError, match="Invalid clangbatch configuration"):
        load_config(tmp_path)


def test_empty_driver_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".clangbatch.toml").write_text("[toolchain]\ndriver = []\n")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_explicit_sources_replace_defaults(tmp_path: Path) -> None:
    (tmp_path / ".clangbatch.toml").write_text("literal_match = true\n")

    config = load_config(tmp_path, sources=[DefaultConfigSource()])

    assert config.literal_match is False


def test_deep_merge_and_expand_env_helpers() -> None:
    merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})

    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert expand_env({"k": ["$A", {"n": "${A}b"}]}, {"A": "v"}) == {"k": ["v", {"n": "vb"}]}


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        ({}, RunMode.COMPILE),
        ({"tidy": []}, RunMode.LINT),
        ({"tidy_fix": ["-checks=*"]}, RunMode.LINT_FIX),
        ({"tidy": ["-a"], "tidy_fix": ["-b"]}, RunMode.LINT_FIX),
    ],
)
def test_build_request_resolves_mode(tmp_path: Path, flags: dict[str, list[str]], expected: RunMode) -> None:
    config = RunConfig.model_validate({"flags": flags, "root": str(tmp_path), "execution": {"jobs": 3}})
    files = [FileUnit(path=Path("a.cpp"), project="p")]

    request = config.build_request(files)

    assert request.mode is expected
    assert request.cwd == tmp_path
    assert request.jobs == 3
    assert request.files == tuple(files)


def test_extensions_are_normalised() -> None:
    config = RunConfig.model_validate({"files": {"extensions": ["cc", ".CPP"]}})

    assert config.files.extensions[0] == ".cc"
