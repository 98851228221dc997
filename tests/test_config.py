"""Tests for localctx.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from localctx.config import (
    CONFIG_ENV_VAR,
    ConfigError,
    LocalCtxConfig,
    load_config,
    resolve_config_path,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, LocalCtxConfig)
    assert config.root == tmp_path.resolve()
    assert config.config_path == tmp_path.resolve() / "localctx.yml"
    assert config.repo_base_path == tmp_path.resolve()
    assert config.searchable_directories == []
    assert config.cache_dir == tmp_path.resolve() / ".localctx" / "cache"
    assert config.reference_depth == -1
    assert config.max_workers == 10
    assert config.exclude_dirs == []
    assert config.log_file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / "localctx.yml"
    config_file.write_text(
        """
repo_base_path: "workspace"
searchable_directories:
  - "apps"
  - "/opt/shared"
cache_dir: "tmp/cache"
reference_depth: 2
max_workers: 4
exclude_dirs:
  - "generated"
log_file: "logs/localctx.log"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)
    root = tmp_path.resolve()

    assert config.repo_base_path == root / "workspace"
    assert config.searchable_directories == [root / "workspace" / "apps", Path("/opt/shared")]
    assert config.cache_dir == root / "tmp" / "cache"
    assert config.reference_depth == 2
    assert config.max_workers == 4
    assert config.exclude_dirs == ["generated"]
    assert config.log_file == root / "logs" / "localctx.log"


def test_empty_file_yields_defaults(write_config) -> None:
    path = write_config({})
    path.write_text("", encoding="utf-8")

    config = load_config(path)

    assert config.reference_depth == -1
    assert config.searchable_directories == []


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    config_file = tmp_path / "localctx.yml"
    config_file.write_text("searchable_directories: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_non_mapping_root_raises(tmp_path: Path) -> None:
    config_file = tmp_path / "localctx.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


@pytest.mark.parametrize(
    ("field", "value"),
    [("reference_depth", -2), ("max_workers", 0)],
)
def test_out_of_range_numbers_raise(write_config, field: str, value: int) -> None:
    path = write_config({field: value})

    with pytest.raises(ConfigError):
        load_config(path)


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    custom = tmp_path / "custom.yml"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))

    assert resolve_config_path() == custom.resolve()
    assert resolve_config_path(tmp_path) == (tmp_path / "localctx.yml").resolve()
