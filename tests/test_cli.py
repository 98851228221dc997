"""CLI parser and command behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from localctx.cli import _build_parser, main
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "tools"])
    assert args.verbose is True
    assert args.command == "tools"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["tools", "--verbose"])
    assert args.verbose is True
    assert args.command == "tools"


def test_cli_parses_fetch_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["fetch", "auth", "user", "--glob", "**/*.ts", "--glob", "!**/*.test.ts", "--regex", "class", "--depth", "2"]
    )
    assert args.terms == ["auth", "user"]
    assert args.globs == ["**/*.ts", "!**/*.test.ts"]
    assert args.regex == ["class"]
    assert args.depth == 2
    assert args.verbose is False
    assert args.config is None


def test_cli_accepts_config_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["config", "get", "--config", "custom.yml"])
    assert args.operation == "get"
    assert args.key is None
    assert args.config == Path("custom.yml")


def test_cli_rejects_unknown_config_operation() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["config", "rename", "key"])


def test_fetch_prints_markdown(
    repo_builder: RepoBuilder, write_config, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_builder.write({"services/auth/login.ts": "export function login(user: string) {}\n"})
    config_path = write_config(
        {
            "repo_base_path": str(repo_builder.path()),
            "searchable_directories": ["services"],
        }
    )

    main(["fetch", "auth", "--glob", "**/*.ts", "--config", str(config_path)])

    output = capsys.readouterr().out
    assert output.startswith("# Directory Analysis: auth")
    assert "##### `login`" in output


def test_fetch_rejects_invalid_depth(write_config) -> None:
    config_path = write_config({})

    with pytest.raises(SystemExit) as excinfo:
        main(["fetch", "auth", "--depth", "-2", "--config", str(config_path)])

    assert excinfo.value.code == 1


def test_config_command_edits_file(write_config, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = write_config({"searchable_directories": []})

    main(["--config", str(config_path), "config", "add", "searchable_directories", "apps"])
    main(["--config", str(config_path), "config", "set", "reference_depth", "3"])

    saved = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    assert saved == {"searchable_directories": ["apps"], "reference_depth": 3}
    assert "Configuration updated successfully." in capsys.readouterr().out


def test_config_command_reports_errors(write_config) -> None:
    config_path = write_config({"reference_depth": 1})

    with pytest.raises(SystemExit) as excinfo:
        main(["config", "add", "reference_depth", "x", "--config", str(config_path)])

    assert excinfo.value.code == 1


def test_invalid_configuration_exits(tmp_path: Path) -> None:
    config_path = tmp_path / "localctx.yml"
    config_path.write_text("max_workers: 0\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["tools", "--config", str(config_path)])

    assert excinfo.value.code == 1


def test_tools_command(write_config, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = write_config({})

    main(["tools", "--config", str(config_path)])

    output = capsys.readouterr().out
    assert output.startswith("# Available Tools")
    assert str(config_path.resolve()) in output


def test_cli_parses_serve_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--port", "9000", "-v"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9000
    assert args.verbose is True
