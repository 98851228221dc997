"""Configuration loading for localctx (localctx.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = "localctx.yml"
CONFIG_ENV_VAR = "LOCALCTX_CONFIG"

DEFAULT_REFERENCE_DEPTH = -1
DEFAULT_MAX_WORKERS = 10


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or edited."""


@dataclass
class LocalCtxConfig:
    """Represents the settings defined in localctx.yml."""

    root: Path
    config_path: Path
    repo_base_path: Path
    searchable_directories: List[Path] = field(default_factory=list)
    cache_dir: Optional[Path] = None
    reference_depth: int = DEFAULT_REFERENCE_DEPTH
    max_workers: int = DEFAULT_MAX_WORKERS
    exclude_dirs: List[str] = field(default_factory=list)
    log_file: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.cache_dir is None:
            self.cache_dir = self.root / ".localctx" / "cache"


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Return the config file to use: explicit path, ``$LOCALCTX_CONFIG`` or the cwd."""
    if config_path is None:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        config_path = Path(env_value) if env_value else Path.cwd()
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def load_config(config_path: Path | None = None) -> LocalCtxConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        return LocalCtxConfig(root=root, config_path=config_file, repo_base_path=root)

    data = read_config_data(config_file)

    base_str = _as_str(data.get("repo_base_path"))
    repo_base_path = _resolve_path(root, base_str) if base_str else root

    searchable = [
        _resolve_path(repo_base_path, entry)
        for entry in _as_str_list(data.get("searchable_directories"))
    ]

    cache_str = _as_str(data.get("cache_dir"))
    log_str = _as_str(data.get("log_file"))

    reference_depth = _as_int(data.get("reference_depth"))
    if reference_depth is None:
        reference_depth = DEFAULT_REFERENCE_DEPTH
    if reference_depth < -1:
        raise ConfigError("reference_depth must be -1 (unlimited) or a non-negative integer")

    max_workers = _as_int(data.get("max_workers"))
    if max_workers is None:
        max_workers = DEFAULT_MAX_WORKERS
    if max_workers < 1:
        raise ConfigError("max_workers must be at least 1")

    return LocalCtxConfig(
        root=root,
        config_path=config_file,
        repo_base_path=repo_base_path,
        searchable_directories=searchable,
        cache_dir=_resolve_path(root, cache_str) if cache_str else None,
        reference_depth=reference_depth,
        max_workers=max_workers,
        exclude_dirs=_as_str_list(data.get("exclude_dirs")),
        log_file=_resolve_path(root, log_str) if log_str else None,
    )


def read_config_data(path: Path) -> Dict[str, Any]:
    """Parse ``path`` as YAML and return its root mapping."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"Could not read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _resolve_path(base: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "ConfigError",
    "LocalCtxConfig",
    "load_config",
    "read_config_data",
    "resolve_config_path",
]
