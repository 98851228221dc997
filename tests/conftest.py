from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping

import pytest
import yaml

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[Mapping[str, object]], Path]:
    """Write a localctx.yml next to the test repository and return its path."""

    def _write(data: Mapping[str, object]) -> Path:
        path = tmp_path / "localctx.yml"
        path.write_text(yaml.safe_dump(dict(data), sort_keys=False), encoding="utf-8")
        return path

    return _write
