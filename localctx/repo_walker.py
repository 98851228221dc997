"""Directory walking shared by the pattern matcher and reference tracker."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Collection, Iterator

from .logging import get_logger

logger = get_logger("repo_walker")

DEPENDENCY_DIRS = frozenset(
    {
        "node_modules",
        "bower_components",
        "vendor",
        "Pods",
        "site-packages",
        "__pycache__",
    }
)

BUILD_DIRS = frozenset({"build", "dist", "target"})

SOURCE_SUFFIXES = (
    ".dart",
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
    ".py",
    ".java",
    ".kt",
    ".kts",
    ".swift",
    ".go",
    ".rs",
    ".rb",
    ".php",
    ".cpp",
    ".cc",
    ".hpp",
    ".c",
    ".h",
    ".cs",
)

_FENCE_BY_SUFFIX = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "jsx",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".dart": "dart",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".swift": "swift",
    ".scala": "scala",
    ".sh": "bash",
}


def iter_files(
    root: Path,
    *,
    excluded_dirs: Collection[str] = (),
    skip_build_dirs: bool = False,
) -> Iterator[Path]:
    """Yield every regular file under ``root``, pruning hidden and dependency directories."""
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not _is_excluded_dir(name, excluded_dirs, skip_build_dirs)
        )
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            path = current_dir / filename
            if path.is_file():
                yield path


def iter_source_files(
    root: Path, *, excluded_dirs: Collection[str] = ()
) -> Iterator[Path]:
    """Yield source files (by suffix allow-list), skipping build output as well."""
    for path in iter_files(root, excluded_dirs=excluded_dirs, skip_build_dirs=True):
        if path.name.endswith(SOURCE_SUFFIXES):
            yield path


def fence_language(path: str | Path) -> str:
    """Return the markdown code fence tag for a file, or an empty string."""
    return _FENCE_BY_SUFFIX.get(Path(path).suffix.lower(), "")


def _is_excluded_dir(name: str, excluded_dirs: Collection[str], skip_build_dirs: bool) -> bool:
    if name.startswith("."):
        return True
    if name in DEPENDENCY_DIRS or name in excluded_dirs:
        return True
    return skip_build_dirs and name in BUILD_DIRS


def _log_walk_error(error: OSError) -> None:
    logger.debug("Could not read directory %s: %s", error.filename, error)


__all__ = [
    "BUILD_DIRS",
    "DEPENDENCY_DIRS",
    "SOURCE_SUFFIXES",
    "fence_language",
    "iter_files",
    "iter_source_files",
]
