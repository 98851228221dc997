"""File discovery by glob pattern and content regular expression."""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Collection, List, Optional, Sequence

from ..logging import get_logger
from ..repo_walker import iter_files
from .globbing import compile_globs

logger = get_logger("discovery.matcher")

DEFAULT_MAX_WORKERS = 10


class InvalidBasePathError(RuntimeError):
    """Raised when a search base path is missing or not a directory."""


def find_files_by_glob(
    base_path: str | Path,
    patterns: Sequence[str],
    *,
    excluded_dirs: Collection[str] = (),
) -> List[str]:
    """Return sorted absolute paths under ``base_path`` whose relative path matches a glob."""
    globs = compile_globs(patterns)
    if not globs:
        return []
    root = Path(base_path).resolve()
    matched = set()
    for path in iter_files(root, excluded_dirs=excluded_dirs):
        rel_path = path.relative_to(root).as_posix()
        if globs.matches(rel_path):
            matched.add(str(path))
    return sorted(matched)


def search_files_by_regex(
    files: Sequence[str],
    patterns: Sequence[str],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[str]:
    """Return the sorted subset of ``files`` whose text matches any pattern."""
    if not files or not patterns:
        return []
    compiled = _compile_regexes(patterns)
    if not compiled:
        return []

    def _test(file_path: str) -> Optional[str]:
        content = _read_text(file_path)
        if content is None:
            return None
        for regex in compiled:
            if regex.search(content):
                return file_path
        return None

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        results = list(executor.map(_test, files))
    return sorted({path for path in results if path is not None})


def find_matching_files(
    base_path: str | Path,
    globs: Optional[Sequence[str]] = None,
    regexes: Optional[Sequence[str]] = None,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    excluded_dirs: Optional[Collection[str]] = None,
) -> List[str]:
    """Return files matching any glob or containing a match for any regex.

    When globs are given, the content search only looks at glob-matched files;
    otherwise it looks at every file under ``base_path``. Calling with neither
    globs nor regexes is a no-op returning an empty list.
    """
    root = _validate_base_path(base_path)
    if not globs and not regexes:
        return []

    excluded = tuple(excluded_dirs or ())
    matched = set()
    if globs:
        matched.update(find_files_by_glob(root, globs, excluded_dirs=excluded))

    if regexes:
        if globs:
            candidates = sorted(matched)
        else:
            candidates = find_files_by_glob(root, ["**/*"], excluded_dirs=excluded)
        matched.update(
            search_files_by_regex(candidates, regexes, max_workers=max_workers)
        )

    logger.debug("Matched %d file(s) under %s", len(matched), root)
    return sorted(matched)


def _validate_base_path(base_path: str | Path) -> Path:
    path = Path(base_path)
    if not path.exists():
        raise InvalidBasePathError(f'Base path "{base_path}" does not exist')
    if not path.is_dir():
        raise InvalidBasePathError(f'Base path "{base_path}" is not a directory')
    return path.resolve()


def _compile_regexes(patterns: Sequence[str]) -> List["re.Pattern[str]"]:
    compiled: List["re.Pattern[str]"] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.MULTILINE))
        except re.error as exc:
            logger.warning("Ignoring invalid regex pattern %r: %s", pattern, exc)
    return compiled


def _read_text(file_path: str) -> Optional[str]:
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read file %s: %s", file_path, exc)
        return None


__all__ = [
    "DEFAULT_MAX_WORKERS",
    "InvalidBasePathError",
    "find_files_by_glob",
    "find_matching_files",
    "search_files_by_regex",
]
