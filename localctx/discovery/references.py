"""Reverse import-graph discovery: which files reference the matched files."""

from __future__ import annotations

import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Collection, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

import yaml

from ..logging import get_logger
from ..models import FileReference
from ..repo_walker import SOURCE_SUFFIXES, iter_source_files

logger = get_logger("discovery.references")

_QUOTED_IMPORT_PATTERNS = (
    re.compile(r"^[ \t]*(?:import|export|part)\s+['\"]([^'\"]+)['\"]", re.MULTILINE),
    re.compile(r"\bfrom\s+['\"]([^'\"]+)['\"]"),
    re.compile(r"\brequire\(\s*['\"]([^'\"]+)['\"]\s*\)"),
    re.compile(r"\bimport\(\s*['\"]([^'\"]+)['\"]\s*\)"),
)
_PY_FROM_IMPORT = re.compile(
    r"^[ \t]*from[ \t]+(\.+[\w.]*|[A-Za-z_][\w.]*)[ \t]+import[ \t]+([^\n#]+)", re.MULTILINE
)
_PY_IMPORT = re.compile(r"^[ \t]*import[ \t]+([\w. \t,]+?)[ \t]*(?:#.*)?$", re.MULTILINE)

_PYTHON_PROJECT_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg")
_PUBSPEC = "pubspec.yaml"


def parse_imports(text: str, *, python: bool = False) -> List[str]:
    """Return import specifiers found in ``text``, in order of first appearance.

    Quoted specifiers cover Dart/JS/TS style imports, re-exports, ``part``
    directives, ``require()`` and dynamic ``import()``. With ``python`` set,
    ``from``/``import`` statements are returned as dotted module names, relative
    ones keeping their leading dots.
    """
    found: Dict[str, None] = {}
    if python:
        for match in _PY_FROM_IMPORT.finditer(text):
            module = match.group(1)
            found.setdefault(module, None)
            # ``from pkg import mod`` may name a submodule rather than an attribute.
            for name in _imported_names(match.group(2)):
                separator = "" if module.endswith(".") else "."
                found.setdefault(f"{module}{separator}{name}", None)
        for match in _PY_IMPORT.finditer(text):
            for part in match.group(1).split(","):
                module = part.strip().split()[0] if part.strip() else ""
                if module:
                    found.setdefault(module, None)
        return list(found)

    matches = []
    for pattern in _QUOTED_IMPORT_PATTERNS:
        matches.extend((match.start(), match.group(1)) for match in pattern.finditer(text))
    for _, specifier in sorted(matches):
        found.setdefault(specifier, None)
    return list(found)


def extract_imports(file_path: str | Path) -> List[str]:
    """Read ``file_path`` and return its import specifiers; unreadable files have none."""
    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read imports from %s: %s", path, exc)
        return []
    return parse_imports(text, python=path.suffix == ".py")


class ImportResolver:
    """Resolves import specifiers to absolute file paths within a project."""

    def __init__(self, project_root: str | Path) -> None:
        self._root = Path(project_root).resolve()
        self._markers: Dict[tuple, Optional[Path]] = {}
        self._package_names: Dict[Path, Optional[str]] = {}

    def resolve(self, specifier: str, current_file: str | Path) -> Optional[str]:
        current = Path(current_file)
        if current.suffix == ".py":
            return self._resolve_python(specifier, current)
        if specifier.startswith("package:"):
            return self._resolve_package(specifier[len("package:") :], current)
        if specifier.startswith("."):
            return _with_source_suffix(os.path.join(current.parent, specifier))
        if specifier.startswith("/") or current.suffix != ".dart":
            return None
        package_dir = self._find_marker(current.parent, (_PUBSPEC,))
        if package_dir is None:
            return None
        return _with_source_suffix(os.path.join(package_dir, "lib", specifier))

    # ------------------------------------------------------------------
    # Internal helpers

    def _resolve_package(self, remainder: str, current: Path) -> Optional[str]:
        name, _, rel_path = remainder.partition("/")
        if not rel_path:
            return None
        package_dir = self._find_marker(current.parent, (_PUBSPEC,))
        if package_dir is None or self._package_name(package_dir) != name:
            return None
        return _with_source_suffix(os.path.join(package_dir, "lib", rel_path))

    def _resolve_python(self, specifier: str, current: Path) -> Optional[str]:
        stripped = specifier.lstrip(".")
        dots = len(specifier) - len(stripped)
        parts = [part for part in stripped.split(".") if part]
        if dots:
            base = current.parent
            for _ in range(dots - 1):
                base = base.parent
            return _python_module(base, parts)

        if not parts:
            return None
        project_dir = self._find_marker(current.parent, _PYTHON_PROJECT_MARKERS)
        if project_dir is None:
            return None
        for base in (project_dir, project_dir / "src"):
            resolved = _python_module(base, parts)
            if resolved is not None and os.path.isfile(resolved):
                return resolved
        return None

    def _find_marker(self, start: Path, markers: Sequence[str]) -> Optional[Path]:
        key = (start, tuple(markers))
        if key in self._markers:
            return self._markers[key]
        found: Optional[Path] = None
        for candidate in (start, *start.parents):
            if any((candidate / marker).is_file() for marker in markers):
                found = candidate
                break
            if candidate == self._root:
                break
        self._markers[key] = found
        return found

    def _package_name(self, package_dir: Path) -> Optional[str]:
        if package_dir not in self._package_names:
            self._package_names[package_dir] = _read_pubspec_name(package_dir)
        return self._package_names[package_dir]


class ReferenceTracker:
    """Walks the reverse import graph outward from a set of target files."""

    def __init__(
        self,
        *,
        max_workers: int = 10,
        excluded_dirs: Optional[Collection[str]] = None,
    ) -> None:
        self.max_workers = max(1, max_workers)
        self.excluded_dirs = tuple(excluded_dirs or ())

    def find_referencing_files(
        self,
        target_files: Iterable[str],
        project_root: str | Path,
        max_depth: int = -1,
    ) -> Dict[str, FileReference]:
        """Return the targets (depth 0) plus every file importing them, transitively.

        A file joins at depth *d* when one of its resolved imports was already
        tracked when level *d* began. ``max_depth`` of ``-1`` runs until a level
        adds nothing; ``0`` returns only the targets.
        """
        references: Dict[str, FileReference] = {}
        for target in target_files:
            path = str(Path(target).resolve())
            references[path] = FileReference(file=path, imports=(), depth=0)
        if max_depth == 0 or not references:
            return references

        root = Path(project_root).resolve()
        sources = [
            str(path)
            for path in iter_source_files(root, excluded_dirs=self.excluded_dirs)
            if str(path) not in references
        ]
        resolved = self._resolve_all(sources, root)

        depth = 1
        while max_depth < 0 or depth <= max_depth:
            tracked = frozenset(references)
            found: Dict[str, FileReference] = {}
            for source in sources:
                if source in references:
                    continue
                hits = sorted(resolved[source] & tracked)
                if hits:
                    found[source] = FileReference(file=source, imports=tuple(hits), depth=depth)
            if not found:
                break
            logger.debug("Depth %d: %d referencing file(s)", depth, len(found))
            references.update(found)
            depth += 1
        return references

    def _resolve_all(self, sources: Sequence[str], root: Path) -> Dict[str, FrozenSet[str]]:
        resolver = ImportResolver(root)

        def _resolve(source: str) -> FrozenSet[str]:
            targets = set()
            for specifier in extract_imports(source):
                target = resolver.resolve(specifier, source)
                if target is not None:
                    targets.add(target)
            return frozenset(targets)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return dict(zip(sources, executor.map(_resolve, sources)))


def find_referencing_files(
    target_files: Iterable[str],
    project_root: str | Path,
    max_depth: int = -1,
    *,
    max_workers: int = 10,
    excluded_dirs: Optional[Collection[str]] = None,
) -> Dict[str, FileReference]:
    tracker = ReferenceTracker(max_workers=max_workers, excluded_dirs=excluded_dirs)
    return tracker.find_referencing_files(target_files, project_root, max_depth)


def resolve_import(
    specifier: str, current_file: str | Path, project_root: str | Path
) -> Optional[str]:
    return ImportResolver(project_root).resolve(specifier, current_file)


def referencing_paths(references: Mapping[str, FileReference]) -> List[str]:
    """Return the sorted paths discovered beyond the targets themselves."""
    return sorted(path for path, ref in references.items() if ref.depth > 0)


def _imported_names(clause: str) -> List[str]:
    names = []
    for part in clause.strip().strip("()").split(","):
        tokens = part.split()
        if tokens and re.fullmatch(r"\w+", tokens[0]):
            names.append(tokens[0])
    return names


def _python_module(base: Path, parts: Sequence[str]) -> Optional[str]:
    if not parts:
        candidate = base / "__init__.py"
        return os.path.normpath(candidate) if candidate.is_file() else None
    module = base.joinpath(*parts)
    for candidate in (module.with_name(module.name + ".py"), module / "__init__.py"):
        if candidate.is_file():
            return os.path.normpath(candidate)
    return None


def _with_source_suffix(raw_path: str) -> str:
    """Return the first existing file for an import path, trying source suffixes."""
    path = os.path.normpath(raw_path)
    if os.path.isfile(path):
        return path
    stem, suffix = os.path.splitext(path)
    bases = [path]
    if suffix in SOURCE_SUFFIXES:
        bases.append(stem)
    for base in bases:
        for candidate_suffix in SOURCE_SUFFIXES:
            candidate = base + candidate_suffix
            if os.path.isfile(candidate):
                return candidate
    for candidate_suffix in SOURCE_SUFFIXES:
        candidate = os.path.join(path, "index" + candidate_suffix)
        if os.path.isfile(candidate):
            return candidate
    return path


def _read_pubspec_name(package_dir: Path) -> Optional[str]:
    try:
        data = yaml.safe_load((package_dir / _PUBSPEC).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        logger.debug("Could not read %s in %s: %s", _PUBSPEC, package_dir, exc)
        return package_dir.name
    if isinstance(data, dict) and isinstance(data.get("name"), str):
        return data["name"]
    return package_dir.name


__all__ = [
    "ImportResolver",
    "ReferenceTracker",
    "extract_imports",
    "find_referencing_files",
    "parse_imports",
    "referencing_paths",
    "resolve_import",
]
