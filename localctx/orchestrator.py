"""Pipeline orchestration for fetch-context requests."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import LocalCtxConfig
from .discovery import InvalidBasePathError, ReferenceTracker, find_matching_files, referencing_paths
from .extraction import extract_structure
from .logging import get_logger
from .models import CacheRequest, ExtractedStructure, FetchRequest
from .render import MarkdownBuilder
from .stores import ContextCache

README_CANDIDATES = ("README.md", "readme.md", "README.MD")
RESULT_SEPARATOR = "\n\n---\n\n"
DEFAULT_GLOBS = ("**/*",)

TOOLS_REFERENCE = """# Available Tools

## 1. fetch-context
**Purpose:** Searches configured directories for the given terms and returns a
markdown bundle describing the matching files, their classes, methods and
functions, and the files that import them.

**Parameters:**
- **search_terms** (required, list): Terms matched case-insensitively against
  configured directory names and their immediate subdirectories
  - Example: ["auth", "user", "login"]
- **globs** (optional, list): File patterns within matched directories
  - Example: ["**/*.ts", "!**/*.test.ts"]
- **regex** (optional, list): Content patterns searched within the glob matches (every
  file when no globs are given). Results are the union of glob and regex matches,
  so a regex adds files rather than filtering them
  - Example: ["class.*Controller", "TODO|FIXME"]
- **reference_depth** (optional, int): How many levels of importers to follow
  - -1 follows imports until nothing new is found; 0 skips reference tracking

## 2. update-config
**Purpose:** Reads and edits the localctx.yml configuration file.

**Parameters:**
- **operation** (required): One of get, set, delete, add, remove
- **key** (optional): Dot-separated path, e.g. "cache_dir" or "searchable_directories.0"
- **value** (optional): Value for "set"
- **array_item** (optional): Item for "add"/"remove"

## 3. list-tools
**Purpose:** Shows this reference.

**Configuration:**
- Config file: {config_path}
- Base repository path: {repo_base_path}
- Cache directory: {cache_dir}
"""


class Orchestrator:
    """Runs discovery, reference tracking, extraction and caching per directory."""

    def __init__(
        self,
        config: LocalCtxConfig,
        *,
        tracker: ReferenceTracker | None = None,
        cache: ContextCache | None = None,
        builder: MarkdownBuilder | None = None,
    ) -> None:
        self.config = config
        self.tracker = tracker or ReferenceTracker(
            max_workers=config.max_workers, excluded_dirs=config.exclude_dirs
        )
        self.cache = cache or ContextCache(config.cache_dir)  # type: ignore[arg-type]
        self.builder = builder or MarkdownBuilder()
        self.logger = get_logger("orchestrator")

    def fetch_context(self, request: FetchRequest) -> str:
        """Return the markdown context bundle for ``request``."""
        directories = self.select_directories(request.search_terms)
        if not directories:
            self.logger.info("No directories matched %s", ", ".join(request.search_terms))
            return self._no_directories_note(request.search_terms)

        results = [self._process_directory_safely(directory, request) for directory in directories]
        return RESULT_SEPARATOR.join(results)

    def select_directories(self, search_terms: Sequence[str]) -> List[Path]:
        """Return configured directories (or their subdirectories) named by a term."""
        terms = [term.lower() for term in search_terms if term]
        selected: List[Path] = []
        if not terms:
            return selected
        for directory in self.config.searchable_directories:
            if not directory.is_dir():
                self.logger.warning("Configured directory %s does not exist; skipping", directory)
                continue
            if _name_matches(directory.name, terms):
                selected.append(directory)
                continue
            try:
                children = sorted(directory.iterdir())
            except OSError as exc:
                self.logger.warning("Could not list %s: %s", directory, exc)
                continue
            for child in children:
                if child.is_dir() and not child.name.startswith(".") and _name_matches(child.name, terms):
                    selected.append(child)
        return selected

    def tools_reference(self) -> str:
        return TOOLS_REFERENCE.format(
            config_path=self.config.config_path,
            repo_base_path=self.config.repo_base_path,
            cache_dir=self.config.cache_dir,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _process_directory_safely(self, directory: Path, request: FetchRequest) -> str:
        try:
            return self._process_directory(directory, request)
        except (InvalidBasePathError, OSError) as exc:
            self.logger.error("Failed to analyse %s: %s", directory, exc)
            return (
                f"# Error analyzing {directory.name}\n\n"
                f"**Search terms:** {', '.join(request.search_terms)}\n\n"
                f"**Error:** {exc}\n"
            )

    def _process_directory(self, directory: Path, request: FetchRequest) -> str:
        name = directory.name
        depth = self._resolve_depth(request)
        globs = list(request.globs) if request.globs else list(DEFAULT_GLOBS)
        matched = find_matching_files(
            directory,
            globs,
            request.regex,
            max_workers=self.config.max_workers,
            excluded_dirs=self.config.exclude_dirs,
        )
        if not matched and (request.globs or request.regex):
            return (
                f"# Directory Analysis: {name}\n\n"
                "No files found matching the specified patterns.\n\n"
                f"**Glob patterns:** {', '.join(request.globs) or 'None'}\n"
                f"**Regex patterns:** {', '.join(request.regex) or 'None'}\n"
            )

        referencing: List[str] = []
        if matched and depth != 0:
            references = self.tracker.find_referencing_files(matched, directory, depth)
            referencing = referencing_paths(references)

        all_files = matched + referencing
        cache_request = CacheRequest(
            target_directory=str(directory.resolve()),
            globs=list(request.globs),
            regex=list(request.regex),
            reference_depth=depth,
        )
        cached = self.cache.lookup(cache_request, all_files)
        if cached is not None:
            self.logger.info("Using cached context for %s", name)
            return cached

        self.logger.info(
            "Analysing %s: %d matched, %d referencing file(s)", name, len(matched), len(referencing)
        )
        structures = self._extract_all(all_files)
        markdown = self.builder.build(
            name,
            {path: structures[path] for path in matched},
            {path: structures[path] for path in referencing} or None,
            readme_path=_find_readme(directory),
            root=directory.resolve(),
        )
        try:
            self.cache.store(cache_request, all_files, markdown)
        except OSError as exc:
            self.logger.warning("Could not cache context for %s: %s", name, exc)
        return markdown

    def _extract_all(self, file_paths: Sequence[str]) -> Dict[str, ExtractedStructure]:
        if not file_paths:
            return {}
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            return dict(zip(file_paths, executor.map(extract_structure, file_paths)))

    def _resolve_depth(self, request: FetchRequest) -> int:
        if request.reference_depth is None:
            return self.config.reference_depth
        return request.reference_depth

    def _no_directories_note(self, search_terms: Sequence[str]) -> str:
        configured = ", ".join(path.name for path in self.config.searchable_directories) or "None"
        return (
            "# No directories found matching search terms\n\n"
            f"**Search terms:** {', '.join(search_terms)}\n"
            f"**Configured directories:** {configured}\n"
        )


def _name_matches(name: str, terms: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(term in lowered for term in terms)


def _find_readme(directory: Path) -> Optional[Path]:
    for candidate in README_CANDIDATES:
        path = directory / candidate
        if path.is_file():
            return path
    return None


__all__ = ["Orchestrator", "README_CANDIDATES", "RESULT_SEPARATOR", "TOOLS_REFERENCE"]
