"""Renders extracted structures into the markdown context bundle."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader

from ..logging import get_logger
from ..models import ExtractedStructure
from ..repo_walker import fence_language

logger = get_logger("render.markdown")

_TEMPLATE_NAME = "context.md.j2"


class MarkdownBuilder:
    """Assembles the per-directory markdown document from a Jinja2 template."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def build(
        self,
        directory_name: str,
        matched: Mapping[str, ExtractedStructure],
        referencing: Optional[Mapping[str, ExtractedStructure]] = None,
        readme_path: Optional[str | Path] = None,
        root: Optional[str | Path] = None,
        *,
        generated_at: Optional[str] = None,
    ) -> str:
        readme: Optional[str] = None
        readme_unreadable = False
        if readme_path is not None:
            try:
                readme = Path(readme_path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Could not read README %s: %s", readme_path, exc)
                readme_unreadable = True

        root_path = Path(root) if root is not None else None
        template = self._env.get_template(_TEMPLATE_NAME)
        rendered = template.render(
            directory_name=directory_name,
            generated_at=generated_at
            or datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            readme=readme.strip() if readme is not None else None,
            readme_unreadable=readme_unreadable,
            matched=_entries(matched, root_path),
            referencing=_entries(referencing or {}, root_path),
        )
        return rendered.strip() + "\n"


def _entries(
    structures: Mapping[str, ExtractedStructure], root: Optional[Path]
) -> List[Dict[str, object]]:
    entries: List[Dict[str, object]] = []
    for file_path in sorted(structures):
        entries.append(
            {
                "name": Path(file_path).name,
                "display_path": display_path(file_path, root),
                "language": fence_language(file_path),
                "structure": structures[file_path],
            }
        )
    return entries


def display_path(file_path: str | Path, root: Optional[Path]) -> str:
    """Return ``file_path`` relative to ``root``, or its last three segments."""
    path = Path(file_path)
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return "/".join(path.parts[-3:])


__all__ = ["MarkdownBuilder", "display_path"]
