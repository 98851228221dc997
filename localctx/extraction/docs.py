"""Collects documentation comments that precede a declaration."""

from __future__ import annotations

from typing import List, Optional, Sequence

_LINE_DOC_PREFIXES = ("///", "//!")
_BLOCK_DOC_OPENERS = ("/**", "/*!")
_PREPROCESSOR_PREFIXES = (
    "#include",
    "#define",
    "#if",
    "#endif",
    "#else",
    "#pragma",
    "#import",
    "#region",
    "#endregion",
    "#!",
    "#[",
)


def collect_documentation(lines: Sequence[str], index: int) -> Optional[str]:
    """Return the doc comment directly above ``lines[index]``, de-prefixed.

    Supported styles are ``///``/``//!`` line docs, ``/** ... */`` blocks and
    ``#`` comments. Annotation or decorator lines sitting between the comment
    and the declaration are skipped. Blank lines are tolerated once a doc block
    has started; the first other line ends the scan.
    """
    cursor = index - 1
    while cursor >= 0 and _is_annotation(lines[cursor].strip()):
        cursor -= 1

    collected: List[str] = []
    while cursor >= 0:
        stripped = lines[cursor].strip()
        text = _doc_text(stripped)
        if text is not None:
            collected.append(text)
        elif stripped or not collected:
            break
        cursor -= 1

    collected.reverse()
    while collected and not collected[0]:
        collected.pop(0)
    while collected and not collected[-1]:
        collected.pop()
    return "\n".join(collected) if collected else None


def is_comment_line(stripped: str) -> bool:
    """Return True when a stripped line is a comment of any supported style."""
    if stripped.startswith(("//", "/*", "*")):
        return True
    return stripped.startswith("#") and not stripped.startswith(_PREPROCESSOR_PREFIXES)


def _doc_text(stripped: str) -> Optional[str]:
    if stripped.startswith(_LINE_DOC_PREFIXES):
        return stripped[3:].strip()
    if stripped.startswith(_BLOCK_DOC_OPENERS):
        body = stripped[3:]
        if body.endswith("*/"):
            body = body[:-2]
        return body.strip()
    if stripped.startswith("*/"):
        return ""
    if stripped.startswith("*"):
        body = stripped[1:]
        if body.endswith("*/"):
            body = body[:-2]
        return body.strip()
    if stripped.startswith("#") and not stripped.startswith(_PREPROCESSOR_PREFIXES):
        return stripped.lstrip("#").strip()
    return None


def _is_annotation(stripped: str) -> bool:
    return stripped.startswith(("@", "#["))


__all__ = ["collect_documentation", "is_comment_line"]
