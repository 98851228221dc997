"""Glob pattern compilation with ``**``, brace alternatives and basename matching."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..logging import get_logger

logger = get_logger("discovery.globbing")


@dataclass(frozen=True)
class GlobPattern:
    """A compiled glob matched against ``/``-separated relative paths."""

    pattern: str
    regex: "re.Pattern[str]"
    match_base: bool

    def matches(self, rel_path: str) -> bool:
        if self.regex.fullmatch(rel_path):
            return True
        if self.match_base:
            return self.regex.fullmatch(rel_path.rsplit("/", 1)[-1]) is not None
        return False


@dataclass(frozen=True)
class GlobSet:
    """Positive patterns plus ``!``-prefixed exclusions."""

    includes: Tuple[GlobPattern, ...]
    excludes: Tuple[GlobPattern, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.includes)

    def matches(self, rel_path: str) -> bool:
        if not any(pattern.matches(rel_path) for pattern in self.includes):
            return False
        return not any(pattern.matches(rel_path) for pattern in self.excludes)


def compile_glob(pattern: str) -> Optional[GlobPattern]:
    """Compile ``pattern`` or return ``None`` (with a warning) when it is unusable."""
    cleaned = pattern.strip()
    if cleaned.startswith("./"):
        cleaned = cleaned[2:]
    if not cleaned:
        return None
    try:
        regex = re.compile(translate_glob(cleaned))
    except re.error as exc:
        logger.warning("Ignoring invalid glob pattern %r: %s", pattern, exc)
        return None
    return GlobPattern(pattern=pattern, regex=regex, match_base="/" not in cleaned)


def compile_globs(patterns: Sequence[str]) -> GlobSet:
    includes: List[GlobPattern] = []
    excludes: List[GlobPattern] = []
    for raw in patterns:
        negate = raw.startswith("!")
        compiled = compile_glob(raw[1:] if negate else raw)
        if compiled is None:
            continue
        (excludes if negate else includes).append(compiled)
    return GlobSet(includes=tuple(includes), excludes=tuple(excludes))


def translate_glob(pattern: str) -> str:
    """Translate a glob into a regular expression body (without anchors).

    ``**`` spans any number of path segments (including none), ``*`` and ``?``
    stay within one segment, ``[...]`` is a character class (``[!...]``
    negates) and ``{a,b}`` lists alternatives, which may nest.
    """
    out: List[str] = []
    brace_depth = 0
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                at_segment_start = index == 0 or pattern[index - 1] == "/"
                after = index + 2
                if at_segment_start and pattern.startswith("/", after):
                    out.append("(?:.*/)?")
                    index = after + 1
                    continue
                if at_segment_start and after == length:
                    out.append(".*")
                    index = after
                    continue
                out.append("[^/]*")
                index = after
                continue
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            closing = _class_end(pattern, index)
            if closing is None:
                out.append(re.escape(char))
            else:
                body = pattern[index + 1 : closing]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                index = closing
        elif char == "{" and _has_brace_close(pattern, index):
            brace_depth += 1
            out.append("(?:")
        elif char == "," and brace_depth:
            out.append("|")
        elif char == "}" and brace_depth:
            brace_depth -= 1
            out.append(")")
        elif char == "\\" and index + 1 < length:
            index += 1
            out.append(re.escape(pattern[index]))
        else:
            out.append(re.escape(char))
        index += 1
    return "".join(out)


def _class_end(pattern: str, start: int) -> Optional[int]:
    cursor = start + 1
    if cursor < len(pattern) and pattern[cursor] in "!^":
        cursor += 1
    if cursor < len(pattern) and pattern[cursor] == "]":
        cursor += 1
    closing = pattern.find("]", cursor)
    return closing if closing != -1 else None


def _has_brace_close(pattern: str, start: int) -> bool:
    depth = 0
    for char in pattern[start:]:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return True
    return False


__all__ = ["GlobPattern", "GlobSet", "compile_glob", "compile_globs", "translate_glob"]
