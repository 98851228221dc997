"""Heuristic, parser-free extraction of classes, methods and functions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import ClassInfo, ExtractedStructure, FunctionInfo, MethodInfo
from .docs import collect_documentation, is_comment_line
from .scanner import DelimiterState, SignatureSpan, find_complete_signature

logger = get_logger("extraction.structure")

_CLASS_LEAD = re.compile(
    r"^(?:export\s+)?(?:default\s+)?"
    r"(?:(?:public|private|protected|internal|abstract|sealed|final|static|data|open|"
    r"base|interface|inline|partial|declare|enum|value|annotation)\s+)*"
    r"(class|mixin|enum|extension|interface|struct|trait|object|record)\s+(\w+)"
)

_MODIFIERS = (
    r"(?:(?:static|final|const|late|public|private|protected|internal|override|async|"
    r"abstract|virtual|synchronized|external|open|suspend|inline|readonly|unsafe|extern|"
    r"export|default|factory|pub(?:\([\w:]+\))?|def|fun|func|fn|function\*?)\s+)*"
)
_TYPE_PARAMS = r"(?:<[^()]*?>\s*)?"
_RETURN_TYPE = r"(?:[\w.$]+(?:<[^()]*?>)?[\[\]?*&]*\s+)?"

_CLASS_CONTINUATIONS = ("extends", "implements", "with", "where", "on", ":")

_METHOD_LEAD = re.compile(
    r"^" + _MODIFIERS + _TYPE_PARAMS + _RETURN_TYPE + r"\*?(\w+)\s*(?:<[^()]*?>)?\s*\("
)
_GETTER_LEAD = re.compile(
    r"^" + _MODIFIERS + _RETURN_TYPE
    + r"get\s+(\w+)\s*(?:\(\s*\))?\s*(?::\s*[^{=;]+?)?\s*(?:\{|=>|;|$)"
)
_SETTER_LEAD = re.compile(r"^" + _MODIFIERS + _RETURN_TYPE + r"set\s+(\w+)\s*\(")

_FUNCTION_LEAD = re.compile(
    r"^" + _MODIFIERS
    + r"(?P<keyword>(?:def|fn|func|fun|function\*?|sub)\s+(?:\([^)]*\)\s*)?)?"
    + _TYPE_PARAMS
    + r"(?P<type>[\w.$]+(?:<[^()]*?>)?[\[\]?*&]*\s+)?"
    + r"\*?&?(?P<name>\w+)\s*(?:<[^()]*?>)?\s*\("
)
_ARROW_FUNCTION_LEAD = re.compile(
    r"^(?:export\s+)?(?:const|let|var)\s+(\w+)\s*(?::[^=]+)?=\s*(?:async\s+)?"
    r"(?:function\b|(?:\([^)]*\)|\w+)\s*(?::\s*[^=]+)?=>)"
)
_DECLARATION_KEYWORDS = re.compile(
    r"^(?:[\w()]+\s+)*(?:def|fn|func|fun|function\*?|sub)\s"
)

_CONTROL_KEYWORDS = frozenset(
    {
        "if",
        "for",
        "while",
        "switch",
        "catch",
        "assert",
        "return",
        "elif",
        "with",
        "sizeof",
        "typeof",
        "new",
        "not",
        "in",
        "is",
        "and",
        "or",
        "except",
        "lambda",
    }
)

_STATEMENT_PREFIXES = re.compile(
    r"^(?:import|from|package|part|library|typedef|using|require|let|var|const|final|"
    r"return|throw|raise|await|yield|delete|else|case|default:|module|namespace|print|echo)\b"
)


@dataclass(frozen=True)
class _BodySegment:
    line: int
    start_column: int
    end_column: Optional[int]
    text: str


@dataclass(frozen=True)
class _ClassMatch:
    info: ClassInfo
    start: int
    end: int


def extract_structure(file_path: str | Path) -> ExtractedStructure:
    """Read ``file_path`` and extract its structure; never raises."""
    path_str = str(file_path)
    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s for extraction: %s", path_str, exc)
        return ExtractedStructure.empty(path_str)
    try:
        return extract_structure_from_text(path_str, text)
    except Exception as exc:  # pragma: no cover - defensive guard
        logger.warning("Structure extraction failed for %s: %s", path_str, exc)
        return ExtractedStructure.empty(path_str)


def extract_structure_from_text(file_path: str, text: str) -> ExtractedStructure:
    """Extract classes and top-level functions from source text."""
    lines = text.splitlines()
    class_matches = _extract_classes(lines)
    functions = _extract_functions(lines, class_matches)
    return ExtractedStructure(
        file_path=file_path,
        classes=tuple(match.info for match in class_matches),
        functions=tuple(functions),
    )


# ----------------------------------------------------------------------
# Classes


def _extract_classes(lines: Sequence[str]) -> List[_ClassMatch]:
    matches: List[_ClassMatch] = []
    index = 0
    while index < len(lines):
        stripped = lines[index].strip()
        lead = _CLASS_LEAD.match(stripped) if stripped and not is_comment_line(stripped) else None
        if lead is None:
            index += 1
            continue

        class_name = lead.group(2)
        span = find_complete_signature(
            lines, index, continuation_prefixes=_CLASS_CONTINUATIONS
        )
        documentation = collect_documentation(lines, index)
        segments, end = _class_body(lines, index, span)
        methods = _extract_methods(lines, class_name, segments)
        matches.append(
            _ClassMatch(
                info=ClassInfo(
                    name=class_name,
                    signature=span.text,
                    documentation=documentation,
                    methods=tuple(methods),
                ),
                start=index,
                end=end,
            )
        )
        index = max(end, index) + 1
    return matches


def _class_body(
    lines: Sequence[str], index: int, span: SignatureSpan
) -> Tuple[List[_BodySegment], int]:
    if span.has_body:
        return _brace_body(lines, span.body_line, span.body_column)  # type: ignore[arg-type]
    if span.text.endswith(":"):
        return _indented_body(lines, index, span.end)
    return [], span.end


def _brace_body(
    lines: Sequence[str], open_line: int, open_column: int
) -> Tuple[List[_BodySegment], int]:
    """Walk a ``{ ... }`` body, returning member-level segments and the closing line."""
    state = DelimiterState(braces=1)
    segments: List[_BodySegment] = []
    index = open_line
    offset = open_column + 1
    while index < len(lines):
        line = lines[index]
        at_member_level = (
            state.braces == 1
            and state.parens <= 0
            and state.brackets <= 0
            and not state.in_string
            and not state.in_block_comment
        )
        halt = state.feed(line, start=offset, stop_at_close=True)
        end_column = halt[1] if halt is not None else None
        if at_member_level:
            text = line[offset:end_column]
            if text.strip():
                segments.append(_BodySegment(index, offset, end_column, text))
        if halt is not None:
            return segments, index
        index += 1
        offset = 0
    return segments, len(lines) - 1


def _indented_body(
    lines: Sequence[str], index: int, header_end: int
) -> Tuple[List[_BodySegment], int]:
    """Collect the indentation-delimited body of a ``:``-terminated declaration."""
    base_indent = _indent(lines[index])
    member_indent: Optional[int] = None
    segments: List[_BodySegment] = []
    end = header_end
    cursor = header_end + 1
    while cursor < len(lines):
        line = lines[cursor]
        if not line.strip():
            cursor += 1
            continue
        indent = _indent(line)
        if indent <= base_indent:
            break
        if member_indent is None:
            member_indent = indent
        if indent == member_indent:
            segments.append(_BodySegment(cursor, 0, None, line))
        end = cursor
        cursor += 1
    return segments, end


def _extract_methods(
    lines: Sequence[str], class_name: str, segments: Sequence[_BodySegment]
) -> List[MethodInfo]:
    constructor = _constructor_pattern(class_name)
    methods: List[MethodInfo] = []
    consumed_until = -1
    for segment in segments:
        if segment.line <= consumed_until:
            continue
        current: Optional[_BodySegment] = segment
        while current is not None:
            stripped = current.text.strip()
            if is_comment_line(stripped):
                break
            if _STATEMENT_PREFIXES.match(stripped) and constructor.match(stripped) is None:
                break

            name = _member_name(stripped, class_name, constructor)
            if name is None:
                break

            span = find_complete_signature(
                lines,
                current.line,
                start_column=current.start_column,
                end_column=current.end_column,
            )
            consumed_until = span.end
            methods.append(
                MethodInfo(
                    name=name,
                    signature=span.text,
                    documentation=collect_documentation(lines, current.line),
                )
            )
            current = _rest_of_line(lines, current, span)
    return methods


def _rest_of_line(
    lines: Sequence[str], segment: _BodySegment, span: SignatureSpan
) -> Optional[_BodySegment]:
    """Return the text after a member whose body opens and closes on the segment's line."""
    if span.body_line != segment.line or span.body_column is None:
        return None
    line = lines[segment.line][: segment.end_column]
    halt = DelimiterState(braces=1).feed(line, start=span.body_column + 1, stop_at_close=True)
    if halt is None:
        return None
    start = halt[1] + 1
    text = line[start:]
    if not text.strip():
        return None
    return _BodySegment(segment.line, start, segment.end_column, text)


def _member_name(stripped: str, class_name: str, constructor: re.Pattern[str]) -> Optional[str]:
    ctor = constructor.match(stripped)
    if ctor is not None:
        named = ctor.group("named")
        if named:
            return f"{class_name}.{named}"
        keyword = ctor.group("keyword")
        return keyword or class_name

    getter = _GETTER_LEAD.match(stripped)
    if getter is not None:
        return f"get {getter.group(1)}"

    setter = _SETTER_LEAD.match(stripped)
    if setter is not None:
        return f"set {setter.group(1)}"

    method = _METHOD_LEAD.match(stripped)
    if method is not None and method.group(1) not in _CONTROL_KEYWORDS:
        return method.group(1)
    return None


def _constructor_pattern(class_name: str) -> re.Pattern[str]:
    return re.compile(
        r"^(?:(?:public|private|protected|internal|const|factory|explicit|inline|def)\s+)*"
        r"(?:" + re.escape(class_name) + r"(?:\s*\.\s*(?P<named>\w+))?"
        r"|(?P<keyword>constructor|__init__|init))\s*\("
    )


# ----------------------------------------------------------------------
# Functions


def _extract_functions(
    lines: Sequence[str], class_matches: Sequence[_ClassMatch]
) -> List[FunctionInfo]:
    blanked = _blank_class_spans(lines, class_matches)
    functions: List[FunctionInfo] = []
    index = 0
    while index < len(blanked):
        stripped = blanked[index].strip()
        if not stripped or is_comment_line(stripped):
            index += 1
            continue

        arrow = _ARROW_FUNCTION_LEAD.match(stripped)
        name: Optional[str] = None
        declared = False
        if arrow is not None:
            name = arrow.group(1)
            declared = True
        elif not _STATEMENT_PREFIXES.match(stripped):
            lead = _FUNCTION_LEAD.match(stripped)
            type_name = (lead.group("type") or "").strip() if lead is not None else ""
            if (
                lead is not None
                and lead.group("name") not in _CONTROL_KEYWORDS
                and type_name not in _CONTROL_KEYWORDS
            ):
                name = lead.group("name")
                declared = (
                    bool(type_name)
                    or bool(lead.group("keyword"))
                    or _DECLARATION_KEYWORDS.match(stripped) is not None
                )

        if name is None:
            index += 1
            continue

        span = find_complete_signature(blanked, index)
        if not (declared or span.has_body or span.text.endswith((":", "=>"))):
            index += 1
            continue

        functions.append(
            FunctionInfo(
                name=name,
                signature=span.text,
                documentation=collect_documentation(lines, index),
            )
        )
        index = _skip_function_body(blanked, index, span) + 1
    return functions


def _skip_function_body(lines: Sequence[str], index: int, span: SignatureSpan) -> int:
    if span.has_body:
        _, end = _brace_body(lines, span.body_line, span.body_column)  # type: ignore[arg-type]
        return end
    if span.text.endswith(":"):
        _, end = _indented_body(lines, index, span.end)
        return end
    return span.end


def _blank_class_spans(
    lines: Sequence[str], class_matches: Sequence[_ClassMatch]
) -> List[str]:
    blanked = list(lines)
    for match in class_matches:
        for line_index in range(match.start, min(match.end, len(blanked) - 1) + 1):
            blanked[line_index] = ""
    return blanked


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


__all__ = ["extract_structure", "extract_structure_from_text"]
