"""Balanced-delimiter scanning for multi-line declarations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

MAX_SIGNATURE_LINES = 64

_QUOTES = frozenset("'\"`")
_CONTINUATION_SUFFIXES = (",", "=>")


@dataclass
class DelimiterState:
    """Running brace/paren/bracket counts plus string-literal and block-comment state."""

    braces: int = 0
    parens: int = 0
    brackets: int = 0
    quote: Optional[str] = None
    in_block_comment: bool = False
    comment_start: Optional[int] = field(default=None, compare=False)

    @property
    def in_string(self) -> bool:
        return self.quote is not None

    @property
    def balanced(self) -> bool:
        return (
            self.braces <= 0
            and self.parens <= 0
            and self.brackets <= 0
            and self.quote is None
        )

    def feed(
        self,
        text: str,
        *,
        start: int = 0,
        stop_at_terminator: bool = False,
        stop_at_close: bool = False,
    ) -> Optional[Tuple[str, int]]:
        """Consume ``text[start:]`` and update the counts.

        With ``stop_at_terminator`` the scan halts on a ``{`` or ``;`` seen while
        balanced. With ``stop_at_close`` it halts on the ``}`` that brings the
        brace count back to zero. The halting character and its column are
        returned; ``None`` means the rest of the line was consumed. A ``/* ... */``
        comment left open at the end of ``text`` stays open for the next call.
        """
        self.comment_start = None
        escaped = False
        column = start
        while column < len(text):
            char = text[column]
            column += 1
            if self.in_block_comment:
                if char == "*" and text.startswith("/", column):
                    self.in_block_comment = False
                    column += 1
                continue
            if self.quote is not None:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == self.quote:
                    self.quote = None
                continue
            if char in _QUOTES:
                self.quote = char
            elif char == "/" and text.startswith("*", column):
                self.in_block_comment = True
                column += 1
            elif char == "/" and text.startswith("/", column):
                self.comment_start = column - 1
                break
            elif char == "#" and _is_hash_comment(text, column - 1):
                self.comment_start = column - 1
                break
            elif stop_at_terminator and char in "{;" and self.balanced:
                return char, column - 1
            elif char == "{":
                self.braces += 1
            elif char == "}":
                self.braces -= 1
                if stop_at_close and self.braces == 0:
                    return char, column - 1
            elif char == "(":
                self.parens += 1
            elif char == ")":
                self.parens -= 1
            elif char == "[":
                self.brackets += 1
            elif char == "]":
                self.brackets -= 1
        return None


@dataclass(frozen=True)
class SignatureSpan:
    """A declaration signature and where its body (if any) opens."""

    text: str
    start: int
    end: int
    body_line: Optional[int] = None
    body_column: Optional[int] = None

    @property
    def has_body(self) -> bool:
        return self.body_line is not None


def find_complete_signature(
    lines: Sequence[str],
    start: int,
    *,
    start_column: int = 0,
    end_column: Optional[int] = None,
    max_lines: int = MAX_SIGNATURE_LINES,
    continuation_prefixes: Tuple[str, ...] = (),
) -> SignatureSpan:
    """Return the declaration starting at ``lines[start]`` as one normalised line.

    Lines are accumulated while delimiters are unbalanced, a string literal is
    open, or the text so far ends in a continuation token (``,`` or ``=>``).
    The scan stops at the first balanced ``{`` (the body opener, excluded from
    the signature) or ``;`` (kept), or once delimiters balance without a
    continuation. An opener on the next non-blank line (Allman style) is still
    reported as the body. ``start_column``/``end_column`` restrict the first
    line, for declarations that share a line with an enclosing brace.
    ``continuation_prefixes`` extends the scan over following lines that start
    with one of the given words (``extends``, ``implements``, ...).
    """
    state = DelimiterState()
    parts: List[str] = []
    index = start
    offset = start_column
    text = lines[start][:end_column] if end_column is not None else lines[start]
    limit = min(len(lines) - 1, start + max_lines - 1)

    while True:
        halt = state.feed(text, start=offset, stop_at_terminator=True)
        if halt is not None:
            char, column = halt
            if char == "{":
                parts.append(text[offset:column])
                return SignatureSpan(
                    text=_normalise(" ".join(parts)),
                    start=start,
                    end=index,
                    body_line=index,
                    body_column=column,
                )
            parts.append(text[offset : column + 1])
            return SignatureSpan(text=_normalise(" ".join(parts)), start=start, end=index)

        code_end = state.comment_start if state.comment_start is not None else len(text)
        parts.append(text[offset:code_end])
        if index >= limit:
            break
        if not _needs_more(state, parts) and not _continues_with(
            lines, index, parts, continuation_prefixes
        ):
            break
        index += 1
        while index < limit and not lines[index].strip():
            index += 1
        text = lines[index]
        offset = 0

    signature = _normalise(" ".join(parts))
    opener = None if state.in_string else _next_line_opener(lines, index)
    if opener is not None:
        return SignatureSpan(
            text=signature,
            start=start,
            end=opener[0],
            body_line=opener[0],
            body_column=opener[1],
        )
    return SignatureSpan(text=signature, start=start, end=index)


def _needs_more(state: DelimiterState, parts: Sequence[str]) -> bool:
    if state.braces > 0 or state.parens > 0 or state.brackets > 0 or state.in_string:
        return True
    return " ".join(parts).rstrip().endswith(_CONTINUATION_SUFFIXES)


def _continues_with(
    lines: Sequence[str], index: int, parts: Sequence[str], prefixes: Tuple[str, ...]
) -> bool:
    if not prefixes or " ".join(parts).rstrip().endswith((":", ";")):
        return False
    cursor = index + 1
    while cursor < len(lines) and not lines[cursor].strip():
        cursor += 1
    if cursor >= len(lines):
        return False
    stripped = lines[cursor].lstrip()
    return any(
        stripped.startswith(prefix)
        and (len(stripped) == len(prefix) or not stripped[len(prefix)].isalnum())
        for prefix in prefixes
    )


def _next_line_opener(lines: Sequence[str], index: int) -> Optional[Tuple[int, int]]:
    cursor = index + 1
    while cursor < len(lines) and not lines[cursor].strip():
        cursor += 1
    if cursor >= len(lines):
        return None
    line = lines[cursor]
    stripped = line.lstrip()
    if stripped.startswith("{"):
        return cursor, len(line) - len(stripped)
    return None


def _is_hash_comment(text: str, column: int) -> bool:
    # "# note" style comments only; "#include", "#[attr]" and "this.#x" are code.
    before_ok = column == 0 or text[column - 1].isspace()
    after_ok = column + 1 >= len(text) or text[column + 1] in " \t#!"
    return before_ok and after_ok


def _normalise(text: str) -> str:
    return " ".join(text.split())


__all__ = [
    "MAX_SIGNATURE_LINES",
    "DelimiterState",
    "SignatureSpan",
    "find_complete_signature",
]
